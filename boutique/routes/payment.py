import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from boutique.config import settings
from boutique.constants.order_status import OrderStatus, PAID_STATUSES
from boutique.database import get_session
from boutique.schemas.payment_schemas import CreateOrderRequest, PaymentVerifyRequest
from boutique.services.order_service import create_checkout_order
from boutique.services.order_store import confirm_payment, find_by_gateway_order_id
from boutique.services.payment_gateway import (
    GatewayNotConfigured,
    PaymentGateway,
    PaymentGatewayError,
    get_payment_gateway,
)
from boutique.services.rate_limiter import limit_order_creation
from boutique.services.signature import verify_payment_signature, verify_webhook_signature

logger = logging.getLogger(__name__)

router = APIRouter()

# Razorpay sends either of these once money is captured
PAYMENT_SUCCESS_EVENTS = ("payment.captured", "order.paid")


async def raw_body(request: Request) -> bytes:
    return await request.body()


def _entity(event: dict, name: str) -> dict:
    """Return `payload.<name>.entity`, or an empty dict when any level is not an object."""
    payload = event.get("payload")
    if not isinstance(payload, dict):
        return {}
    wrapper = payload.get(name)
    if not isinstance(wrapper, dict):
        return {}
    entity = wrapper.get("entity")
    return entity if isinstance(entity, dict) else {}


@router.post("/create-order", dependencies=[Depends(limit_order_creation)])
def create_order(
    payload: CreateOrderRequest,
    session: Session = Depends(get_session),
    gateway: PaymentGateway = Depends(get_payment_gateway),
):
    """Create a Razorpay order and the pending local order behind it."""
    try:
        data = create_checkout_order(session, gateway, payload)
    except HTTPException:
        raise
    except GatewayNotConfigured as e:
        raise HTTPException(500, str(e))
    except PaymentGatewayError as e:
        raise HTTPException(500, str(e))
    except Exception:
        logger.exception("Razorpay order creation error")
        raise HTTPException(500, "Failed to create payment order")

    return {"success": True, "data": data}


@router.post("/verify")
def verify_payment(
    payload: PaymentVerifyRequest,
    session: Session = Depends(get_session),
):
    """
    Confirm the order from the checkout widget callback.

    Safe to call more than once: a second call for an already confirmed
    order succeeds without touching the row.
    """
    secret = settings.RAZORPAY_KEY_SECRET
    if not secret:
        logger.error("RAZORPAY_KEY_SECRET is not set in environment variables")
        raise HTTPException(500, "Payment configuration error")

    if not verify_payment_signature(
        secret,
        payload.razorpay_order_id,
        payload.razorpay_payment_id,
        payload.razorpay_signature,
    ):
        raise HTTPException(400, "Payment verification failed")

    try:
        transitioned = confirm_payment(
            session,
            payload.razorpay_order_id,
            payload.razorpay_payment_id,
            payload.razorpay_signature,
        )
        order = find_by_gateway_order_id(session, payload.razorpay_order_id)
    except Exception:
        logger.exception(f"Payment verification error for {payload.razorpay_order_id}")
        raise HTTPException(500, "Payment verification failed")

    if not order:
        logger.error(f"Verified payment {payload.razorpay_payment_id} for unknown order {payload.razorpay_order_id}")
        raise HTTPException(500, "Payment successful but order not found")

    if order.status not in PAID_STATUSES:
        logger.warning(
            f"Verified payment {payload.razorpay_payment_id} for order {order.order_number} in status {order.status}"
        )
        raise HTTPException(500, "Payment successful but order could not be confirmed")

    if transitioned:
        logger.info(f"Order {order.order_number} confirmed by checkout callback")
    else:
        logger.info(f"Order {order.order_number} already {order.status}, checkout callback is a no-op")

    return {
        "success": True,
        "data": {
            "orderId": order.order_number,
            "paymentId": order.razorpay_payment_id,
            "total": order.total,
            "status": order.status,
        },
    }


@router.post("/webhook")
def payment_webhook(
    body: bytes = Depends(raw_body),
    x_razorpay_signature: Optional[str] = Header(default=None),
    session: Session = Depends(get_session),
):
    """
    Server-to-server payment events from Razorpay.

    This is the authoritative confirmation path. Anything this service does not
    care about is acknowledged with 200 so Razorpay stops retrying; only a
    failed database update answers 500, which Razorpay retries later.
    """
    secret = settings.RAZORPAY_WEBHOOK_SECRET
    if not secret:
        logger.error("Webhook Error: RAZORPAY_WEBHOOK_SECRET missing")
        raise HTTPException(500, "Server configuration error")

    if not x_razorpay_signature:
        raise HTTPException(400, "Missing signature")

    # signature covers the raw bytes, never a re-serialized body
    if not verify_webhook_signature(secret, body, x_razorpay_signature):
        logger.error("Webhook Error: Invalid signature")
        raise HTTPException(400, "Invalid signature")

    try:
        event = json.loads(body)
    except ValueError:
        raise HTTPException(400, "Invalid payload")
    if not isinstance(event, dict):
        raise HTTPException(400, "Invalid payload")

    event_name = event.get("event")
    logger.info(f"Received Razorpay webhook: {event_name}")

    if event_name not in PAYMENT_SUCCESS_EVENTS:
        return {"success": True, "message": "Event ignored"}

    payment = _entity(event, "payment")
    gateway_order = _entity(event, "order")

    razorpay_order_id = payment.get("order_id") or gateway_order.get("id")
    razorpay_payment_id = payment.get("id")
    if not isinstance(razorpay_payment_id, str):
        razorpay_payment_id = None

    if not razorpay_order_id or not isinstance(razorpay_order_id, str):
        logger.warning(f"Webhook: Missing order_id in {event_name} payload")
        return {"success": True, "message": "Ignored: No order_id"}

    try:
        order = find_by_gateway_order_id(session, razorpay_order_id)

        if not order:
            logger.error(f"Webhook: Order not found for razorpay_order_id: {razorpay_order_id}")
            return {"success": True, "message": "Order not found"}

        if order.status in PAID_STATUSES:
            logger.info(f"Webhook: Order {razorpay_order_id} already {order.status}. Skipping.")
            return {"success": True, "message": "Order already confirmed"}

        if order.status == OrderStatus.cancelled.value:
            logger.warning(
                f"Webhook: payment {razorpay_payment_id} captured for cancelled order {order.order_number}"
            )
            return {"success": True, "message": "Order not awaiting payment"}

        transitioned = confirm_payment(
            session, razorpay_order_id, razorpay_payment_id, x_razorpay_signature
        )
    except SQLAlchemyError:
        logger.exception("Webhook: Failed to update order status")
        raise HTTPException(500, "Database update failed")
    except Exception:
        logger.exception("Webhook processing error")
        raise HTTPException(500, "Internal server error")

    if not transitioned:
        logger.info(f"Webhook: Order {razorpay_order_id} was confirmed concurrently. Skipping.")
        return {"success": True, "message": "Order already confirmed"}

    logger.info(f"Webhook: Successfully confirmed order {razorpay_order_id}")
    return {"success": True, "message": "Order confirmed"}
