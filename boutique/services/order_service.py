import logging
import time
from typing import Any, Dict, List, Tuple

from fastapi import HTTPException
from sqlmodel import Session

from boutique.config import settings
from boutique.models.order import Order
from boutique.models.order_item import OrderItem
from boutique.models.product import Product
from boutique.schemas.payment_schemas import CartLine, CreateOrderRequest
from boutique.services.order_store import create_pending_order
from boutique.services.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


def price_cart(session: Session, lines: List[CartLine]) -> Tuple[List[OrderItem], int]:
    """
    Price every cart line from the products table.

    Client prices never reach the totals. Lines for unknown products are
    dropped.
    """
    items = []
    subtotal = 0

    for line in lines:
        if line.quantity > settings.MAX_QUANTITY_PER_LINE:
            raise HTTPException(
                400,
                f"Quantity for product {line.id} exceeds the limit of {settings.MAX_QUANTITY_PER_LINE}",
            )

        product = session.get(Product, line.id)
        if not product:
            logger.warning(f"Dropping unknown product {line.id} from cart")
            continue

        line_total = product.price * line.quantity
        subtotal += line_total

        items.append(OrderItem(
            product_id=product.id,
            product_name=product.name,
            product_price=product.price,
            size=line.size,
            quantity=line.quantity,
            line_total=line_total,
        ))

    return items, subtotal


def create_checkout_order(
    session: Session,
    gateway: PaymentGateway,
    payload: CreateOrderRequest,
) -> Dict[str, Any]:
    """
    Create the gateway order and the matching pending local order.

    The gateway call happens before anything is written, so a gateway failure
    never leaves an orphaned local order.
    """
    if not payload.items:
        raise HTTPException(400, "Cart is empty")

    items, subtotal = price_cart(session, payload.items)
    if not items:
        raise HTTPException(400, "No valid products in cart")

    shipping_cost = settings.SHIPPING_COST
    total = subtotal + shipping_cost
    currency = payload.currency or settings.CURRENCY
    receipt = payload.receipt or f"rcpt_{int(time.time() * 1000)}"
    customer = payload.customer

    razorpay_order = gateway.create_order(
        amount=total,
        currency=currency,
        receipt=receipt,
        notes={**(payload.notes or {}), "phone": customer.phone},
    )

    order = Order(
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        total=total,
        razorpay_order_id=razorpay_order["id"],
        delivery_name=customer.full_name,
        delivery_phone=customer.phone,
        delivery_email=customer.email,
        delivery_address=customer.address,
        delivery_city=customer.city,
        delivery_state=customer.state,
        delivery_zip=customer.zip_code,
    )
    order = create_pending_order(session, order, items, customer)

    logger.info(
        f"Order {order.order_number} created, pending payment on {razorpay_order['id']} (total {total})"
    )

    return {
        "orderId": razorpay_order["id"],
        "amount": razorpay_order["amount"],
        "currency": razorpay_order.get("currency", currency),
        "receipt": razorpay_order.get("receipt", receipt),
        "dbOrderId": order.order_number,
    }
