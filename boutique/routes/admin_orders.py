import logging
from datetime import datetime, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, or_, select

from boutique.constants.order_status import ALLOWED_TRANSITIONS, OrderStatus
from boutique.database import get_session
from boutique.dependencies.admin import require_admin
from boutique.models.order import Order
from boutique.schemas.admin_schemas import OrderUpdate
from boutique.services.admin_log_service import log_admin_action
from boutique.utils.pagination import paginate
from boutique.utils.serializers import serialize_order

logger = logging.getLogger(__name__)

router = APIRouter()

DATE_RANGES = {
    "week": timedelta(days=7),
    "month": timedelta(days=30),
}


# -------- ADMIN ORDERS --------

@router.get("")
def list_orders(
    page: int = 1,
    limit: int = 20,
    status: Optional[OrderStatus] = None,
    search: Optional[str] = None,
    date: Optional[str] = None,
    session: Session = Depends(get_session),
    _: dict = Depends(require_admin),
):
    query = select(Order)

    if status:
        query = query.where(Order.status == status.value)

    if date == "today":
        query = query.where(
            Order.created_at >= datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
        )
    elif date in DATE_RANGES:
        query = query.where(Order.created_at >= datetime.utcnow() - DATE_RANGES[date])

    if search:
        like = f"%{search}%"
        query = query.where(
            or_(Order.order_number.ilike(like), Order.delivery_name.ilike(like))
        )

    query = query.order_by(Order.created_at.desc())

    data = paginate(session=session, query=query, page=page, limit=limit)
    data["results"] = [serialize_order(o) for o in data["results"]]

    return {"success": True, "data": data}


@router.get("/{order_id}")
def order_details(
    order_id: str,
    session: Session = Depends(get_session),
    _: dict = Depends(require_admin),
):
    order = session.get(Order, order_id)

    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    return {"success": True, "data": serialize_order(order)}


@router.put("/{order_id}")
def update_order(
    order_id: str,
    data: OrderUpdate,
    session: Session = Depends(get_session),
    admin: dict = Depends(require_admin),
):
    """Back-office status and tracking updates."""
    order = session.get(Order, order_id)

    if not order:
        raise HTTPException(status_code=404, detail="Order not found")

    previous_status = order.status
    previous_tracking = order.tracking_number

    if data.status is not None and data.status.value != order.status:
        if data.status.value not in ALLOWED_TRANSITIONS.get(order.status, []):
            raise HTTPException(
                400, f"Cannot change order status from {order.status} to {data.status.value}"
            )
        order.status = data.status.value

    if data.tracking_number is not None:
        order.tracking_number = data.tracking_number

    order.updated_at = datetime.utcnow()

    try:
        session.add(order)
        session.commit()
        session.refresh(order)
    except Exception:
        session.rollback()
        logger.exception(f"Error updating order {order_id}")
        raise HTTPException(500, "Failed to update order")

    if order.status != previous_status:
        log_admin_action(
            session, admin["email"], "order_status_update", "order", order.id,
            {"from": previous_status, "to": order.status},
        )

    if order.tracking_number != previous_tracking:
        log_admin_action(
            session, admin["email"], "order_tracking_update", "order", order.id,
            {"tracking_number": order.tracking_number},
        )

    return {"success": True, "data": serialize_order(order)}
