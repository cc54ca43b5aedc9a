import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import selectinload
from sqlmodel import Session, or_, select

from boutique.database import get_session
from boutique.models.order import Order
from boutique.utils.serializers import serialize_order

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
def track_orders(
    phone: Optional[str] = None,
    email: Optional[str] = None,
    session: Session = Depends(get_session),
):
    """Customer order lookup by the phone and/or email used at checkout."""
    phone = (phone or "").strip()
    email = (email or "").strip()

    if not phone and not email:
        raise HTTPException(400, "Phone number or email is required")

    query = (
        select(Order)
        .options(selectinload(Order.items))
        .order_by(Order.created_at.desc())
    )

    if phone and email:
        query = query.where(or_(Order.delivery_phone == phone, Order.delivery_email == email))
    elif phone:
        query = query.where(Order.delivery_phone == phone)
    else:
        query = query.where(Order.delivery_email == email)

    try:
        orders = session.exec(query).all()
    except Exception:
        logger.exception("Failed to fetch orders")
        raise HTTPException(500, "Failed to fetch orders")

    return {"success": True, "data": [serialize_order(o) for o in orders]}
