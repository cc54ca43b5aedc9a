import logging
import secrets
from datetime import datetime, timedelta

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import func
from sqlmodel import Session, select

from boutique.config import settings
from boutique.constants.order_status import OrderStatus, PAID_STATUSES
from boutique.database import get_session
from boutique.dependencies.admin import require_admin
from boutique.models.order import Order
from boutique.models.product import Product
from boutique.schemas.admin_schemas import AdminLogin
from boutique.utils.token import ADMIN_COOKIE_NAME, create_admin_token

logger = logging.getLogger(__name__)

router = APIRouter()

SALES_DAYS = 30


# -------- ADMIN SESSION --------

@router.post("/login")
def admin_login(data: AdminLogin, response: Response):
    admin_email = settings.ADMIN_EMAIL
    admin_password = settings.ADMIN_PASSWORD

    if not admin_email or not admin_password:
        logger.error("Missing ADMIN_EMAIL or ADMIN_PASSWORD in environment variables")
        raise HTTPException(500, "Server configuration error")

    valid_email = data.email.strip().lower() == admin_email.strip().lower()
    valid_password = secrets.compare_digest(
        data.password.encode("utf-8"), admin_password.encode("utf-8")
    )

    if not valid_email or not valid_password:
        raise HTTPException(401, "Invalid email or password")

    token = create_admin_token(admin_email.strip().lower())

    response.set_cookie(
        key=ADMIN_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.ENV == "production",
        samesite="lax",
        max_age=settings.admin_session_hours * 60 * 60,
        path="/",
    )

    return {"success": True, "user": {"email": admin_email.strip().lower()}}


@router.post("/logout")
def admin_logout(response: Response):
    response.delete_cookie(ADMIN_COOKIE_NAME, path="/")
    return {"success": True}


@router.get("/verify")
def admin_verify(admin: dict = Depends(require_admin)):
    return {"success": True, "user": {"email": admin["email"]}}


# -------- DASHBOARD --------

@router.get("/stats")
def admin_stats(
    session: Session = Depends(get_session),
    _: dict = Depends(require_admin),
):
    """Dashboard numbers. Revenue only counts orders that were paid."""
    now = datetime.utcnow()
    today = now.replace(hour=0, minute=0, second=0, microsecond=0)
    first_day = today - timedelta(days=SALES_DAYS - 1)

    total_orders = session.exec(select(func.count()).select_from(Order)).one()

    revenue = session.exec(
        select(func.coalesce(func.sum(Order.total), 0))
        .where(Order.status.in_(PAID_STATUSES))
    ).one()

    pending_orders = session.exec(
        select(func.count())
        .select_from(Order)
        .where(Order.status == OrderStatus.pending.value)
    ).one()

    total_products = session.exec(select(func.count()).select_from(Product)).one()

    low_stock_count = session.exec(
        select(func.count())
        .select_from(Product)
        .where(Product.in_stock == True)  # noqa: E712
        .where(Product.stock_quantity < settings.LOW_STOCK_THRESHOLD)
    ).one()

    todays_orders = session.exec(
        select(func.count())
        .select_from(Order)
        .where(Order.created_at >= today)
    ).one()

    todays_revenue = session.exec(
        select(func.coalesce(func.sum(Order.total), 0))
        .where(Order.created_at >= today)
        .where(Order.status.in_(PAID_STATUSES))
    ).one()

    daily = session.exec(
        select(
            func.date(Order.created_at),
            func.coalesce(func.sum(Order.total), 0),
            func.count(),
        )
        .where(Order.created_at >= first_day)
        .where(Order.status.in_(PAID_STATUSES))
        .group_by(func.date(Order.created_at))
    ).all()

    # every day of the window is reported, including days without sales
    by_day = {str(day): (day_total, day_count) for day, day_total, day_count in daily}
    sales_data = []
    for offset in range(SALES_DAYS):
        day = (first_day + timedelta(days=offset)).date().isoformat()
        day_revenue, day_orders = by_day.get(day, (0, 0))
        sales_data.append({"date": day, "revenue": day_revenue, "orders": day_orders})

    return {
        "success": True,
        "data": {
            "total_orders": total_orders,
            "total_revenue": revenue,
            "pending_orders": pending_orders,
            "total_products": total_products,
            "low_stock_count": low_stock_count,
            "todays_orders": todays_orders,
            "todays_revenue": todays_revenue,
            "sales_data": sales_data,
        },
    }
