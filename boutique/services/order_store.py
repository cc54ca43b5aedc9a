import logging
import secrets
import string
from datetime import datetime
from typing import List, Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from boutique.constants.order_status import OrderStatus
from boutique.models.order import Order
from boutique.models.order_item import OrderItem
from boutique.models.user import User
from boutique.schemas.payment_schemas import CustomerInfo

logger = logging.getLogger(__name__)

ORDER_NUMBER_ATTEMPTS = 3
_SUFFIX_ALPHABET = string.ascii_uppercase + string.digits


def generate_order_number() -> str:
    date = datetime.utcnow().strftime("%Y%m%d")
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    return f"ORD-{date}-{suffix}"


def find_by_gateway_order_id(session: Session, razorpay_order_id: str) -> Optional[Order]:
    return session.exec(
        select(Order).where(Order.razorpay_order_id == razorpay_order_id)
    ).first()


def _find_customer(session: Session, phone: str) -> Optional[User]:
    return session.exec(select(User).where(User.phone == phone)).first()


def _apply_profile(user: User, customer: CustomerInfo):
    user.full_name = customer.full_name
    user.email = customer.email
    user.address = customer.address
    user.city = customer.city
    user.state = customer.state
    user.zip_code = customer.zip_code


def upsert_customer(session: Session, customer: CustomerInfo) -> User:
    """
    Find-or-create the customer by phone. The latest submitted details win.

    Only flushes; the caller commits together with the order. Must be the first
    write of the transaction, since a phone clash with a concurrent checkout
    rolls the transaction back before updating the row that won.
    """
    user = _find_customer(session, customer.phone)

    if user is None:
        user = User(phone=customer.phone)
        _apply_profile(user, customer)
        session.add(user)
        try:
            session.flush()
            return user
        except IntegrityError:
            session.rollback()
            logger.info(f"Customer {customer.phone} was created concurrently, updating it instead")
            user = _find_customer(session, customer.phone)
            if user is None:
                raise

    _apply_profile(user, customer)
    user.updated_at = datetime.utcnow()
    session.add(user)
    session.flush()
    return user


def create_pending_order(
    session: Session,
    order: Order,
    items: List[OrderItem],
    customer: Optional[CustomerInfo] = None,
) -> Order:
    """
    Insert the order and its items, plus the customer profile when given, in
    one transaction.

    Order numbers are short and random; on a unique-constraint clash the whole
    unit is rolled back and retried with a fresh number.
    """
    for attempt in range(1, ORDER_NUMBER_ATTEMPTS + 1):
        if customer is not None:
            order.user_id = upsert_customer(session, customer).id
        order.order_number = generate_order_number()
        order.status = OrderStatus.pending.value
        session.add(order)
        for item in items:
            item.order_id = order.id
            session.add(item)

        try:
            session.commit()
        except IntegrityError as e:
            session.rollback()
            if "order_number" not in str(e.orig) or attempt == ORDER_NUMBER_ATTEMPTS:
                raise
            logger.warning(f"Order number {order.order_number} already taken, retrying")
            continue

        session.refresh(order)
        return order


def confirm_payment(
    session: Session,
    razorpay_order_id: str,
    razorpay_payment_id: str,
    razorpay_signature: str,
) -> bool:
    """
    Move a pending order to confirmed in a single conditional UPDATE.

    Returns True only for the call that performed the transition. Orders that
    are already confirmed (or further along) are left untouched.
    """
    result = session.execute(
        update(Order)
        .where(Order.razorpay_order_id == razorpay_order_id)
        .where(Order.status == OrderStatus.pending.value)
        .values(
            status=OrderStatus.confirmed.value,
            razorpay_payment_id=razorpay_payment_id,
            razorpay_signature=razorpay_signature,
            updated_at=datetime.utcnow(),
        )
    )
    session.commit()
    return result.rowcount == 1
