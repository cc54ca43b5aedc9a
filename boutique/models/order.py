from sqlmodel import SQLModel, Field, Relationship
from typing import List, Optional
from datetime import datetime
from uuid import uuid4

from boutique.constants.order_status import OrderStatus
from boutique.models.order_item import OrderItem


class Order(SQLModel, table=True):
    __tablename__ = "orders"

    id: str = Field(default_factory=lambda: str(uuid4()), primary_key=True)
    order_number: str = Field(index=True, unique=True)
    user_id: Optional[str] = Field(default=None, foreign_key="users.id")

    status: str = Field(default=OrderStatus.pending.value, index=True)

    subtotal: int
    shipping_cost: int = Field(default=0)
    total: int

    # gateway linkage
    razorpay_order_id: Optional[str] = Field(default=None, index=True, unique=True)
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None

    tracking_number: Optional[str] = None

    # delivery snapshot, copied from the checkout form
    delivery_name: str
    delivery_phone: str = Field(index=True)
    delivery_email: Optional[str] = Field(default=None, index=True)
    delivery_address: str
    delivery_city: str
    delivery_state: Optional[str] = None
    delivery_zip: str

    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    items: List["OrderItem"] = Relationship(back_populates="order")
