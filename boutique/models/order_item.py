from sqlmodel import SQLModel, Field, Relationship
from sqlalchemy import Column, ForeignKey, Integer
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from boutique.models.order import Order


class OrderItem(SQLModel, table=True):
    __tablename__ = "order_items"

    id: Optional[int] = Field(default=None, primary_key=True)
    order_id: str = Field(foreign_key="orders.id", index=True)
    # survives product deletion
    product_id: Optional[int] = Field(
        default=None,
        sa_column=Column(Integer, ForeignKey("products.id", ondelete="SET NULL"), nullable=True),
    )

    product_name: str
    product_price: int
    size: Optional[str] = None
    quantity: int
    line_total: int

    order: Optional["Order"] = Relationship(back_populates="items")
