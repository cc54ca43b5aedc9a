from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from typing import List, Optional
from datetime import datetime


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str
    # whole rupees
    price: int
    original_price: Optional[int] = None
    image: Optional[str] = None
    images: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    sizes: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    description: Optional[str] = None
    category: str = Field(default="general", index=True)
    is_new: bool = Field(default=False)
    in_stock: bool = Field(default=True)
    stock_quantity: int = Field(default=0)
    created_at: datetime = Field(default_factory=datetime.utcnow)
