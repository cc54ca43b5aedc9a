from pydantic import BaseModel, Field
from typing import List, Optional


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: int = Field(..., gt=0)
    category: str = Field(..., min_length=1)

    original_price: Optional[int] = Field(None, gt=0)
    image: Optional[str] = None
    images: List[str] = []
    sizes: List[str] = ["Free Size"]
    description: str = ""

    is_new: bool = False
    in_stock: bool = True
    stock_quantity: int = Field(default=0, ge=0)


class ProductUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    price: Optional[int] = Field(None, gt=0)
    category: Optional[str] = Field(None, min_length=1)

    original_price: Optional[int] = Field(None, gt=0)
    image: Optional[str] = None
    images: Optional[List[str]] = None
    sizes: Optional[List[str]] = None
    description: Optional[str] = None

    is_new: Optional[bool] = None
    in_stock: Optional[bool] = None
    stock_quantity: Optional[int] = Field(None, ge=0)
