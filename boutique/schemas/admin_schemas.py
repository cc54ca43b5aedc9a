from pydantic import BaseModel
from typing import Optional

from boutique.constants.order_status import OrderStatus


class AdminLogin(BaseModel):
    email: str
    password: str


class OrderUpdate(BaseModel):
    status: Optional[OrderStatus] = None
    tracking_number: Optional[str] = None
