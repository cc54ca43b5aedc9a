from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Any, Dict, List, Optional


class CartLine(BaseModel):
    # any client-sent price/name is ignored; lines are re-priced server-side
    id: int
    quantity: int = Field(gt=0)
    size: Optional[str] = None


class CustomerInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    phone: str = Field(min_length=1)
    full_name: str = Field(alias="fullName", min_length=1)
    email: Optional[EmailStr] = None
    address: str = Field(min_length=1)
    city: str = Field(min_length=1)
    state: Optional[str] = None
    zip_code: str = Field(alias="zipCode", min_length=1)

    @field_validator("email", "state", mode="before")
    @classmethod
    def blank_to_none(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class CreateOrderRequest(BaseModel):
    items: List[CartLine]
    customer: CustomerInfo
    currency: Optional[str] = None
    receipt: Optional[str] = None
    notes: Optional[Dict[str, Any]] = None


class PaymentVerifyRequest(BaseModel):
    razorpay_order_id: str = Field(min_length=1)
    razorpay_payment_id: str = Field(min_length=1)
    razorpay_signature: str = Field(min_length=1)
