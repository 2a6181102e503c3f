"""
Order schemas for request/response validation
"""

from pydantic import Field, field_validator
from typing import List, Optional
from datetime import datetime

from app.models.order import OrderStatus
from app.schemas.base import BaseSchema, Money
from app.utils.validators import (
    CARD_MAX_DIGITS,
    CARD_MIN_DIGITS,
    normalize_card_number,
    normalize_text,
    validate_cvv,
    validate_expiry_date,
)


class ShippingInfo(BaseSchema):
    """Shipping name and address snapshot"""
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=500)

    @field_validator("first_name", "last_name", "address")
    @classmethod
    def not_blank(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Field is required")
        return v


class PaymentInfo(BaseSchema):
    """
    Card details; only checked, never stored

    The checksum is verified by the order service so that it runs before
    anything else touches the cart or the catalog.
    """
    card_number: str = Field(..., min_length=CARD_MIN_DIGITS, max_length=CARD_MAX_DIGITS + 6)
    expiry_date: str
    cvv: str
    cardholder_name: str = Field(..., min_length=1, max_length=200)

    @field_validator("card_number")
    @classmethod
    def strip_separators(cls, v):
        v = normalize_card_number(v)
        if not v.isdigit():
            raise ValueError("Card number must contain only digits")
        if not CARD_MIN_DIGITS <= len(v) <= CARD_MAX_DIGITS:
            raise ValueError(f"Card number must be {CARD_MIN_DIGITS}-{CARD_MAX_DIGITS} digits")
        return v

    @field_validator("expiry_date")
    @classmethod
    def check_expiry(cls, v):
        return validate_expiry_date(v)

    @field_validator("cvv")
    @classmethod
    def check_cvv(cls, v):
        return validate_cvv(v)

    @field_validator("cardholder_name")
    @classmethod
    def check_cardholder(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Cardholder name is required")
        return v

    def __repr__(self) -> str:
        return f"<PaymentInfo ****{self.card_number[-4:]}>"

    __str__ = __repr__


class OrderCreate(BaseSchema):
    """Checkout request; the line items come from the session cart"""
    shipping: ShippingInfo
    payment: PaymentInfo

    model_config = {
        "json_schema_extra": {
            "example": {
                "shipping": {
                    "firstName": "Jane",
                    "lastName": "Doe",
                    "address": "1 Test Street, Springfield"
                },
                "payment": {
                    "cardNumber": "4111111111111111",
                    "expiryDate": "12/30",
                    "cvv": "123",
                    "cardholderName": "Jane Doe"
                }
            }
        }
    }


class OrderStatusUpdate(BaseSchema):
    """Admin status change; no transition graph is enforced"""
    status: OrderStatus


class OrderItemResponse(BaseSchema):
    """Purchased line with the price that was charged"""
    id: int
    product_id: int
    product_name: Optional[str] = None
    quantity: int
    unit_price: Money
    line_total: Money


class OrderResponse(BaseSchema):
    """Schema for order response"""
    id: int
    user_id: int
    username: Optional[str] = None
    status: OrderStatus
    total_amount: Money
    shipping_first_name: str
    shipping_last_name: str
    shipping_address: str
    payment_last_four: Optional[str] = None
    items: List[OrderItemResponse] = []
    created_at: datetime
    updated_at: datetime


class OrderSummaryResponse(BaseSchema):
    """Order header without items, used in listings"""
    id: int
    user_id: int
    username: Optional[str] = None
    status: OrderStatus
    total_amount: Money
    item_count: int
    created_at: datetime
