"""
Product schemas for request/response validation
"""

from pydantic import Field, field_validator, model_validator
from typing import Optional
from datetime import datetime
from decimal import Decimal

from app.schemas.base import BaseSchema, Money
from app.utils.helpers import image_url
from app.utils.validators import normalize_text, sanitize_html


class ProductCreate(BaseSchema):
    """Schema for creating a product"""
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    price: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    stock: int = Field(..., ge=0)
    image_key: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v):
        v = normalize_text(v)
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v):
        return sanitize_html(v) if v else v


class ProductUpdate(BaseSchema):
    """Partial update; only fields present in the request are applied"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    price: Optional[Decimal] = Field(None, gt=0, max_digits=10, decimal_places=2)
    stock: Optional[int] = Field(None, ge=0)
    image_key: Optional[str] = Field(None, max_length=500)
    is_active: Optional[bool] = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v):
        if v is None:
            return v
        v = normalize_text(v)
        if not v:
            raise ValueError("Name is required")
        return v

    @field_validator("description")
    @classmethod
    def sanitize_description(cls, v):
        return sanitize_html(v) if v else v


class StockUpdate(BaseSchema):
    """Admin stock override"""
    stock: int = Field(..., ge=0)


class ProductResponse(BaseSchema):
    """Schema for product response"""
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    price: Money
    stock: int
    image_key: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @model_validator(mode="after")
    def fill_image_url(self):
        if self.image_url is None:
            self.image_url = image_url(self.image_key)
        return self


class ProductCreatedResponse(BaseSchema):
    id: int
    slug: str
