"""
Authentication schemas for request/response validation
"""

from pydantic import Field
from typing import Optional
from datetime import datetime

from app.schemas.base import BaseSchema


class LoginRequest(BaseSchema):
    """Username/password login"""
    username: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1, max_length=256)

    model_config = {
        "json_schema_extra": {
            "example": {
                "username": "standard_user",
                "password": "standard123"
            }
        }
    }


class UserSummary(BaseSchema):
    """Identity embedded in auth responses"""
    id: int
    username: str
    user_type: str


class AuthResponse(BaseSchema):
    """Access token plus the user it was minted for"""
    access_token: str
    user: UserSummary


class UserResponse(BaseSchema):
    """Current user profile"""
    id: int
    username: str
    user_type: str
    email: Optional[str] = None
    created_at: datetime
    updated_at: datetime
