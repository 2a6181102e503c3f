"""
User model
Handles authentication identity and role
"""

from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
import enum

from .base import BaseModel, IntegerIDModel, TimestampedModel


class UserRole(str, enum.Enum):
    STANDARD = "standard"
    LOCKED = "locked"
    ADMIN = "admin"


class User(BaseModel, IntegerIDModel, TimestampedModel):
    """Storefront user; the credential is either legacy or salted-hash format"""

    __tablename__ = "users"

    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    user_type = Column(String(20), nullable=False, default=UserRole.STANDARD.value)
    email = Column(String(255), nullable=True)

    orders = relationship("Order", back_populates="user")
    sessions = relationship("AuthSession", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_locked(self) -> bool:
        return self.user_type == UserRole.LOCKED.value

    @property
    def is_admin(self) -> bool:
        return self.user_type == UserRole.ADMIN.value
