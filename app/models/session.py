"""Server-side record of issued rotation tokens"""

from sqlalchemy import Column, String, Integer, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow


class AuthSession(BaseModel):
    """Stores only the SHA-256 of a rotation token, never the token itself"""

    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    refresh_token_hash = Column(String(64), unique=True, nullable=False, index=True)
    expires_at = Column(DateTime(timezone=True), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="sessions")

    __table_args__ = (
        Index("idx_sessions_user_expires", "user_id", "expires_at"),
    )
