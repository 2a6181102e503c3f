"""
Common dependencies for FastAPI
"""

from typing import Optional
from fastapi import Header

from app.core.exceptions import ValidationException

SESSION_HEADER = "X-Session-ID"
MAX_SESSION_ID_LENGTH = 128


def get_optional_session_id(
    x_session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
) -> Optional[str]:
    """Opaque client-generated cart key, None when absent or blank"""
    if x_session_id is None:
        return None
    x_session_id = x_session_id.strip()
    if not x_session_id:
        return None
    if len(x_session_id) > MAX_SESSION_ID_LENGTH:
        raise ValidationException(
            f"{SESSION_HEADER} header is too long",
            details={SESSION_HEADER: [f"At most {MAX_SESSION_ID_LENGTH} characters"]}
        )
    return x_session_id


def get_session_id(
    x_session_id: Optional[str] = Header(None, alias=SESSION_HEADER)
) -> str:
    """Required variant used by the cart routes"""
    session_id = get_optional_session_id(x_session_id)
    if session_id is None:
        raise ValidationException(f"Missing {SESSION_HEADER} header")
    return session_id
