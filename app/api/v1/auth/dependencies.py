"""
Authentication dependencies and utilities
"""

from typing import Optional
from fastapi import Depends, Header, Request
from sqlalchemy.ext.asyncio import AsyncSession
import base64
import binascii

from app.core.database import get_db
from app.core.security import SecurityUtils, TokenError
from app.core.exceptions import UnauthorizedException, ForbiddenException
from app.models import UserRole
from .services import AuthService


def client_ip(request: Request) -> str:
    """Best-effort caller address for audit logging"""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _decode_basic(credentials: str) -> tuple[str, str]:
    try:
        decoded = base64.b64decode(credentials, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise UnauthorizedException("Invalid Basic Auth format")

    username, separator, password = decoded.partition(":")
    if not separator or not username:
        raise UnauthorizedException("Invalid Basic Auth format")
    return username, password


async def get_current_user(
    request: Request,
    authorization: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db)
) -> dict:
    """
    Resolve the caller from either a Bearer access token or Basic credentials

    Basic auth exists for automation clients and goes through the same
    credential verification as the login endpoint.
    """
    if not authorization:
        raise UnauthorizedException("Missing authentication")

    scheme, _, credentials = authorization.partition(" ")
    scheme = scheme.lower()

    if scheme == "basic":
        username, password = _decode_basic(credentials.strip())
        user = await AuthService(db).authenticate(username, password, client_ip=client_ip(request))
        return {"id": user.id, "username": user.username, "user_type": user.user_type}

    if scheme != "bearer" or not credentials.strip():
        raise UnauthorizedException("Invalid authentication format")

    try:
        payload = SecurityUtils.decode_token(credentials.strip(), expected_type="access")
    except TokenError:
        raise UnauthorizedException("Invalid or expired token")

    return {
        "id": int(payload["sub"]),
        "username": payload.get("username"),
        "user_type": payload.get("userType"),
    }


async def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    """Current user, who must hold the admin role"""
    if current_user.get("user_type") != UserRole.ADMIN.value:
        raise ForbiddenException("Admin access required")
    return current_user
