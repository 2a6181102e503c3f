"""
Authentication API routes
"""

from typing import Optional
from fastapi import APIRouter, Cookie, Depends, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.database import get_db
from app.core.exceptions import UnauthorizedException, error_body
from app.middleware.rate_limit import limiter
from app.schemas.base import success_response
from .dependencies import get_current_user, client_ip
from .schemas import LoginRequest, AuthResponse, UserSummary, UserResponse
from .services import AuthService

router = APIRouter()


def _set_refresh_cookie(response: Response, refresh_token: str) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=refresh_token,
        max_age=settings.refresh_token_ttl_seconds,
        path="/",
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
    )


def _clear_refresh_cookie(response: Response) -> None:
    response.delete_cookie(key=settings.REFRESH_COOKIE_NAME, path="/")


@router.post(
    "/login",
    status_code=status.HTTP_200_OK,
    summary="Login user",
    description="Authenticate with username and password; sets the refresh cookie"
)
@limiter.limit(settings.RATE_LIMIT_AUTH)
async def login(
    request: Request,
    response: Response,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Login user"""
    service = AuthService(db)
    user, access_token, refresh_token = await service.login(
        credentials.username,
        credentials.password,
        client_ip=client_ip(request)
    )

    _set_refresh_cookie(response, refresh_token)

    return success_response(AuthResponse(
        access_token=access_token,
        user=UserSummary.model_validate(user),
    ))


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    summary="Refresh access token",
    description="Mint a new access token from the refresh cookie"
)
async def refresh_token(
    refresh_token: Optional[str] = Cookie(None, alias=settings.REFRESH_COOKIE_NAME),
    db: AsyncSession = Depends(get_db)
):
    """Refresh access token; an unusable cookie is cleared"""
    service = AuthService(db)
    try:
        user, access_token = await service.refresh(refresh_token)
    except UnauthorizedException as e:
        response = JSONResponse(
            status_code=e.status_code,
            content=error_body(e.error_code, e.detail),
            headers=e.headers,
        )
        _clear_refresh_cookie(response)
        return response

    return success_response(AuthResponse(
        access_token=access_token,
        user=UserSummary.model_validate(user),
    ))


@router.post(
    "/logout",
    status_code=status.HTTP_200_OK,
    summary="Logout user",
    description="Revoke the refresh token and clear its cookie"
)
async def logout(
    response: Response,
    refresh_token: Optional[str] = Cookie(None, alias=settings.REFRESH_COOKIE_NAME),
    db: AsyncSession = Depends(get_db)
):
    """Logout user"""
    await AuthService(db).logout(refresh_token)
    _clear_refresh_cookie(response)
    return success_response({"message": "Logged out successfully"})


@router.get(
    "/me",
    status_code=status.HTTP_200_OK,
    summary="Get current user",
    description="Get currently authenticated user information"
)
async def get_me(
    current_user: dict = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Get current user information"""
    user = await AuthService(db).get_user(current_user["id"])
    return success_response(UserResponse.model_validate(user))
