"""
Custom exception classes and error handlers
Provides consistent error responses across the application
"""

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from slowapi.errors import RateLimitExceeded
from typing import Any, Dict, List, Optional
import logging

from .config import settings

logger = logging.getLogger(__name__)


class StorefrontException(HTTPException):
    """Base exception class for the storefront API"""

    def __init__(
        self,
        status_code: int,
        detail: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, List[str]]] = None,
        headers: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code
        self.details = details


class BadRequestException(StorefrontException):
    """400 Bad Request"""

    def __init__(self, detail: str, error_code: str = "BAD_REQUEST"):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code=error_code
        )


class ValidationException(StorefrontException):
    """400 client-correctable input error with optional field-level detail"""

    def __init__(self, detail: str, details: Optional[Dict[str, List[str]]] = None):
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
            error_code="VALIDATION_ERROR",
            details=details
        )


class UnauthorizedException(StorefrontException):
    """401 Unauthorized"""

    def __init__(self, detail: str = "Unauthorized", error_code: str = "UNAUTHORIZED"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            error_code=error_code,
            headers={"WWW-Authenticate": "Bearer"}
        )


class InvalidCredentialsException(UnauthorizedException):
    """Unknown user and wrong password are reported identically"""

    def __init__(self):
        super().__init__(
            detail="Invalid username or password",
            error_code="INVALID_CREDENTIALS"
        )


class ForbiddenException(StorefrontException):
    """403 Forbidden"""

    def __init__(self, detail: str = "Forbidden", error_code: str = "FORBIDDEN"):
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=detail,
            error_code=error_code
        )


class AccountLockedException(ForbiddenException):
    """Locked accounts are rejected regardless of the password"""

    def __init__(self):
        super().__init__(detail="Account is locked", error_code="ACCOUNT_LOCKED")


class NotFoundException(StorefrontException):
    """404 Not Found"""

    def __init__(self, resource: str = "Resource", error_code: str = "NOT_FOUND"):
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
            error_code=error_code
        )


class OutOfStockException(BadRequestException):
    """Requested quantity exceeds the product's current stock"""

    def __init__(self, product_name: Optional[str] = None):
        super().__init__(
            detail=f"{product_name} is out of stock" if product_name else "Out of stock",
            error_code="OUT_OF_STOCK"
        )


class CartEmptyException(BadRequestException):
    """Checkout attempted without any cart lines"""

    def __init__(self):
        super().__init__(detail="Cart is empty", error_code="CART_EMPTY")


class InternalServerException(StorefrontException):
    """500 Internal Server Error"""

    def __init__(
        self,
        detail: str = "Internal server error",
        error_code: str = "INTERNAL_ERROR"
    ):
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=detail,
            error_code=error_code
        )


def error_body(code: str, message: str, details: Optional[Dict[str, List[str]]] = None) -> Dict[str, Any]:
    """Failure envelope shared by every handler"""
    error: Dict[str, Any] = {"code": code, "message": message}
    if details:
        error["details"] = details
    return {"success": False, "error": error}


async def storefront_exception_handler(request: Request, exc: StorefrontException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.error_code or "HTTP_ERROR", exc.detail, exc.details),
        headers=exc.headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Collapse pydantic errors into {field.path: [messages]}"""
    details: Dict[str, List[str]] = {}
    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in ("body", "query", "path", "header"):
            loc = loc[1:]
        details.setdefault(".".join(loc) or "request", []).append(error.get("msg", "Invalid value"))

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("VALIDATION_ERROR", "Validation failed", details),
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = "NOT_FOUND" if exc.status_code == status.HTTP_404_NOT_FOUND else "HTTP_ERROR"
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def rate_limit_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_429_TOO_MANY_REQUESTS,
        content=error_body("RATE_LIMITED", f"Too many requests. {exc.detail}"),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")

    # Don't expose internal errors outside development
    message = str(exc) if settings.is_development else "An unexpected error occurred"
    return await storefront_exception_handler(request, InternalServerException(detail=message))


def register_exception_handlers(app: FastAPI) -> None:
    """Install envelope-producing handlers on the application"""
    app.add_exception_handler(StorefrontException, storefront_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
