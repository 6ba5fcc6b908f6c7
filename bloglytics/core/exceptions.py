"""
Global exception handling for the application.
Standardizes error responses using Problem Details for HTTP APIs (RFC 7807).
"""

from typing import Any, Dict, Optional

import structlog
from fastapi import Request, status
from fastapi.responses import JSONResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

logger = structlog.get_logger(__name__)


class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class EntityNotFoundException(AppError):
    """Resource not found error."""
    def __init__(self, message: str = "Entity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_404_NOT_FOUND, details)


class BusinessRuleViolationException(AppError):
    """Business logic violation error."""
    def __init__(self, message: str = "Business rule violation", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)


class InvalidImageException(BusinessRuleViolationException):
    """Uploaded image rejected (type or size)."""


class ConflictException(AppError):
    """Resource state conflicts with the request."""
    def __init__(self, message: str = "Conflict", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_409_CONFLICT, details)


class EmailAlreadyRegisteredException(ConflictException):
    def __init__(self, message: str = "This email is already registered."):
        super().__init__(message)


class CategoryInUseException(ConflictException):
    def __init__(self, message: str = "Category is still used by blog posts."):
        super().__init__(message)


class UnauthorizedException(AppError):
    """Authentication failure error."""
    def __init__(self, message: str = "Unauthorized", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, details)


class InvalidCredentialsException(UnauthorizedException):
    def __init__(self, message: str = "Invalid email or password."):
        super().__init__(message)


class RegistrationSessionExpiredException(UnauthorizedException):
    """No registration is pending for the given handle."""
    def __init__(self, message: str = "OTP session expired. Please register again."):
        super().__init__(message)


class ChallengeExpiredException(UnauthorizedException):
    def __init__(self, message: str = "OTP has expired. Please request a new one."):
        super().__init__(message)


class InvalidCodeException(UnauthorizedException):
    def __init__(self, message: str = "Invalid OTP. Please try again."):
        super().__init__(message)


class InvalidOrExpiredTokenException(UnauthorizedException):
    def __init__(self, message: str = "Reset link is invalid or has expired."):
        super().__init__(message)


class ForbiddenException(AppError):
    """Authorization failure error."""
    def __init__(self, message: str = "Forbidden", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, status.HTTP_403_FORBIDDEN, details)


class PageAccessDenied(AppError):
    """Authorization failure on a page load; answered with a redirect."""
    def __init__(self, message: str = "Access denied.", redirect_to: str = "/api/dashboard"):
        self.redirect_to = redirect_to
        super().__init__(message, status.HTTP_303_SEE_OTHER)


async def page_access_denied_handler(request: Request, exc: PageAccessDenied) -> RedirectResponse:
    """Redirect with a flash message instead of an error body."""
    if "session" in request.scope:
        request.session.setdefault("flash", []).append({"level": "error", "message": exc.message})
    return RedirectResponse(exc.redirect_to, status_code=exc.status_code)


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all uncaught exceptions globally."""

    if isinstance(exc, AppError):
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": exc.__class__.__name__,
                    "message": exc.message,
                    "details": exc.details,
                    "path": request.url.path,
                }
            },
        )

    if isinstance(exc, SQLAlchemyError):
        logger.exception("Database operation failed", path=request.url.path)
    else:
        logger.exception("Unexpected error occurred", path=request.url.path)

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "InternalServerError",
                "message": "An unexpected error occurred. Please try again later.",
                "path": request.url.path,
            }
        },
    )


class ActionDenied(ForbiddenException):
    """Authorization failure on an AJAX-style admin action."""
    def __init__(self, message: str = "Access denied"):
        super().__init__(message)


async def action_denied_handler(request: Request, exc: ActionDenied) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})
