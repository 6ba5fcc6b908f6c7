"""
Middleware stack: request id, signed session cookie and per-request access logs.
"""

import time
from typing import Callable, Optional

import structlog
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.middleware.sessions import SessionMiddleware

from bloglytics.config import get_settings

settings = get_settings()
logger = structlog.get_logger(__name__)

SESSION_COOKIE_NAME = "bloglytics_session"

# no access log for liveness probes or stored images
QUIET_PATHS = ("/health",)


def _session_user_id(request: Request) -> Optional[int]:
    if "session" not in request.scope:
        return None
    user = request.session.get("user") or {}
    return user.get("user_id")


def _is_quiet(path: str) -> bool:
    return path in QUIET_PATHS or path.startswith(settings.UPLOAD_URL_PREFIX.rstrip("/") + "/")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One access line per request, tagged with the signed-in user when known."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if _is_quiet(request.url.path):
            return await call_next(request)

        started = time.perf_counter()
        user_id = _session_user_id(request)

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "Request failed",
                method=request.method,
                path=request.url.path,
                user_id=user_id,
                elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "Request handled",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            user_id=user_id,
            elapsed_ms=round((time.perf_counter() - started) * 1000, 2),
        )
        return response


def setup_middleware(app):
    """Register middleware. Starlette runs them last-added first, so the
    request id wraps the session, which wraps the access log."""
    app.add_middleware(RequestLoggingMiddleware)

    # identity mirror and flash messages
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET_KEY,
        session_cookie=SESSION_COOKIE_NAME,
        max_age=settings.REMEMBER_ME_DAYS * 24 * 3600,
        same_site="strict",
        https_only=settings.ENVIRONMENT == "production",
    )

    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )
