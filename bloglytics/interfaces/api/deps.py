"""FastAPI dependencies: current user from the auth cookie or bearer header, role gates, flash messages."""

from typing import List, Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from bloglytics.config import get_settings
from bloglytics.core.exceptions import ActionDenied, PageAccessDenied, UnauthorizedException
from bloglytics.infrastructure.database import get_db
from bloglytics.application.services.auth_service import decode_access_token
from bloglytics.domain.models.user import User

settings = get_settings()
security = HTTPBearer(auto_error=False)


def get_optional_user(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> Optional[User]:
    """Resolve the signed-in user, or None for anonymous requests."""
    token = credentials.credentials if credentials else request.cookies.get(settings.AUTH_COOKIE_NAME)
    if not token:
        return None

    payload = decode_access_token(token)
    if payload is None:
        return None

    try:
        user_id = int(payload.get("sub"))
    except (TypeError, ValueError):
        return None

    user = db.get(User, user_id)
    if user is None or not user.is_active:
        return None
    return user


def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Require a signed-in user."""
    if user is None:
        raise UnauthorizedException("Please log in to continue.")
    return user


def require_admin(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Gate for admin actions: JSON failure for everyone but admins."""
    if user is None or not user.is_admin:
        raise ActionDenied()
    return user


def require_admin_page(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Gate for admin pages: anyone but an admin, anonymous included, is redirected to the dashboard."""
    if user is None or not user.is_admin:
        raise PageAccessDenied("Access denied. Admin only.")
    return user


def flash(request: Request, level: str, message: str) -> None:
    """Queue a one-shot message for the next page load."""
    request.session.setdefault("flash", []).append({"level": level, "message": message})


def pop_flashes(request: Request) -> List[dict]:
    return request.session.pop("flash", [])
