"""Auth API routes: login/logout, OTP registration, password reset, me."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from bloglytics.config import get_settings
from bloglytics.core.exceptions import InvalidCredentialsException, InvalidOrExpiredTokenException
from bloglytics.infrastructure.database import get_db
from bloglytics.infrastructure.mailer import Mailer, get_mailer
from bloglytics.application.services.auth_service import (
    authenticate_user,
    begin_registration,
    issue_session,
    record_login,
    request_password_reset,
    resend_otp,
    reset_password,
    validate_reset_token,
    verify_otp,
)
from bloglytics.domain.schemas.auth import (
    ForgotPasswordRequest,
    LoginRequest,
    OtpChallenge,
    RegisterRequest,
    ResendOtpRequest,
    ResetPasswordRequest,
    TokenResponse,
    UserRead,
    VerifyOtpRequest,
)
from bloglytics.domain.models.user import User
from bloglytics.interfaces.api.deps import flash, get_current_user, get_optional_user

settings = get_settings()
logger = structlog.get_logger(__name__)
router = APIRouter(prefix="/api/auth", tags=["Auth"])

RESET_REQUESTED_MESSAGE = "If the email exists, a password reset link has been sent."


def _set_auth_cookie(response: Response, token: str, max_age: int) -> None:
    response.set_cookie(
        key=settings.AUTH_COOKIE_NAME,
        value=token,
        max_age=max_age,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="strict",
    )


@router.post("/login", response_model=TokenResponse)
def login(body: LoginRequest, request: Request, response: Response, db: Session = Depends(get_db)):
    user = authenticate_user(db, body.email, body.password)
    if not user:
        logger.info("Login failed", email=body.email)
        raise InvalidCredentialsException()

    record_login(db, user)
    issued = issue_session(user, remember_me=body.remember_me)

    _set_auth_cookie(response, issued.access_token, issued.max_age)
    request.session["user"] = issued.claims.model_dump()
    flash(request, "success", f"Welcome back, {user.full_name}!")

    logger.info("Login succeeded", user_id=user.id, remember_me=body.remember_me)
    return TokenResponse(
        access_token=issued.access_token,
        expires_at=issued.expires_at,
        user=UserRead.model_validate(user),
    )


@router.post("/logout")
def logout(request: Request, response: Response, user: Optional[User] = Depends(get_optional_user)):
    request.session.clear()
    response.delete_cookie(settings.AUTH_COOKIE_NAME)
    if user:
        logger.info("Logout", user_id=user.id)
    return {"success": True, "message": "You have been logged out."}


@router.post("/register", response_model=OtpChallenge, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    return begin_registration(db, mailer, body.email, body.full_name, body.password)


@router.post("/resend-otp", response_model=OtpChallenge)
def resend(body: ResendOtpRequest, db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    return resend_otp(db, mailer, body.handle)


@router.post("/verify-otp", response_model=UserRead, status_code=status.HTTP_201_CREATED)
def verify(body: VerifyOtpRequest, request: Request, db: Session = Depends(get_db)):
    user = verify_otp(db, body.handle, body.code)
    flash(request, "success", "Registration successful! Please login.")
    return UserRead.model_validate(user)


@router.post("/forgot-password")
def forgot_password(body: ForgotPasswordRequest, db: Session = Depends(get_db), mailer: Mailer = Depends(get_mailer)):
    request_password_reset(db, mailer, body.email)
    return {"success": True, "message": RESET_REQUESTED_MESSAGE}


@router.get("/reset-password")
def check_reset_token(email: str, token: str, db: Session = Depends(get_db)):
    """Validate a reset link before showing the new-password form."""
    if not validate_reset_token(db, email, token):
        raise InvalidOrExpiredTokenException()
    return {"valid": True, "email": email.strip().lower(), "token": token}


@router.post("/reset-password")
def do_reset_password(body: ResetPasswordRequest, request: Request, db: Session = Depends(get_db)):
    reset_password(db, body.email, body.token, body.new_password)
    flash(request, "success", "Password reset successful! Please login with your new password.")
    return {"success": True, "message": "Password reset successful."}


@router.get("/me", response_model=UserRead)
def get_me(user: User = Depends(get_current_user)):
    return UserRead.model_validate(user)


@router.get("/session")
def get_session(request: Request):
    """Identity mirrored into the session record at login."""
    return {"user": request.session.get("user")}
