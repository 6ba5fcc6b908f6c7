"""Auth service: credentials, OTP-gated registration, password reset and token issuance."""

import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import structlog
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from bloglytics.config import get_settings
from bloglytics.core import clock
from bloglytics.core.exceptions import (
    ChallengeExpiredException,
    EmailAlreadyRegisteredException,
    InvalidCodeException,
    InvalidOrExpiredTokenException,
    RegistrationSessionExpiredException,
)
from bloglytics.domain.models.password_reset_token import PasswordResetToken
from bloglytics.domain.models.pending_registration import PendingRegistration
from bloglytics.domain.models.user import User, ROLE_ADMIN, ROLE_BLOGGER
from bloglytics.domain.schemas.auth import IssuedSession, OtpChallenge, SessionClaims
from bloglytics.infrastructure.mailer import KIND_OTP, KIND_PASSWORD_RESET, Mailer, build_reset_link

settings = get_settings()
logger = structlog.get_logger(__name__)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS)

OTP_MIN = 100000
OTP_MAX = 999999


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # stored value is not a recognised hash
        return False


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_otp() -> str:
    """Six-digit code, uniform over [100000, 999999]."""
    return str(OTP_MIN + secrets.randbelow(OTP_MAX - OTP_MIN + 1))


# ── Tokens ──

def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    to_encode = data.copy()
    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(hours=settings.JWT_EXPIRATION_HOURS))
    to_encode.update({
        "iat": issued_at,
        "exp": expire,
        "iss": settings.JWT_ISSUER,
        "aud": settings.JWT_AUDIENCE,
    })
    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[dict]:
    try:
        payload = jwt.decode(
            token,
            settings.SECRET_KEY,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
            issuer=settings.JWT_ISSUER,
        )
        return payload
    except JWTError:
        return None


def session_lifetime(remember_me: bool) -> timedelta:
    """Validity of both the bearer token and the cookie that carries it."""
    if remember_me:
        return timedelta(days=settings.REMEMBER_ME_DAYS)
    return timedelta(hours=settings.JWT_EXPIRATION_HOURS)


def issue_session(user: User, remember_me: bool = False) -> IssuedSession:
    """Sign a bearer token for the user and build the matching session claims."""
    lifetime = session_lifetime(remember_me)
    token = create_access_token(
        data={
            "sub": str(user.id),
            "email": user.email,
            "name": user.full_name,
            "role": user.role,
            "jti": uuid.uuid4().hex,
        },
        expires_delta=lifetime,
    )
    return IssuedSession(
        access_token=token,
        expires_at=datetime.now(timezone.utc) + lifetime,
        max_age=int(lifetime.total_seconds()),
        claims=SessionClaims(user_id=user.id, name=user.full_name, email=user.email, role=user.role),
    )


# ── Users ──

def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == _normalize_email(email)).first()


def create_user(
    db: Session,
    full_name: str,
    email: str,
    password: Optional[str] = None,
    role: str = ROLE_BLOGGER,
    password_hash: Optional[str] = None,
    email_confirmed: bool = True,
) -> User:
    user = User(
        full_name=full_name,
        email=_normalize_email(email),
        password_hash=password_hash or hash_password(password),
        role=role,
        is_active=True,
        email_confirmed=email_confirmed,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Return the active, confirmed user owning these credentials, else None."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    if not user.is_active or not user.email_confirmed:
        return None
    return user


def record_login(db: Session, user: User) -> None:
    user.last_login_at = clock.now()
    db.commit()


def ensure_default_admin(db: Session) -> Optional[User]:
    """Create the configured admin account when it does not exist yet."""
    if get_user_by_email(db, settings.DEFAULT_ADMIN_EMAIL):
        return None
    admin = create_user(
        db,
        full_name=settings.DEFAULT_ADMIN_NAME,
        email=settings.DEFAULT_ADMIN_EMAIL,
        password=settings.DEFAULT_ADMIN_PASSWORD,
        role=ROLE_ADMIN,
    )
    logger.info("Default admin user created", email=admin.email)
    return admin


# ── Registration ──

def _send_otp(mailer: Mailer, pending: PendingRegistration) -> bool:
    return mailer.send(
        KIND_OTP,
        pending.email,
        {
            "name": pending.full_name,
            "code": pending.code,
            "valid_minutes": settings.OTP_EXPIRATION_MINUTES,
        },
    )


def _challenge(pending: PendingRegistration, email_sent: bool) -> OtpChallenge:
    return OtpChallenge(
        handle=pending.handle,
        email=pending.email,
        expires_at=pending.expires_at,
        email_sent=email_sent,
    )


def _get_pending(db: Session, handle: str) -> PendingRegistration:
    pending = db.query(PendingRegistration).filter(PendingRegistration.handle == handle).first()
    if pending is None:
        raise RegistrationSessionExpiredException()
    return pending


def begin_registration(db: Session, mailer: Mailer, email: str, full_name: str, password: str) -> OtpChallenge:
    """Start a sign-up: store a pending registration and mail its code.

    The returned handle addresses the challenge in resend/verify calls. A
    mail failure does not undo the pending record; the caller can resend.
    """
    email = _normalize_email(email)
    if get_user_by_email(db, email):
        raise EmailAlreadyRegisteredException()

    # one pending registration per email; starting over replaces the old one
    db.query(PendingRegistration).filter(PendingRegistration.email == email).delete(synchronize_session=False)

    pending = PendingRegistration(
        handle=secrets.token_urlsafe(32),
        email=email,
        full_name=full_name.strip(),
        password_hash=hash_password(password),
        code=generate_otp(),
        expires_at=clock.now() + timedelta(minutes=settings.OTP_EXPIRATION_MINUTES),
    )
    db.add(pending)
    db.commit()
    db.refresh(pending)

    email_sent = _send_otp(mailer, pending)
    logger.info("Registration started", email=email, email_sent=email_sent)
    return _challenge(pending, email_sent)


def resend_otp(db: Session, mailer: Mailer, handle: str) -> OtpChallenge:
    pending = _get_pending(db, handle)
    pending.code = generate_otp()
    pending.expires_at = clock.now() + timedelta(minutes=settings.OTP_EXPIRATION_MINUTES)
    pending.updated_at = clock.now()
    db.commit()
    db.refresh(pending)

    email_sent = _send_otp(mailer, pending)
    logger.info("OTP resent", email=pending.email, email_sent=email_sent)
    return _challenge(pending, email_sent)


def verify_otp(db: Session, handle: str, code: str) -> User:
    """Complete a registration. The pending record is consumed on success."""
    pending = _get_pending(db, handle)

    if clock.now() > pending.expires_at:
        raise ChallengeExpiredException()
    if not secrets.compare_digest(pending.code.encode(), (code or "").strip().encode()):
        raise InvalidCodeException()

    if get_user_by_email(db, pending.email):
        db.delete(pending)
        db.commit()
        raise EmailAlreadyRegisteredException()

    user = User(
        full_name=pending.full_name,
        email=pending.email,
        password_hash=pending.password_hash,
        role=ROLE_BLOGGER,
        is_active=True,
        email_confirmed=True,
    )
    db.add(user)
    db.delete(pending)
    db.commit()
    db.refresh(user)

    logger.info("Registration completed", user_id=user.id, email=user.email)
    return user


def purge_abandoned_registrations(db: Session) -> int:
    cutoff = clock.now() - timedelta(minutes=settings.REGISTRATION_ABANDON_MINUTES)
    removed = (
        db.query(PendingRegistration)
        .filter(PendingRegistration.expires_at < cutoff)
        .delete(synchronize_session=False)
    )
    db.commit()
    return removed


# ── Password reset ──

def request_password_reset(db: Session, mailer: Mailer, email: str) -> None:
    """Mint and mail a reset token when the email belongs to an active user.

    Callers answer identically whether or not the account exists.
    """
    user = get_user_by_email(db, email)
    if user is None or not user.is_active:
        logger.info("Password reset requested for unknown account")
        return

    token = secrets.token_urlsafe(32)
    db.add(PasswordResetToken(
        user_id=user.id,
        token=token,
        expiry_date=clock.now() + timedelta(hours=settings.PASSWORD_RESET_EXPIRATION_HOURS),
    ))
    db.commit()

    email_sent = mailer.send(
        KIND_PASSWORD_RESET,
        user.email,
        {
            "name": user.full_name,
            "reset_link": build_reset_link(user.email, token),
            "valid_hours": settings.PASSWORD_RESET_EXPIRATION_HOURS,
        },
    )
    logger.info("Password reset requested", user_id=user.id, email_sent=email_sent)


def _find_reset_token(db: Session, email: str, token: str) -> Optional[PasswordResetToken]:
    return (
        db.query(PasswordResetToken)
        .join(User, PasswordResetToken.user_id == User.id)
        .filter(
            User.email == _normalize_email(email),
            PasswordResetToken.token == token,
            PasswordResetToken.is_used.is_(False),
            PasswordResetToken.expiry_date > clock.now(),
        )
        .first()
    )


def validate_reset_token(db: Session, email: str, token: str) -> bool:
    return _find_reset_token(db, email, token) is not None


def reset_password(db: Session, email: str, token: str, new_password: str) -> None:
    reset_token = _find_reset_token(db, email, token)
    if reset_token is None:
        raise InvalidOrExpiredTokenException()

    user = db.get(User, reset_token.user_id)
    user.password_hash = hash_password(new_password)
    user.updated_at = clock.now()
    reset_token.is_used = True
    db.commit()

    logger.info("Password reset completed", user_id=user.id)


def purge_stale_reset_tokens(db: Session) -> int:
    removed = (
        db.query(PasswordResetToken)
        .filter((PasswordResetToken.is_used.is_(True)) | (PasswordResetToken.expiry_date < clock.now()))
        .delete(synchronize_session=False)
    )
    db.commit()
    return removed
