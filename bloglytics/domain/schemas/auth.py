"""Pydantic schemas for User and Auth."""

import re
from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, Field, field_validator

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def _normalize_email(value: str) -> str:
    value = value.strip().lower()
    if not EMAIL_PATTERN.match(value):
        raise ValueError("Please enter a valid email address")
    return value


Email = Annotated[str, AfterValidator(_normalize_email)]


class UserRead(BaseModel):
    id: int
    email: str
    full_name: str
    role: str
    is_active: bool
    email_confirmed: bool
    created_at: Optional[datetime] = None
    last_login_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class LoginRequest(BaseModel):
    email: Email
    password: str = Field(min_length=1)
    remember_me: bool = False


class RegisterRequest(BaseModel):
    email: Email
    full_name: str = Field(min_length=1, max_length=200)
    password: str = Field(min_length=6, max_length=100)
    confirm_password: str

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info) -> str:
        if value != info.data.get("password"):
            raise ValueError("Passwords do not match")
        return value


class OtpChallenge(BaseModel):
    """Returned when a registration code is issued or re-issued."""
    handle: str
    email: str
    expires_at: datetime
    email_sent: bool


class VerifyOtpRequest(BaseModel):
    handle: str
    code: str = Field(min_length=6, max_length=6)


class ResendOtpRequest(BaseModel):
    handle: str


class ForgotPasswordRequest(BaseModel):
    email: Email


class ResetPasswordRequest(BaseModel):
    email: Email
    token: str
    new_password: str = Field(min_length=6, max_length=100)
    confirm_password: str

    @field_validator("confirm_password")
    @classmethod
    def passwords_match(cls, value: str, info) -> str:
        if value != info.data.get("new_password"):
            raise ValueError("Passwords do not match")
        return value


class SessionClaims(BaseModel):
    """Identity mirrored into the session record."""
    user_id: int
    name: str
    email: str
    role: str


class IssuedSession(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    max_age: int  # seconds; cookie persistence equals token validity
    claims: SessionClaims


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: UserRead
