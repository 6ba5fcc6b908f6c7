"""Pending registration: an OTP challenge awaiting verification.

One row per in-flight sign-up, addressed by an opaque handle. The row is
deleted when the code is verified, replaced when the same email starts over,
and purged by the scheduler once abandoned.
"""

from sqlalchemy import Column, Integer, String, DateTime

from bloglytics.core import clock
from bloglytics.infrastructure.database import Base


class PendingRegistration(Base):
    __tablename__ = "pending_registrations"

    id = Column(Integer, primary_key=True, autoincrement=True)
    handle = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(255), nullable=False, index=True)
    full_name = Column(String(200), nullable=False)
    password_hash = Column(String(255), nullable=False)
    code = Column(String(6), nullable=False)
    expires_at = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=lambda: clock.now())
    updated_at = Column(DateTime, nullable=True)

    def __repr__(self):
        return f"<PendingRegistration {self.email}>"
