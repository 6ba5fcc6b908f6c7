"""Password reset tokens: single use, time limited."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey

from bloglytics.core import clock
from bloglytics.infrastructure.database import Base


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    token = Column(String(500), unique=True, nullable=False, index=True)
    expiry_date = Column(DateTime, nullable=False)
    is_used = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=lambda: clock.now())

    def __repr__(self):
        return f"<PasswordResetToken user={self.user_id} used={self.is_used}>"
