"""User domain model: maps to the 'users' table."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime

from bloglytics.core import clock
from bloglytics.infrastructure.database import Base

ROLE_BLOGGER = "Blogger"
ROLE_ADMIN = "Admin"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    full_name = Column(String(200), nullable=False)
    role = Column(String(50), nullable=False, default=ROLE_BLOGGER)  # Blogger, Admin
    is_active = Column(Boolean, nullable=False, default=True)
    email_confirmed = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=lambda: clock.now())
    updated_at = Column(DateTime, nullable=True)
    last_login_at = Column(DateTime, nullable=True)

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

    def __repr__(self):
        return f"<User {self.email}>"
