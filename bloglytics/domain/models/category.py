"""Category domain model: blog taxonomy entries."""

from sqlalchemy import Column, Integer, String, Boolean, DateTime

from bloglytics.core import clock
from bloglytics.infrastructure.database import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False, index=True)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, nullable=False, default=lambda: clock.now())

    def __repr__(self):
        return f"<Category {self.name}>"
