"""Blog post domain model: maps to the 'blog_posts' table."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from bloglytics.core import clock
from bloglytics.infrastructure.database import Base

STATUS_DRAFT = "Draft"
STATUS_PUBLISHED = "Published"
STATUS_ARCHIVED = "Archived"
POST_STATUSES = (STATUS_DRAFT, STATUS_PUBLISHED, STATUS_ARCHIVED)


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(300), nullable=False)
    slug = Column(String(300), nullable=False, index=True)  # derived, not unique
    content = Column(Text, nullable=False)
    summary = Column(String(500), nullable=True)
    featured_image = Column(String(500), nullable=True)  # blob store reference path

    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)

    status = Column(String(20), nullable=False, default=STATUS_DRAFT, index=True)
    view_count = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=lambda: clock.now())
    updated_at = Column(DateTime, nullable=True)
    published_at = Column(DateTime, nullable=True, index=True)  # set once, on first publish

    author = relationship("User", lazy="joined")
    category = relationship("Category", lazy="joined")

    @property
    def author_name(self) -> str | None:
        return self.author.full_name if self.author else None

    @property
    def category_name(self) -> str | None:
        return self.category.name if self.category else None

    def __repr__(self):
        return f"<BlogPost {self.id} - {self.title}>"
