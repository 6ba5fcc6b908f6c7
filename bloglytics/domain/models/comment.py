"""Comment domain model: post comments with one level of reply threading."""

from sqlalchemy import Column, Integer, Text, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from bloglytics.core import clock
from bloglytics.infrastructure.database import Base


class Comment(Base):
    __tablename__ = "comments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("blog_posts.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    content = Column(Text, nullable=False)
    parent_comment_id = Column(Integer, ForeignKey("comments.id"), nullable=True, index=True)
    is_approved = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=lambda: clock.now())

    user = relationship("User", lazy="joined")
    post = relationship("BlogPost", lazy="select")

    @property
    def commenter_name(self) -> str | None:
        return self.user.full_name if self.user else None

    @property
    def post_title(self) -> str | None:
        return self.post.title if self.post else None

    def __repr__(self):
        return f"<Comment {self.id} on post {self.post_id}>"
