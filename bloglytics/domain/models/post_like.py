"""Engagement (like) relation: at most one row per (post, user)."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint

from bloglytics.core import clock
from bloglytics.infrastructure.database import Base

ACTION_LIKE = "Like"


class PostLike(Base):
    __tablename__ = "user_engagement"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", "action_type", name="uq_engagement_post_user_action"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("blog_posts.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    action_type = Column(String(20), nullable=False, default=ACTION_LIKE)
    action_date = Column(DateTime, nullable=False, default=lambda: clock.now())

    def __repr__(self):
        return f"<PostLike post={self.post_id} user={self.user_id}>"
