"""
SQLAlchemy Implementation of User Repository.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func, or_

from bloglytics.core import clock
from bloglytics.domain.models.blog_post import BlogPost
from bloglytics.domain.models.user import User
from bloglytics.domain.repositories.user_repository import UserRepository
from bloglytics.infrastructure.repositories.base_repository import LIKE_ESCAPE, SQLAlchemyRepository, contains_pattern


class SQLAlchemyUserRepository(SQLAlchemyRepository[User], UserRepository):
    """User repository implementation using SQLAlchemy."""

    def list_with_post_counts(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        post_count = (
            self.db.query(func.count(BlogPost.id))
            .filter(BlogPost.author_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        query = self.db.query(User, post_count.label("post_count"))
        if search:
            pattern = contains_pattern(search)
            query = query.filter(or_(
                User.full_name.ilike(pattern, escape=LIKE_ESCAPE),
                User.email.ilike(pattern, escape=LIKE_ESCAPE),
            ))

        rows = query.order_by(User.created_at.desc(), User.id.desc()).all()
        return [{"user": user, "post_count": count or 0} for user, count in rows]

    def recent(self, limit: int = 5) -> List[User]:
        return self.db.query(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit).all()

    def set_active(self, user_id: int, is_active: bool) -> bool:
        updated = (
            self.db.query(User)
            .filter(User.id == user_id)
            .update({User.is_active: is_active, User.updated_at: clock.now()}, synchronize_session=False)
        )
        self.db.commit()
        return updated > 0

    def count(self, active: Optional[bool] = None) -> int:
        query = self.db.query(func.count(User.id))
        if active is not None:
            query = query.filter(User.is_active.is_(active))
        return query.scalar() or 0
