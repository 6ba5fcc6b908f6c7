"""
SQLAlchemy Implementation of Category Repository.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import func

from bloglytics.domain.models.blog_post import BlogPost, STATUS_PUBLISHED
from bloglytics.domain.models.category import Category
from bloglytics.domain.repositories.category_repository import CategoryRepository
from bloglytics.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyCategoryRepository(SQLAlchemyRepository[Category], CategoryRepository):
    """Category repository implementation using SQLAlchemy."""

    def _with_post_counts(self, active_only: bool) -> List[Dict[str, Any]]:
        post_count = (
            self.db.query(func.count(BlogPost.id))
            .filter(
                BlogPost.category_id == Category.id,
                BlogPost.status == STATUS_PUBLISHED,
            )
            .correlate(Category)
            .scalar_subquery()
        )
        query = self.db.query(Category, post_count.label("post_count"))
        if active_only:
            query = query.filter(Category.is_active.is_(True))

        rows = query.order_by(Category.name).all()
        return [{"category": category, "post_count": count or 0} for category, count in rows]

    def list_all(self) -> List[Dict[str, Any]]:
        """All categories by name, each with its published post count."""
        return self._with_post_counts(active_only=False)

    def list_active(self) -> List[Dict[str, Any]]:
        """Active categories by name, each with its published post count."""
        return self._with_post_counts(active_only=True)

    def get_by_name(self, name: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.name == name).first()

    def count_posts(self, category_id: int, published_only: bool = True) -> int:
        query = self.db.query(func.count(BlogPost.id)).filter(BlogPost.category_id == category_id)
        if published_only:
            query = query.filter(BlogPost.status == STATUS_PUBLISHED)
        return query.scalar() or 0

    def count(self, active: Optional[bool] = None) -> int:
        query = self.db.query(func.count(Category.id))
        if active is not None:
            query = query.filter(Category.is_active.is_(active))
        return query.scalar() or 0
