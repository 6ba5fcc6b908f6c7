"""
SQLAlchemy Implementation of Blog Repository.
"""

from datetime import datetime, timedelta
from typing import Any, List, Optional

import structlog
from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError

from bloglytics.core import clock
from bloglytics.domain.models.blog_post import BlogPost, STATUS_PUBLISHED
from bloglytics.domain.models.category import Category
from bloglytics.domain.models.comment import Comment
from bloglytics.domain.models.post_like import PostLike, ACTION_LIKE
from bloglytics.domain.models.user import User
from bloglytics.domain.repositories.base import Page
from bloglytics.domain.repositories.blog_repository import BlogRepository
from bloglytics.infrastructure.repositories.base_repository import (
    LIKE_ESCAPE,
    SQLAlchemyRepository,
    _as_dict,
    contains_pattern,
    paginate,
)

logger = structlog.get_logger(__name__)

TRENDING_VIEW_WEIGHT = 0.6
TRENDING_LIKE_WEIGHT = 0.4


def _stamp_first_publish(post: BlogPost) -> None:
    # published_at is set once, on the first transition to Published
    if post.status == STATUS_PUBLISHED and post.published_at is None:
        post.published_at = clock.now()


class SQLAlchemyBlogRepository(SQLAlchemyRepository[BlogPost], BlogRepository):
    """Blog post repository implementation using SQLAlchemy."""

    def _published(self):
        return self.db.query(BlogPost).filter(BlogPost.status == STATUS_PUBLISHED)

    def _like_count_subquery(self):
        return (
            self.db.query(func.count(PostLike.id))
            .filter(PostLike.post_id == BlogPost.id, PostLike.action_type == ACTION_LIKE)
            .correlate(BlogPost)
            .scalar_subquery()
        )

    # ── Lifecycle ──

    def create(self, obj_in: Any) -> BlogPost:
        post = BlogPost(**_as_dict(obj_in))
        if post.view_count is None:
            post.view_count = 0
        _stamp_first_publish(post)

        self.db.add(post)
        self.db.commit()
        self.db.refresh(post)
        return post

    def update(self, db_obj: BlogPost, obj_in: Any) -> BlogPost:
        for field, value in _as_dict(obj_in).items():
            if field in ("id", "author_id", "view_count", "created_at", "published_at"):
                continue
            if hasattr(db_obj, field):
                setattr(db_obj, field, value)

        db_obj.updated_at = clock.now()
        _stamp_first_publish(db_obj)

        self.db.add(db_obj)
        self.db.commit()
        self.db.refresh(db_obj)
        return db_obj

    def delete(self, id: int) -> bool:
        """Delete a post together with its likes and comments."""
        post = self.db.get(BlogPost, id)
        if post is None:
            return False

        self.db.query(PostLike).filter(PostLike.post_id == id).delete(synchronize_session=False)
        # replies first, so no row points at a deleted parent
        self.db.query(Comment).filter(
            Comment.post_id == id, Comment.parent_comment_id.isnot(None)
        ).delete(synchronize_session=False)
        self.db.query(Comment).filter(Comment.post_id == id).delete(synchronize_session=False)
        self.db.delete(post)
        self.db.commit()
        return True

    def change_status(self, post_id: int, status: str) -> bool:
        post = self.db.get(BlogPost, post_id)
        if post is None:
            return False

        post.status = status
        post.updated_at = clock.now()
        _stamp_first_publish(post)
        self.db.commit()
        return True

    # ── Reads ──

    def _published_filtered(self, category_name: Optional[str] = None, keyword: Optional[str] = None):
        query = self._published()
        if category_name:
            query = query.join(Category, BlogPost.category_id == Category.id).filter(Category.name == category_name)
        if keyword:
            pattern = contains_pattern(keyword)
            query = query.filter(
                or_(
                    BlogPost.title.ilike(pattern, escape=LIKE_ESCAPE),
                    BlogPost.summary.ilike(pattern, escape=LIKE_ESCAPE),
                    BlogPost.content.ilike(pattern, escape=LIKE_ESCAPE),
                )
            )
        return query.order_by(BlogPost.published_at.desc(), BlogPost.id.desc())

    def list_published(self, page: int = 1, page_size: int = 9) -> Page:
        return paginate(self._published_filtered(), page, page_size)

    def list_by_category(self, category_name: str, page: int = 1, page_size: int = 9) -> Page:
        return paginate(self._published_filtered(category_name=category_name), page, page_size)

    def search(self, keyword: str, page: int = 1, page_size: int = 9) -> Page:
        return paginate(self._published_filtered(keyword=keyword), page, page_size)

    def feed(
        self,
        page: int = 1,
        page_size: int = 6,
        category_name: Optional[str] = None,
        keyword: Optional[str] = None,
    ) -> Page:
        """Published posts narrowed by any combination of category and keyword."""
        return paginate(self._published_filtered(category_name, keyword), page, page_size)

    def list_by_author(self, author_id: int) -> List[BlogPost]:
        return (
            self.db.query(BlogPost)
            .filter(BlogPost.author_id == author_id)
            .order_by(BlogPost.created_at.desc(), BlogPost.id.desc())
            .all()
        )

    def trending(self, limit: int = 10, days: int = 30) -> List[BlogPost]:
        """Published posts from the last `days` days, highest score first.

        score = 0.6 * view_count + 0.4 * like_count
        """
        likes = self._like_count_subquery()
        score = TRENDING_VIEW_WEIGHT * BlogPost.view_count + TRENDING_LIKE_WEIGHT * likes
        cutoff = clock.now() - timedelta(days=days)

        return (
            self._published()
            .filter(BlogPost.published_at >= cutoff)
            .order_by(score.desc(), BlogPost.published_at.desc())
            .limit(limit)
            .all()
        )

    def popular(self, limit: int = 5) -> List[BlogPost]:
        return (
            self._published()
            .order_by(BlogPost.view_count.desc(), BlogPost.published_at.desc())
            .limit(limit)
            .all()
        )

    def recent(self, limit: int = 5) -> List[BlogPost]:
        return self._published().order_by(BlogPost.created_at.desc(), BlogPost.id.desc()).limit(limit).all()

    def related(self, post: BlogPost, limit: int = 3) -> List[BlogPost]:
        return (
            self._published()
            .filter(BlogPost.category_id == post.category_id, BlogPost.id != post.id)
            .order_by(BlogPost.published_at.desc())
            .limit(limit)
            .all()
        )

    def admin_list(
        self,
        page: int = 1,
        page_size: int = 20,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Page:
        query = self.db.query(BlogPost).join(User, BlogPost.author_id == User.id)

        if status:
            query = query.filter(BlogPost.status == status)
        if search:
            pattern = contains_pattern(search)
            query = query.filter(or_(
                BlogPost.title.ilike(pattern, escape=LIKE_ESCAPE),
                User.full_name.ilike(pattern, escape=LIKE_ESCAPE),
            ))

        query = query.order_by(BlogPost.created_at.desc(), BlogPost.id.desc())
        return paginate(query, page, page_size)

    # ── Engagement ──

    def increment_view(self, post_id: int) -> bool:
        updated = (
            self.db.query(BlogPost)
            .filter(BlogPost.id == post_id)
            .update({BlogPost.view_count: BlogPost.view_count + 1}, synchronize_session=False)
        )
        self.db.commit()
        return updated > 0

    def like(self, post_id: int, user_id: int) -> bool:
        """Record a like. Returns False when the user had already liked the post."""
        if self.has_liked(post_id, user_id):
            return False

        self.db.add(PostLike(post_id=post_id, user_id=user_id, action_type=ACTION_LIKE))
        try:
            self.db.commit()
        except IntegrityError:
            # a concurrent request inserted the same like first
            self.db.rollback()
            logger.info("Duplicate like ignored", post_id=post_id, user_id=user_id)
            return False
        return True

    def unlike(self, post_id: int, user_id: int) -> bool:
        deleted = (
            self.db.query(PostLike)
            .filter(
                PostLike.post_id == post_id,
                PostLike.user_id == user_id,
                PostLike.action_type == ACTION_LIKE,
            )
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted > 0

    def has_liked(self, post_id: int, user_id: int) -> bool:
        return (
            self.db.query(PostLike.id)
            .filter(
                PostLike.post_id == post_id,
                PostLike.user_id == user_id,
                PostLike.action_type == ACTION_LIKE,
            )
            .first()
            is not None
        )

    def like_count(self, post_id: int) -> int:
        return (
            self.db.query(func.count(PostLike.id))
            .filter(PostLike.post_id == post_id, PostLike.action_type == ACTION_LIKE)
            .scalar()
            or 0
        )

    def comment_count(self, post_id: int) -> int:
        return (
            self.db.query(func.count(Comment.id))
            .filter(Comment.post_id == post_id, Comment.is_approved.is_(True))
            .scalar()
            or 0
        )

    # ── Aggregates ──

    def count(self, status: Optional[str] = None, author_id: Optional[int] = None) -> int:
        query = self.db.query(func.count(BlogPost.id))
        if status:
            query = query.filter(BlogPost.status == status)
        if author_id is not None:
            query = query.filter(BlogPost.author_id == author_id)
        return query.scalar() or 0

    def count_published_since(self, since: datetime, author_id: Optional[int] = None) -> int:
        query = self.db.query(func.count(BlogPost.id)).filter(
            BlogPost.status == STATUS_PUBLISHED, BlogPost.published_at >= since
        )
        if author_id is not None:
            query = query.filter(BlogPost.author_id == author_id)
        return query.scalar() or 0

    def total_views(self, author_id: Optional[int] = None) -> int:
        query = self.db.query(func.coalesce(func.sum(BlogPost.view_count), 0))
        if author_id is not None:
            query = query.filter(BlogPost.author_id == author_id)
        return int(query.scalar() or 0)

    def top_by_views(self, limit: int = 5, author_id: Optional[int] = None) -> List[BlogPost]:
        query = self._published()
        if author_id is not None:
            query = query.filter(BlogPost.author_id == author_id)
        return query.order_by(BlogPost.view_count.desc(), BlogPost.id.desc()).limit(limit).all()

    def latest(self, limit: int = 5, author_id: Optional[int] = None) -> List[BlogPost]:
        query = self.db.query(BlogPost)
        if author_id is not None:
            query = query.filter(BlogPost.author_id == author_id)
        return query.order_by(BlogPost.created_at.desc(), BlogPost.id.desc()).limit(limit).all()
