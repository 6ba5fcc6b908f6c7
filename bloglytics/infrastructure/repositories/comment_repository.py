"""
SQLAlchemy Implementation of Comment Repository.
"""

from typing import List, Optional

from sqlalchemy import func

from bloglytics.domain.models.blog_post import BlogPost
from bloglytics.domain.models.comment import Comment
from bloglytics.domain.repositories.comment_repository import CommentRepository
from bloglytics.infrastructure.repositories.base_repository import SQLAlchemyRepository


class SQLAlchemyCommentRepository(SQLAlchemyRepository[Comment], CommentRepository):
    """Comment repository implementation using SQLAlchemy."""

    def list_approved_for_post(self, post_id: int) -> List[Comment]:
        return (
            self.db.query(Comment)
            .filter(
                Comment.post_id == post_id,
                Comment.is_approved.is_(True),
                Comment.parent_comment_id.is_(None),
            )
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )

    def list_approved_replies(self, post_id: int) -> List[Comment]:
        return (
            self.db.query(Comment)
            .filter(
                Comment.post_id == post_id,
                Comment.is_approved.is_(True),
                Comment.parent_comment_id.isnot(None),
            )
            .order_by(Comment.created_at.asc(), Comment.id.asc())
            .all()
        )

    def list_pending(self) -> List[Comment]:
        return (
            self.db.query(Comment)
            .filter(Comment.is_approved.is_(False))
            .order_by(Comment.created_at.desc(), Comment.id.desc())
            .all()
        )

    def list_recent(self, limit: int = 5, author_id: Optional[int] = None) -> List[Comment]:
        query = self.db.query(Comment)
        if author_id is not None:
            query = query.join(BlogPost, Comment.post_id == BlogPost.id).filter(BlogPost.author_id == author_id)
        return query.order_by(Comment.created_at.desc(), Comment.id.desc()).limit(limit).all()

    def _set_approved(self, comment_id: int, approved: bool) -> bool:
        updated = (
            self.db.query(Comment)
            .filter(Comment.id == comment_id)
            .update({Comment.is_approved: approved}, synchronize_session=False)
        )
        self.db.commit()
        return updated > 0

    def approve(self, comment_id: int) -> bool:
        return self._set_approved(comment_id, True)

    def reject(self, comment_id: int) -> bool:
        return self._set_approved(comment_id, False)

    def delete(self, id: int) -> bool:
        """Delete a comment and any replies to it."""
        comment = self.db.get(Comment, id)
        if comment is None:
            return False

        self.db.query(Comment).filter(Comment.parent_comment_id == id).delete(synchronize_session=False)
        self.db.delete(comment)
        self.db.commit()
        return True

    def count(self, approved: Optional[bool] = None) -> int:
        query = self.db.query(func.count(Comment.id))
        if approved is not None:
            query = query.filter(Comment.is_approved.is_(approved))
        return query.scalar() or 0

    def count_for_author(self, author_id: int) -> int:
        """Approved comments left on posts written by one author."""
        return (
            self.db.query(func.count(Comment.id))
            .join(BlogPost, Comment.post_id == BlogPost.id)
            .filter(BlogPost.author_id == author_id, Comment.is_approved.is_(True))
            .scalar()
            or 0
        )
