"""
Comment Repository Interface.
Defines data access for comments and the moderation queue.
"""

from typing import List, Optional

from bloglytics.domain.repositories.base import BaseRepository
from bloglytics.domain.models.comment import Comment


class CommentRepository(BaseRepository[Comment]):
    """Interface for Comment-specific operations."""

    def list_approved_for_post(self, post_id: int) -> List[Comment]:
        """Approved top-level comments for a post, newest first."""
        ...

    def list_approved_replies(self, post_id: int) -> List[Comment]:
        """Approved replies (comments with a parent) for a post, oldest first."""
        ...

    def list_pending(self) -> List[Comment]:
        """Unapproved comments, newest first."""
        ...

    def list_recent(self, limit: int = 5, author_id: Optional[int] = None) -> List[Comment]:
        """Latest comments, optionally only on posts by one author."""
        ...

    def approve(self, comment_id: int) -> bool:
        ...

    def reject(self, comment_id: int) -> bool:
        ...

    def count(self, approved: Optional[bool] = None) -> int:
        """Total comments, optionally filtered by approval state."""
        ...

    def count_for_author(self, author_id: int) -> int:
        """Approved comments left on posts written by one author."""
        ...
