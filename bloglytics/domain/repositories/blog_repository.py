"""
Blog Repository Interface.
Defines the lifecycle, listing and engagement operations for blog posts.
"""

from datetime import datetime
from typing import List, Optional

from bloglytics.domain.repositories.base import BaseRepository, Page
from bloglytics.domain.models.blog_post import BlogPost


class BlogRepository(BaseRepository[BlogPost]):
    """Interface for BlogPost-specific operations."""

    def list_published(self, page: int = 1, page_size: int = 9) -> Page:
        """Published posts, newest publication first."""
        ...

    def list_by_category(self, category_name: str, page: int = 1, page_size: int = 9) -> Page:
        """Published posts in one category, newest publication first."""
        ...

    def search(self, keyword: str, page: int = 1, page_size: int = 9) -> Page:
        """Published posts whose title, summary or content contains the keyword."""
        ...

    def feed(
        self,
        page: int = 1,
        page_size: int = 6,
        category_name: Optional[str] = None,
        keyword: Optional[str] = None,
    ) -> Page:
        """Published posts narrowed by any combination of category and keyword."""
        ...

    def list_by_author(self, author_id: int) -> List[BlogPost]:
        """Every post by one author, newest first."""
        ...

    def trending(self, limit: int = 10, days: int = 30) -> List[BlogPost]:
        """Recently published posts ranked by 0.6 * views + 0.4 * likes."""
        ...

    def popular(self, limit: int = 5) -> List[BlogPost]:
        ...

    def recent(self, limit: int = 5) -> List[BlogPost]:
        ...

    def related(self, post: BlogPost, limit: int = 3) -> List[BlogPost]:
        ...

    def admin_list(
        self,
        page: int = 1,
        page_size: int = 20,
        status: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Page:
        """All posts regardless of status, filtered by status and title/author search."""
        ...

    def change_status(self, post_id: int, status: str) -> bool:
        ...

    def increment_view(self, post_id: int) -> bool:
        ...

    def like(self, post_id: int, user_id: int) -> bool:
        ...

    def unlike(self, post_id: int, user_id: int) -> bool:
        ...

    def has_liked(self, post_id: int, user_id: int) -> bool:
        ...

    def like_count(self, post_id: int) -> int:
        ...

    def comment_count(self, post_id: int) -> int:
        ...

    def count(self, status: Optional[str] = None, author_id: Optional[int] = None) -> int:
        ...

    def total_views(self, author_id: Optional[int] = None) -> int:
        ...

    def count_published_since(self, since: datetime, author_id: Optional[int] = None) -> int:
        """Published posts whose publication date is at or after `since`."""
        ...

    def top_by_views(self, limit: int = 5, author_id: Optional[int] = None) -> List[BlogPost]:
        """Published posts with the most views."""
        ...

    def latest(self, limit: int = 5, author_id: Optional[int] = None) -> List[BlogPost]:
        ...
