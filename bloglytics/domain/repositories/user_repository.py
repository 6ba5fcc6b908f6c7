"""
User Repository Interface.
Defines data access for accounts as seen by administrators.
"""

from typing import Any, Dict, List, Optional

from bloglytics.domain.repositories.base import BaseRepository
from bloglytics.domain.models.user import User


class UserRepository(BaseRepository[User]):
    """Interface for User-specific operations."""

    def list_with_post_counts(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        """Every user, newest first, each with the number of posts written."""
        ...

    def recent(self, limit: int = 5) -> List[User]:
        ...

    def set_active(self, user_id: int, is_active: bool) -> bool:
        ...

    def count(self, active: Optional[bool] = None) -> int:
        ...
