"""
Category Repository Interface.
Defines specific data access operations for Categories.
"""

from typing import Any, Dict, List, Optional

from bloglytics.domain.repositories.base import BaseRepository
from bloglytics.domain.models.category import Category


class CategoryRepository(BaseRepository[Category]):
    """Interface for Category-specific operations."""

    def list_all(self) -> List[Dict[str, Any]]:
        """All categories by name, each with its published post count."""
        ...

    def list_active(self) -> List[Dict[str, Any]]:
        """Active categories by name, each with its published post count."""
        ...

    def get_by_name(self, name: str) -> Optional[Category]:
        """Get a category by its exact name."""
        ...

    def count_posts(self, category_id: int, published_only: bool = True) -> int:
        """Number of posts referencing the category."""
        ...

    def count(self, active: Optional[bool] = None) -> int:
        """Number of categories, optionally filtered by active flag."""
        ...
