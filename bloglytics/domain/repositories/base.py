"""
Repository contracts shared by every store.

Stores are looked up by integer id and accept either a pydantic model or a
plain dict of column values on create/update. Paged listings answer with a
`Page`.
"""

from typing import Any, List, Optional, Protocol, TypedDict, TypeVar

T = TypeVar("T")


class Page(TypedDict):
    """One OFFSET/LIMIT slice of an ordered listing."""
    items: List[Any]
    total: int
    page: int
    page_size: int
    total_pages: int


class BaseRepository(Protocol[T]):
    """Lookup and write operations common to all entities."""

    def get_by_id(self, id: int) -> Optional[T]:
        ...

    def create(self, obj_in: Any) -> T:
        """Insert and commit; returns the refreshed row."""
        ...

    def update(self, db_obj: T, obj_in: Any) -> T:
        """Copy the given fields onto the row and commit."""
        ...

    def delete(self, id: int) -> bool:
        """Returns False when no row had this id."""
        ...
