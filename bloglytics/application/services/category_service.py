"""Category service: taxonomy maintenance for administrators."""

from typing import Any, Dict, List

import structlog

from bloglytics.core.exceptions import CategoryInUseException, ConflictException, EntityNotFoundException
from bloglytics.domain.models.category import Category
from bloglytics.domain.repositories.category_repository import CategoryRepository
from bloglytics.domain.schemas.category import CategoryCreate, CategoryUpdate

logger = structlog.get_logger(__name__)


def list_categories(repo: CategoryRepository, active_only: bool = False) -> List[Dict[str, Any]]:
    return repo.list_active() if active_only else repo.list_all()


def create_category(repo: CategoryRepository, data: CategoryCreate) -> Category:
    name = data.name.strip()
    if repo.get_by_name(name):
        raise ConflictException(f"Category '{name}' already exists")

    category = repo.create({"name": name, "description": data.description, "is_active": data.is_active})
    logger.info("Category created", category_id=category.id, name=name)
    return category


def update_category(repo: CategoryRepository, category_id: int, data: CategoryUpdate) -> Category:
    category = repo.get_by_id(category_id)
    if category is None:
        raise EntityNotFoundException("Category not found")

    name = data.name.strip()
    existing = repo.get_by_name(name)
    if existing and existing.id != category_id:
        raise ConflictException(f"Category '{name}' already exists")

    category = repo.update(category, {"name": name, "description": data.description, "is_active": data.is_active})
    logger.info("Category updated", category_id=category_id)
    return category


def delete_category(repo: CategoryRepository, category_id: int) -> None:
    """Hard delete. Refused while any post, of any status, references the category."""
    if repo.get_by_id(category_id) is None:
        raise EntityNotFoundException("Category not found")

    in_use = repo.count_posts(category_id, published_only=False)
    if in_use:
        raise CategoryInUseException(f"Category is used by {in_use} blog(s) and cannot be deleted")

    repo.delete(category_id)
    logger.info("Category deleted", category_id=category_id)
