"""Blog service: post lifecycle, ownership rules, engagement and reading view-models."""

import re
from typing import Any, Dict, List, Optional

import structlog

from bloglytics.core.exceptions import (
    BusinessRuleViolationException,
    EntityNotFoundException,
    ForbiddenException,
)
from bloglytics.domain.models.blog_post import BlogPost, STATUS_PUBLISHED
from bloglytics.domain.models.user import User
from bloglytics.domain.repositories.blog_repository import BlogRepository
from bloglytics.domain.repositories.category_repository import CategoryRepository
from bloglytics.domain.repositories.comment_repository import CommentRepository
from bloglytics.domain.schemas.blog import BlogForm
from bloglytics.infrastructure.file_storage import ImageStorage
from bloglytics.application.services.comment_service import get_comment_threads

logger = structlog.get_logger(__name__)

SLUG_MAX_LENGTH = 100


def slugify(title: str) -> str:
    """URL-safe identifier derived from a title. Not unique."""
    if not title:
        return ""
    slug = title.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    slug = slug.strip("-")
    if len(slug) > SLUG_MAX_LENGTH:
        slug = slug[:SLUG_MAX_LENGTH].strip("-")
    return slug


def can_manage(user: Optional[User], post: BlogPost) -> bool:
    """Authors manage their own posts; admins manage every post."""
    if user is None:
        return False
    return post.author_id == user.id or user.is_admin


def get_post_or_404(repo: BlogRepository, post_id: int) -> BlogPost:
    post = repo.get_by_id(post_id)
    if post is None:
        raise EntityNotFoundException("Blog not found")
    return post


def get_managed_post(repo: BlogRepository, user: User, post_id: int) -> BlogPost:
    post = get_post_or_404(repo, post_id)
    if not can_manage(user, post):
        raise ForbiddenException("You can only manage your own blogs")
    return post


def _check_category(category_repo: CategoryRepository, category_id: int) -> None:
    category = category_repo.get_by_id(category_id)
    if category is None or not category.is_active:
        raise BusinessRuleViolationException("Please select a category")


def create_post(
    repo: BlogRepository,
    category_repo: CategoryRepository,
    storage: ImageStorage,
    author: User,
    form: BlogForm,
    image_name: Optional[str] = None,
    image_content: Optional[bytes] = None,
) -> BlogPost:
    """Create a post, storing its featured image first when one is supplied."""
    _check_category(category_repo, form.category_id)

    featured_image = None
    if image_content:
        featured_image = storage.save(image_name, image_content, author.id)

    post = repo.create({
        "title": form.title.strip(),
        "slug": slugify(form.title),
        "content": form.content,
        "summary": form.summary,
        "category_id": form.category_id,
        "status": form.status,
        "featured_image": featured_image,
        "author_id": author.id,
    })
    logger.info("Blog created", post_id=post.id, author_id=author.id, status=post.status)
    return post


def update_post(
    repo: BlogRepository,
    category_repo: CategoryRepository,
    storage: ImageStorage,
    user: User,
    post_id: int,
    form: BlogForm,
    image_name: Optional[str] = None,
    image_content: Optional[bytes] = None,
    remove_image: bool = False,
) -> BlogPost:
    """Overwrite a post's editable fields.

    A new image replaces the old one; the old file is released only after
    the row has been updated.
    """
    post = get_managed_post(repo, user, post_id)
    _check_category(category_repo, form.category_id)

    old_image = post.featured_image
    featured_image = old_image
    if image_content:
        featured_image = storage.save(image_name, image_content, user.id)
    elif remove_image:
        featured_image = None

    post = repo.update(post, {
        "title": form.title.strip(),
        "slug": slugify(form.title),
        "content": form.content,
        "summary": form.summary,
        "category_id": form.category_id,
        "status": form.status,
        "featured_image": featured_image,
    })

    if old_image and old_image != featured_image:
        storage.delete(old_image)

    logger.info("Blog updated", post_id=post.id, user_id=user.id, status=post.status)
    return post


def delete_post(repo: BlogRepository, storage: ImageStorage, user: User, post_id: int) -> bool:
    """Delete a post with its likes and comments, then release its image."""
    post = get_managed_post(repo, user, post_id)
    image = post.featured_image

    deleted = repo.delete(post_id)
    if deleted and image:
        storage.delete(image)

    logger.info("Blog deleted", post_id=post_id, user_id=user.id, deleted=deleted)
    return deleted


def change_status(repo: BlogRepository, post_id: int, status: str) -> BlogPost:
    if not repo.change_status(post_id, status):
        raise EntityNotFoundException("Blog not found")
    logger.info("Blog status changed", post_id=post_id, status=status)
    return repo.get_by_id(post_id)


def toggle_like(repo: BlogRepository, user: User, post_id: int) -> Dict[str, Any]:
    """Like the post, or unlike it when the user already does."""
    post = get_post_or_404(repo, post_id)
    if post.status != STATUS_PUBLISHED:
        raise BusinessRuleViolationException("Only published blogs can be liked")

    if repo.has_liked(post_id, user.id):
        repo.unlike(post_id, user.id)
        liked = False
    else:
        repo.like(post_id, user.id)
        liked = True

    return {"liked": liked, "like_count": repo.like_count(post_id)}


def list_blogs(
    repo: BlogRepository,
    page: int = 1,
    page_size: int = 9,
    search: Optional[str] = None,
    category: Optional[str] = None,
) -> Dict[str, Any]:
    """Public listing: keyword search first, then category, else everything published."""
    if search:
        return repo.search(search, page, page_size)
    if category:
        return repo.list_by_category(category, page, page_size)
    return repo.list_published(page, page_size)


def list_author_posts(repo: BlogRepository, author: User) -> List[Dict[str, Any]]:
    """The author's posts with like and comment counts."""
    return [
        {
            "post": post,
            "like_count": repo.like_count(post.id),
            "comment_count": repo.comment_count(post.id),
        }
        for post in repo.list_by_author(author.id)
    ]


def get_post_detail(
    repo: BlogRepository,
    comment_repo: CommentRepository,
    post_id: int,
    user: Optional[User] = None,
    published_only: bool = False,
) -> Dict[str, Any]:
    """Reading view of one post. Every call counts as a view.

    Unpublished posts are visible only to those who may manage them.
    """
    post = get_post_or_404(repo, post_id)
    if post.status != STATUS_PUBLISHED and (published_only or not can_manage(user, post)):
        raise EntityNotFoundException("Blog not found")

    repo.increment_view(post_id)
    post = repo.get_by_id(post_id)

    return {
        "post": post,
        "comments": get_comment_threads(comment_repo, post_id),
        "related": repo.related(post),
        "like_count": repo.like_count(post_id),
        "comment_count": repo.comment_count(post_id),
        "has_liked": repo.has_liked(post_id, user.id) if user else False,
        "can_edit": can_manage(user, post),
        "can_delete": can_manage(user, post),
    }
