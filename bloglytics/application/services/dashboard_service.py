"""Dashboard service: per-user and admin aggregates, computed fresh on every load."""

from datetime import timedelta
from typing import Any, Dict, List, Optional

import structlog

from bloglytics.core import clock
from bloglytics.core.exceptions import BusinessRuleViolationException, EntityNotFoundException
from bloglytics.domain.models.blog_post import STATUS_ARCHIVED, STATUS_DRAFT, STATUS_PUBLISHED
from bloglytics.domain.models.user import User
from bloglytics.domain.repositories.blog_repository import BlogRepository
from bloglytics.domain.repositories.category_repository import CategoryRepository
from bloglytics.domain.repositories.comment_repository import CommentRepository
from bloglytics.domain.repositories.user_repository import UserRepository
from bloglytics.domain.schemas.dashboard import AdminStats, DashboardStats

logger = structlog.get_logger(__name__)

RECENT_WINDOW_DAYS = 30
PANEL_SIZE = 5


def get_dashboard_stats(
    blog_repo: BlogRepository,
    comment_repo: CommentRepository,
    user_repo: UserRepository,
    user: User,
) -> DashboardStats:
    """Admins see site-wide numbers; everyone else sees their own."""
    since = clock.now() - timedelta(days=RECENT_WINDOW_DAYS)

    if user.is_admin:
        return DashboardStats(
            total_blogs=blog_repo.count(),
            published_blogs=blog_repo.count(status=STATUS_PUBLISHED),
            draft_blogs=blog_repo.count(status=STATUS_DRAFT),
            total_views=blog_repo.total_views(),
            total_comments=comment_repo.count(approved=True),
            total_users=user_repo.count(active=True),
            blogs_last_30_days=blog_repo.count_published_since(since),
        )

    return DashboardStats(
        total_blogs=blog_repo.count(author_id=user.id),
        published_blogs=blog_repo.count(status=STATUS_PUBLISHED, author_id=user.id),
        draft_blogs=blog_repo.count(status=STATUS_DRAFT, author_id=user.id),
        total_views=blog_repo.total_views(author_id=user.id),
        total_comments=comment_repo.count_for_author(user.id),
        blogs_last_30_days=blog_repo.count_published_since(since, author_id=user.id),
    )


def get_dashboard(
    blog_repo: BlogRepository,
    comment_repo: CommentRepository,
    user_repo: UserRepository,
    user: User,
) -> Dict[str, Any]:
    scope = None if user.is_admin else user.id
    return {
        "stats": get_dashboard_stats(blog_repo, comment_repo, user_repo, user),
        "recent_blogs": blog_repo.latest(PANEL_SIZE, author_id=scope),
        "top_blogs": blog_repo.top_by_views(PANEL_SIZE, author_id=scope),
        "recent_comments": comment_repo.list_recent(PANEL_SIZE, author_id=scope),
    }


def get_admin_stats(
    blog_repo: BlogRepository,
    comment_repo: CommentRepository,
    category_repo: CategoryRepository,
    user_repo: UserRepository,
) -> AdminStats:
    return AdminStats(
        total_users=user_repo.count(),
        active_users=user_repo.count(active=True),
        total_blogs=blog_repo.count(),
        published_blogs=blog_repo.count(status=STATUS_PUBLISHED),
        draft_blogs=blog_repo.count(status=STATUS_DRAFT),
        archived_blogs=blog_repo.count(status=STATUS_ARCHIVED),
        total_comments=comment_repo.count(),
        pending_comments=comment_repo.count(approved=False),
        total_categories=category_repo.count(),
        active_categories=category_repo.count(active=True),
        total_views=blog_repo.total_views(),
    )


def get_admin_dashboard(
    blog_repo: BlogRepository,
    comment_repo: CommentRepository,
    category_repo: CategoryRepository,
    user_repo: UserRepository,
) -> Dict[str, Any]:
    return {
        "stats": get_admin_stats(blog_repo, comment_repo, category_repo, user_repo),
        "recent_blogs": blog_repo.latest(PANEL_SIZE),
        "recent_users": user_repo.recent(PANEL_SIZE),
        "pending_comments": comment_repo.list_pending()[:PANEL_SIZE],
    }


def list_users(user_repo: UserRepository, search: Optional[str] = None) -> List[Dict[str, Any]]:
    return user_repo.list_with_post_counts(search)


def set_user_status(user_repo: UserRepository, actor: User, user_id: int, is_active: bool) -> None:
    """Activate or deactivate an account. Accounts are never deleted."""
    if user_id == actor.id and not is_active:
        raise BusinessRuleViolationException("You cannot deactivate your own account")
    if not user_repo.set_active(user_id, is_active):
        raise EntityNotFoundException("User not found")
    logger.info("User status changed", user_id=user_id, is_active=is_active, changed_by=actor.id)
