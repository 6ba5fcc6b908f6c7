"""Dashboard API: per-user statistics, recent activity and pending messages."""

from fastapi import APIRouter, Depends, Request

from bloglytics.interfaces.api.deps import get_current_user, pop_flashes
from bloglytics.interfaces.api.views import moderation, summaries
from bloglytics.interfaces.deps import get_blog_repository, get_comment_repository, get_user_repository
from bloglytics.domain.repositories.blog_repository import BlogRepository
from bloglytics.domain.repositories.comment_repository import CommentRepository
from bloglytics.domain.repositories.user_repository import UserRepository
from bloglytics.domain.models.user import User
from bloglytics.domain.schemas.dashboard import DashboardView, FlashMessage
from bloglytics.application.services.dashboard_service import get_dashboard

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardView)
def dashboard(
    request: Request,
    blog_repo: BlogRepository = Depends(get_blog_repository),
    comment_repo: CommentRepository = Depends(get_comment_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    user: User = Depends(get_current_user),
):
    """Admins get site-wide numbers, bloggers their own."""
    data = get_dashboard(blog_repo, comment_repo, user_repo, user)
    return DashboardView(
        stats=data["stats"],
        recent_blogs=summaries(data["recent_blogs"]),
        top_blogs=summaries(data["top_blogs"]),
        recent_comments=moderation(data["recent_comments"]),
        messages=[FlashMessage(**message) for message in pop_flashes(request)],
    )
