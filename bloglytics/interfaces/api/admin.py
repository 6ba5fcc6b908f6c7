"""Admin API: moderation pages and actions. Admin role required throughout."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status

from bloglytics.interfaces.api.deps import pop_flashes, require_admin, require_admin_page
from bloglytics.interfaces.api.views import blog_page, categories_with_counts, moderation, summaries
from bloglytics.interfaces.deps import (
    get_blog_repository,
    get_category_repository,
    get_comment_repository,
    get_user_repository,
)
from bloglytics.infrastructure.file_storage import ImageStorage, get_image_storage
from bloglytics.domain.repositories.blog_repository import BlogRepository
from bloglytics.domain.repositories.category_repository import CategoryRepository
from bloglytics.domain.repositories.comment_repository import CommentRepository
from bloglytics.domain.repositories.user_repository import UserRepository
from bloglytics.domain.models.blog_post import POST_STATUSES
from bloglytics.domain.models.user import User
from bloglytics.domain.schemas.auth import UserRead
from bloglytics.domain.schemas.blog import BlogRead, StatusChange
from bloglytics.domain.schemas.category import CategoryCreate, CategoryRead, CategoryUpdate
from bloglytics.domain.schemas.dashboard import (
    ActionResult,
    AdminDashboardView,
    FlashMessage,
    UserStatusChange,
)
from bloglytics.application.services import blog_service, category_service, comment_service, dashboard_service

router = APIRouter(prefix="/api/admin", tags=["Admin"])

ADMIN_PAGE_SIZE = 20


# ── Pages ──

@router.get("", response_model=AdminDashboardView)
def admin_dashboard(
    request: Request,
    blog_repo: BlogRepository = Depends(get_blog_repository),
    comment_repo: CommentRepository = Depends(get_comment_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
    user_repo: UserRepository = Depends(get_user_repository),
    admin: User = Depends(require_admin_page),
):
    data = dashboard_service.get_admin_dashboard(blog_repo, comment_repo, category_repo, user_repo)
    return AdminDashboardView(
        stats=data["stats"],
        recent_blogs=summaries(data["recent_blogs"]),
        recent_users=[UserRead.model_validate(u) for u in data["recent_users"]],
        pending_comments=moderation(data["pending_comments"]),
        messages=[FlashMessage(**message) for message in pop_flashes(request)],
    )


@router.get("/blogs")
def manage_blogs(
    page: int = Query(1, ge=1),
    status_filter: Optional[str] = Query(None, alias="status"),
    search: Optional[str] = None,
    repo: BlogRepository = Depends(get_blog_repository),
    admin: User = Depends(require_admin_page),
):
    """Every blog regardless of status, filterable by status and title/author."""
    return {
        "blogs": blog_page(repo.admin_list(page, ADMIN_PAGE_SIZE, status=status_filter, search=search)),
        "statuses": list(POST_STATUSES),
        "status": status_filter,
        "search": search,
    }


@router.get("/users")
def manage_users(
    search: Optional[str] = None,
    user_repo: UserRepository = Depends(get_user_repository),
    admin: User = Depends(require_admin_page),
):
    rows = dashboard_service.list_users(user_repo, search)
    return [
        {**UserRead.model_validate(row["user"]).model_dump(), "post_count": row["post_count"]}
        for row in rows
    ]


@router.get("/categories")
def manage_categories(
    repo: CategoryRepository = Depends(get_category_repository),
    admin: User = Depends(require_admin_page),
):
    return categories_with_counts(category_service.list_categories(repo))


@router.get("/comments")
def manage_comments(
    comment_repo: CommentRepository = Depends(get_comment_repository),
    admin: User = Depends(require_admin_page),
):
    """Moderation queue: unapproved comments, newest first."""
    return moderation(comment_repo.list_pending())


# ── Actions ──

@router.delete("/blogs/{post_id}", response_model=ActionResult)
def delete_blog(
    post_id: int,
    repo: BlogRepository = Depends(get_blog_repository),
    storage: ImageStorage = Depends(get_image_storage),
    admin: User = Depends(require_admin),
):
    deleted = blog_service.delete_post(repo, storage, admin, post_id)
    return ActionResult(
        success=deleted,
        message="Blog deleted successfully" if deleted else "Failed to delete blog",
    )


@router.post("/blogs/{post_id}/status")
def change_blog_status(
    post_id: int,
    body: StatusChange,
    repo: BlogRepository = Depends(get_blog_repository),
    admin: User = Depends(require_admin),
):
    post = blog_service.change_status(repo, post_id, body.status)
    return {"success": True, "message": "Blog status updated", "blog": BlogRead.model_validate(post)}


@router.post("/users/{user_id}/status", response_model=ActionResult)
def change_user_status(
    user_id: int,
    body: UserStatusChange,
    user_repo: UserRepository = Depends(get_user_repository),
    admin: User = Depends(require_admin),
):
    dashboard_service.set_user_status(user_repo, admin, user_id, body.is_active)
    return ActionResult(success=True, message="User status updated")


@router.post("/comments/{comment_id}/approve", response_model=ActionResult)
def approve_comment(
    comment_id: int,
    comment_repo: CommentRepository = Depends(get_comment_repository),
    admin: User = Depends(require_admin),
):
    comment_service.approve_comment(comment_repo, comment_id)
    return ActionResult(success=True, message="Comment approved")


@router.post("/comments/{comment_id}/reject", response_model=ActionResult)
def reject_comment(
    comment_id: int,
    comment_repo: CommentRepository = Depends(get_comment_repository),
    admin: User = Depends(require_admin),
):
    comment_service.reject_comment(comment_repo, comment_id)
    return ActionResult(success=True, message="Comment rejected")


@router.delete("/comments/{comment_id}", response_model=ActionResult)
def delete_comment(
    comment_id: int,
    comment_repo: CommentRepository = Depends(get_comment_repository),
    admin: User = Depends(require_admin),
):
    comment_service.delete_comment(comment_repo, comment_id)
    return ActionResult(success=True, message="Comment deleted")


@router.post("/categories", status_code=status.HTTP_201_CREATED)
def add_category(
    body: CategoryCreate,
    repo: CategoryRepository = Depends(get_category_repository),
    admin: User = Depends(require_admin),
):
    category = category_service.create_category(repo, body)
    return {"success": True, "message": "Category added successfully", "category": CategoryRead.model_validate(category)}


@router.put("/categories/{category_id}")
def edit_category(
    category_id: int,
    body: CategoryUpdate,
    repo: CategoryRepository = Depends(get_category_repository),
    admin: User = Depends(require_admin),
):
    category = category_service.update_category(repo, category_id, body)
    return {"success": True, "message": "Category updated", "category": CategoryRead.model_validate(category)}


@router.delete("/categories/{category_id}", response_model=ActionResult)
def delete_category(
    category_id: int,
    repo: CategoryRepository = Depends(get_category_repository),
    admin: User = Depends(require_admin),
):
    category_service.delete_category(repo, category_id)
    return ActionResult(success=True, message="Category deleted")
