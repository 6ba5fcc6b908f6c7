"""Blog API routes: listing, authoring, detail, likes and comments."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import ValidationError

from bloglytics.core.exceptions import BusinessRuleViolationException
from bloglytics.interfaces.api.deps import get_current_user, get_optional_user
from bloglytics.interfaces.api.views import blog_page, categories_with_counts, post_detail, summaries, with_counts
from bloglytics.interfaces.deps import get_blog_repository, get_category_repository, get_comment_repository
from bloglytics.infrastructure.file_storage import ImageStorage, get_image_storage
from bloglytics.domain.repositories.blog_repository import BlogRepository
from bloglytics.domain.repositories.category_repository import CategoryRepository
from bloglytics.domain.repositories.comment_repository import CommentRepository
from bloglytics.domain.models.blog_post import STATUS_DRAFT, STATUS_PUBLISHED
from bloglytics.domain.models.user import User
from bloglytics.domain.schemas.blog import BlogForm, BlogRead, LikeResult
from bloglytics.domain.schemas.comment import CommentCreate, CommentRead
from bloglytics.application.services import blog_service
from bloglytics.application.services.comment_service import add_comment

router = APIRouter(prefix="/api/blogs", tags=["Blogs"])


def _blog_form(title: str, content: str, summary: Optional[str], category_id: int, post_status: str) -> BlogForm:
    try:
        return BlogForm(
            title=title,
            content=content,
            summary=summary or None,
            category_id=category_id,
            status=post_status,
        )
    except ValidationError as e:
        errors = [f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in e.errors()]
        raise BusinessRuleViolationException("Invalid blog data", details={"errors": errors})


async def _read_image(image: Optional[UploadFile]):
    if image is None or not image.filename:
        return None, None
    return image.filename, await image.read()


@router.get("")
def list_blogs(
    page: int = Query(1, ge=1),
    page_size: int = Query(9, ge=1, le=50),
    search: Optional[str] = None,
    category: Optional[str] = None,
    repo: BlogRepository = Depends(get_blog_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
):
    """Published blogs by keyword, by category, or all."""
    return {
        "blogs": blog_page(blog_service.list_blogs(repo, page, page_size, search=search, category=category)),
        "categories": categories_with_counts(category_repo.list_active()),
        "search": search,
        "category": category,
    }


@router.get("/trending")
def trending(
    limit: int = Query(10, ge=1, le=50),
    days: int = Query(30, ge=1, le=365),
    repo: BlogRepository = Depends(get_blog_repository),
):
    return summaries(repo.trending(limit=limit, days=days))


@router.get("/mine")
def my_blogs(
    repo: BlogRepository = Depends(get_blog_repository),
    user: User = Depends(get_current_user),
):
    """The signed-in author's blogs split by status, with engagement counts."""
    rows = with_counts(blog_service.list_author_posts(repo, user))
    return {
        "all": rows,
        "published": [row for row in rows if row.status == STATUS_PUBLISHED],
        "drafts": [row for row in rows if row.status == STATUS_DRAFT],
    }


@router.post("", response_model=BlogRead, status_code=status.HTTP_201_CREATED)
async def create_blog(
    title: str = Form(...),
    content: str = Form(...),
    category_id: int = Form(...),
    summary: Optional[str] = Form(None),
    post_status: str = Form(STATUS_DRAFT, alias="status"),
    image: Optional[UploadFile] = File(None),
    repo: BlogRepository = Depends(get_blog_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
    storage: ImageStorage = Depends(get_image_storage),
    user: User = Depends(get_current_user),
):
    form = _blog_form(title, content, summary, category_id, post_status)
    image_name, image_content = await _read_image(image)
    post = blog_service.create_post(repo, category_repo, storage, user, form, image_name, image_content)
    return BlogRead.model_validate(post)


@router.get("/{post_id}/edit")
def edit_blog(
    post_id: int,
    repo: BlogRepository = Depends(get_blog_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
    user: User = Depends(get_current_user),
):
    """Current values of a post for its edit form."""
    post = blog_service.get_managed_post(repo, user, post_id)
    return {
        "post": BlogRead.model_validate(post),
        "categories": categories_with_counts(category_repo.list_active()),
    }


@router.put("/{post_id}", response_model=BlogRead)
async def update_blog(
    post_id: int,
    title: str = Form(...),
    content: str = Form(...),
    category_id: int = Form(...),
    summary: Optional[str] = Form(None),
    post_status: str = Form(STATUS_DRAFT, alias="status"),
    remove_image: bool = Form(False),
    image: Optional[UploadFile] = File(None),
    repo: BlogRepository = Depends(get_blog_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
    storage: ImageStorage = Depends(get_image_storage),
    user: User = Depends(get_current_user),
):
    form = _blog_form(title, content, summary, category_id, post_status)
    image_name, image_content = await _read_image(image)
    post = blog_service.update_post(
        repo, category_repo, storage, user, post_id, form,
        image_name=image_name, image_content=image_content, remove_image=remove_image,
    )
    return BlogRead.model_validate(post)


@router.delete("/{post_id}")
def delete_blog(
    post_id: int,
    repo: BlogRepository = Depends(get_blog_repository),
    storage: ImageStorage = Depends(get_image_storage),
    user: User = Depends(get_current_user),
):
    deleted = blog_service.delete_post(repo, storage, user, post_id)
    return {
        "success": deleted,
        "message": "Blog deleted successfully" if deleted else "Failed to delete blog",
    }


@router.get("/{post_id}")
def blog_detail(
    post_id: int,
    repo: BlogRepository = Depends(get_blog_repository),
    comment_repo: CommentRepository = Depends(get_comment_repository),
    user: Optional[User] = Depends(get_optional_user),
):
    """Full reading view. Authors and admins can also preview unpublished posts."""
    return post_detail(blog_service.get_post_detail(repo, comment_repo, post_id, user))


@router.post("/{post_id}/like", response_model=LikeResult)
def like_blog(
    post_id: int,
    repo: BlogRepository = Depends(get_blog_repository),
    user: User = Depends(get_current_user),
):
    result = blog_service.toggle_like(repo, user, post_id)
    return LikeResult(**result)


@router.post("/{post_id}/comments", status_code=status.HTTP_201_CREATED)
def comment_on_blog(
    post_id: int,
    body: CommentCreate,
    repo: BlogRepository = Depends(get_blog_repository),
    comment_repo: CommentRepository = Depends(get_comment_repository),
    user: User = Depends(get_current_user),
):
    comment = add_comment(comment_repo, repo, user, post_id, body)
    message = "Comment posted" if comment.is_approved else "Comment submitted for moderation"
    return {"success": True, "message": message, "comment": CommentRead.model_validate(comment)}
