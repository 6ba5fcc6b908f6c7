"""Home API routes: public feed and post reading view."""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from bloglytics.interfaces.api.deps import get_optional_user, pop_flashes
from bloglytics.interfaces.api.views import blog_page, categories_with_counts, post_detail, summaries
from bloglytics.interfaces.deps import get_blog_repository, get_category_repository, get_comment_repository
from bloglytics.domain.repositories.blog_repository import BlogRepository
from bloglytics.domain.repositories.category_repository import CategoryRepository
from bloglytics.domain.repositories.comment_repository import CommentRepository
from bloglytics.domain.models.user import User
from bloglytics.application.services.blog_service import get_post_detail

router = APIRouter(prefix="/api/home", tags=["Home"])

FEATURED_COUNT = 3
POPULAR_COUNT = 5


@router.get("")
def home(
    request: Request,
    page: int = Query(1, ge=1),
    page_size: int = Query(6, ge=1, le=50),
    category: Optional[str] = None,
    search: Optional[str] = None,
    repo: BlogRepository = Depends(get_blog_repository),
    category_repo: CategoryRepository = Depends(get_category_repository),
):
    """Landing page: categories, featured posts, the paged feed and popular posts."""
    return {
        "categories": categories_with_counts(category_repo.list_active()),
        "featured": summaries(repo.popular(FEATURED_COUNT)),
        "posts": blog_page(repo.feed(page, page_size, category_name=category, keyword=search)),
        "popular": summaries(repo.popular(POPULAR_COUNT)),
        "selected_category": category,
        "search": search,
        "messages": pop_flashes(request),
    }


@router.get("/posts/{post_id}")
def read_post(
    post_id: int,
    repo: BlogRepository = Depends(get_blog_repository),
    comment_repo: CommentRepository = Depends(get_comment_repository),
    user: Optional[User] = Depends(get_optional_user),
):
    """Public reading view of a published post. Counts a view."""
    return post_detail(get_post_detail(repo, comment_repo, post_id, user, published_only=True))
