"""Pydantic schemas for Blog posts."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional

from bloglytics.domain.models.blog_post import POST_STATUSES, STATUS_DRAFT


class BlogForm(BaseModel):
    """Fields submitted when creating or editing a post."""
    title: str = Field(min_length=1, max_length=300)
    content: str = Field(min_length=1)
    summary: Optional[str] = Field(default=None, max_length=500)
    category_id: int
    status: str = STATUS_DRAFT

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("This field is required")
        return value

    @field_validator("status")
    @classmethod
    def known_status(cls, value: str) -> str:
        if value not in POST_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(POST_STATUSES)}")
        return value


class BlogRead(BaseModel):
    id: int
    title: str
    slug: str
    content: str
    summary: Optional[str] = None
    featured_image: Optional[str] = None
    author_id: int
    author_name: Optional[str] = None
    category_id: int
    category_name: Optional[str] = None
    status: str
    view_count: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BlogSummary(BaseModel):
    """Card shown in feeds and listings."""
    id: int
    title: str
    slug: str
    summary: Optional[str] = None
    featured_image: Optional[str] = None
    author_name: Optional[str] = None
    category_name: Optional[str] = None
    status: str
    view_count: int
    created_at: Optional[datetime] = None
    published_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class BlogWithCounts(BlogSummary):
    like_count: int = 0
    comment_count: int = 0


class BlogPage(BaseModel):
    items: list[BlogSummary]
    total: int
    page: int
    page_size: int
    total_pages: int


class StatusChange(BaseModel):
    status: str

    @field_validator("status")
    @classmethod
    def known_status(cls, value: str) -> str:
        if value not in POST_STATUSES:
            raise ValueError(f"Status must be one of {', '.join(POST_STATUSES)}")
        return value


class LikeResult(BaseModel):
    success: bool = True
    liked: bool
    like_count: int
