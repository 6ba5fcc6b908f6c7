"""Pydantic schemas for dashboard and admin view-models."""

from pydantic import BaseModel
from typing import Optional

from bloglytics.domain.schemas.auth import UserRead
from bloglytics.domain.schemas.blog import BlogSummary
from bloglytics.domain.schemas.comment import CommentModeration


class FlashMessage(BaseModel):
    level: str
    message: str


class DashboardStats(BaseModel):
    total_blogs: int
    published_blogs: int
    draft_blogs: int
    total_views: int
    total_comments: int
    total_users: Optional[int] = None  # admins only
    blogs_last_30_days: int


class DashboardView(BaseModel):
    stats: DashboardStats
    recent_blogs: list[BlogSummary]
    top_blogs: list[BlogSummary]
    recent_comments: list[CommentModeration]
    messages: list[FlashMessage] = []


class AdminStats(BaseModel):
    total_users: int
    active_users: int
    total_blogs: int
    published_blogs: int
    draft_blogs: int
    archived_blogs: int
    total_comments: int
    pending_comments: int
    total_categories: int
    active_categories: int
    total_views: int


class AdminDashboardView(BaseModel):
    stats: AdminStats
    recent_blogs: list[BlogSummary]
    recent_users: list[UserRead]
    pending_comments: list[CommentModeration]
    messages: list[FlashMessage] = []


class UserStatusChange(BaseModel):
    is_active: bool


class ActionResult(BaseModel):
    success: bool
    message: str
