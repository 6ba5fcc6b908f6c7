"""Pydantic schemas for Comments."""

from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Optional


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=1000)
    parent_comment_id: Optional[int] = None

    @field_validator("content")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("Please enter your comment")
        return value


class CommentRead(BaseModel):
    id: int
    post_id: int
    user_id: int
    commenter_name: Optional[str] = None
    content: str
    parent_comment_id: Optional[int] = None
    is_approved: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class CommentThread(CommentRead):
    """Top-level comment with its approved replies."""
    replies: list[CommentRead] = []


class CommentModeration(CommentRead):
    post_title: Optional[str] = None
