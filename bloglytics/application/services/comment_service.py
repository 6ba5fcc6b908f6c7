"""Comment service: submission policy, threading and moderation."""

from typing import Any, Dict, List

import structlog

from bloglytics.config import get_settings
from bloglytics.core.exceptions import BusinessRuleViolationException, EntityNotFoundException
from bloglytics.domain.models.blog_post import STATUS_PUBLISHED
from bloglytics.domain.models.comment import Comment
from bloglytics.domain.models.user import User
from bloglytics.domain.repositories.blog_repository import BlogRepository
from bloglytics.domain.repositories.comment_repository import CommentRepository
from bloglytics.domain.schemas.comment import CommentCreate

settings = get_settings()
logger = structlog.get_logger(__name__)


def submission_approved(user: User) -> bool:
    """Approval state a new comment starts in."""
    return user.is_admin or settings.COMMENTS_AUTO_APPROVE


def add_comment(
    comment_repo: CommentRepository,
    blog_repo: BlogRepository,
    user: User,
    post_id: int,
    data: CommentCreate,
) -> Comment:
    post = blog_repo.get_by_id(post_id)
    if post is None or post.status != STATUS_PUBLISHED:
        raise EntityNotFoundException("Blog not found")

    if data.parent_comment_id is not None:
        parent = comment_repo.get_by_id(data.parent_comment_id)
        if parent is None or parent.post_id != post_id:
            raise BusinessRuleViolationException("Reply must target a comment on the same blog")
        # one level of nesting
        if parent.parent_comment_id is not None:
            raise BusinessRuleViolationException("Replies cannot be nested")

    comment = comment_repo.create({
        "post_id": post_id,
        "user_id": user.id,
        "content": data.content,
        "parent_comment_id": data.parent_comment_id,
        "is_approved": submission_approved(user),
    })
    logger.info("Comment added", comment_id=comment.id, post_id=post_id, approved=comment.is_approved)
    return comment


def get_comment_threads(comment_repo: CommentRepository, post_id: int) -> List[Dict[str, Any]]:
    """Approved top-level comments, newest first, each with its approved replies."""
    replies: Dict[int, List[Comment]] = {}
    for reply in comment_repo.list_approved_replies(post_id):
        replies.setdefault(reply.parent_comment_id, []).append(reply)

    return [
        {"comment": comment, "replies": replies.get(comment.id, [])}
        for comment in comment_repo.list_approved_for_post(post_id)
    ]


def approve_comment(comment_repo: CommentRepository, comment_id: int) -> None:
    if not comment_repo.approve(comment_id):
        raise EntityNotFoundException("Comment not found")
    logger.info("Comment approved", comment_id=comment_id)


def reject_comment(comment_repo: CommentRepository, comment_id: int) -> None:
    if not comment_repo.reject(comment_id):
        raise EntityNotFoundException("Comment not found")
    logger.info("Comment rejected", comment_id=comment_id)


def delete_comment(comment_repo: CommentRepository, comment_id: int) -> None:
    if not comment_repo.delete(comment_id):
        raise EntityNotFoundException("Comment not found")
    logger.info("Comment deleted", comment_id=comment_id)
