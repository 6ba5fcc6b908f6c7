"""Converters from service results to response schemas."""

from typing import Any, Dict, List

from bloglytics.domain.schemas.blog import BlogPage, BlogRead, BlogSummary, BlogWithCounts
from bloglytics.domain.schemas.category import CategoryWithCount
from bloglytics.domain.schemas.comment import CommentModeration, CommentRead, CommentThread


def blog_page(page: Dict[str, Any]) -> BlogPage:
    return BlogPage(
        items=[BlogSummary.model_validate(post) for post in page["items"]],
        total=page["total"],
        page=page["page"],
        page_size=page["page_size"],
        total_pages=page["total_pages"],
    )


def summaries(posts) -> List[BlogSummary]:
    return [BlogSummary.model_validate(post) for post in posts]


def with_counts(rows: List[Dict[str, Any]]) -> List[BlogWithCounts]:
    return [
        BlogWithCounts.model_validate(row["post"]).model_copy(
            update={"like_count": row["like_count"], "comment_count": row["comment_count"]}
        )
        for row in rows
    ]


def categories_with_counts(rows: List[Dict[str, Any]]) -> List[CategoryWithCount]:
    return [
        CategoryWithCount.model_validate(row["category"]).model_copy(update={"post_count": row["post_count"]})
        for row in rows
    ]


def comment_threads(threads: List[Dict[str, Any]]) -> List[CommentThread]:
    return [
        CommentThread.model_validate(thread["comment"]).model_copy(
            update={"replies": [CommentRead.model_validate(reply) for reply in thread["replies"]]}
        )
        for thread in threads
    ]


def moderation(comments) -> List[CommentModeration]:
    return [CommentModeration.model_validate(comment) for comment in comments]


def post_detail(detail: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "post": BlogRead.model_validate(detail["post"]),
        "comments": comment_threads(detail["comments"]),
        "related": summaries(detail["related"]),
        "like_count": detail["like_count"],
        "comment_count": detail["comment_count"],
        "has_liked": detail["has_liked"],
        "can_edit": detail["can_edit"],
        "can_delete": detail["can_delete"],
    }
