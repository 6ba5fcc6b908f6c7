"""
Tests for comment submission, threading and moderation.
"""
import pytest

from bloglytics.application.services import comment_service
from bloglytics.core.exceptions import BusinessRuleViolationException, EntityNotFoundException
from bloglytics.domain.models.blog_post import STATUS_DRAFT
from bloglytics.domain.models.comment import Comment
from bloglytics.domain.schemas.comment import CommentCreate


@pytest.fixture
def post(blogger, tech, make_post):
    return make_post(blogger, tech)


@pytest.fixture
def moderated(monkeypatch):
    monkeypatch.setattr(comment_service.settings, "COMMENTS_AUTO_APPROVE", False)


def _comment(comment_repo, blog_repo, user, post_id, content="Nice post", parent=None):
    data = CommentCreate(content=content, parent_comment_id=parent.id if parent else None)
    return comment_service.add_comment(comment_repo, blog_repo, user, post_id, data)


def test_comment_content_is_stripped_and_required():
    assert CommentCreate(content="  hi  ").content == "hi"
    with pytest.raises(ValueError):
        CommentCreate(content="   ")
    with pytest.raises(ValueError):
        CommentCreate(content="x" * 1001)


def test_auto_approved_when_enabled(post, make_user, comment_repo, blog_repo):
    comment = _comment(comment_repo, blog_repo, make_user(), post.id)
    assert comment.is_approved is True


def test_pending_when_moderation_enabled(post, make_user, comment_repo, blog_repo, moderated):
    comment = _comment(comment_repo, blog_repo, make_user(), post.id)

    assert comment.is_approved is False
    assert [c.id for c in comment_repo.list_pending()] == [comment.id]
    assert comment_service.get_comment_threads(comment_repo, post.id) == []


def test_admin_comments_skip_moderation(post, admin, comment_repo, blog_repo, moderated):
    assert _comment(comment_repo, blog_repo, admin, post.id).is_approved is True


def test_cannot_comment_on_unpublished_post(blogger, tech, make_post, comment_repo, blog_repo):
    draft = make_post(blogger, tech, status=STATUS_DRAFT)
    with pytest.raises(EntityNotFoundException):
        _comment(comment_repo, blog_repo, blogger, draft.id)
    with pytest.raises(EntityNotFoundException):
        _comment(comment_repo, blog_repo, blogger, 4040)


def test_reply_must_target_same_post(post, blogger, tech, make_post, comment_repo, blog_repo):
    other_post = make_post(blogger, tech, title="Elsewhere")
    foreign = _comment(comment_repo, blog_repo, blogger, other_post.id)

    with pytest.raises(BusinessRuleViolationException):
        _comment(comment_repo, blog_repo, blogger, post.id, parent=foreign)


def test_replies_cannot_be_nested(post, blogger, make_user, comment_repo, blog_repo, db):
    top = _comment(comment_repo, blog_repo, blogger, post.id, "Top")
    reply = _comment(comment_repo, blog_repo, make_user(), post.id, "Reply", parent=top)

    with pytest.raises(BusinessRuleViolationException):
        _comment(comment_repo, blog_repo, blogger, post.id, "Nested", parent=reply)

    assert db.query(Comment).count() == 2
    threads = comment_service.get_comment_threads(comment_repo, post.id)
    assert [r.content for r in threads[0]["replies"]] == ["Reply"]

    comment_service.delete_comment(comment_repo, top.id)
    assert db.query(Comment).count() == 0


def test_threads_group_replies_under_parents(post, blogger, make_user, comment_repo, blog_repo):
    reader = make_user(full_name="Rita Reader")
    first = _comment(comment_repo, blog_repo, reader, post.id, "First")
    second = _comment(comment_repo, blog_repo, reader, post.id, "Second")
    _comment(comment_repo, blog_repo, blogger, post.id, "Reply one", parent=first)
    _comment(comment_repo, blog_repo, reader, post.id, "Reply two", parent=first)

    threads = comment_service.get_comment_threads(comment_repo, post.id)

    # top level newest first, replies oldest first
    assert [t["comment"].id for t in threads] == [second.id, first.id]
    assert [r.content for r in threads[1]["replies"]] == ["Reply one", "Reply two"]
    assert threads[0]["replies"] == []
    assert threads[1]["comment"].commenter_name == "Rita Reader"


def test_approve_and_reject(post, make_user, comment_repo, blog_repo, moderated):
    comment = _comment(comment_repo, blog_repo, make_user(), post.id)

    comment_service.approve_comment(comment_repo, comment.id)
    comment_repo.db.expire_all()
    assert comment_repo.get_by_id(comment.id).is_approved is True
    assert blog_repo.comment_count(post.id) == 1

    comment_service.reject_comment(comment_repo, comment.id)
    comment_repo.db.expire_all()
    assert comment_repo.get_by_id(comment.id).is_approved is False
    assert blog_repo.comment_count(post.id) == 0


def test_moderating_missing_comment_is_not_found(comment_repo):
    for action in (comment_service.approve_comment, comment_service.reject_comment, comment_service.delete_comment):
        with pytest.raises(EntityNotFoundException):
            action(comment_repo, 777)


def test_deleting_parent_removes_replies(post, blogger, comment_repo, blog_repo, db):
    parent = _comment(comment_repo, blog_repo, blogger, post.id, "Parent")
    _comment(comment_repo, blog_repo, blogger, post.id, "Child", parent=parent)
    survivor = _comment(comment_repo, blog_repo, blogger, post.id, "Survivor")

    comment_service.delete_comment(comment_repo, parent.id)

    assert [c.id for c in db.query(Comment).all()] == [survivor.id]


def test_counts(post, blogger, make_user, tech, make_post, comment_repo, blog_repo, monkeypatch):
    reader = make_user()
    other_post = make_post(reader, tech, title="Reader post")
    _comment(comment_repo, blog_repo, reader, post.id)
    _comment(comment_repo, blog_repo, blogger, other_post.id)
    monkeypatch.setattr(comment_service.settings, "COMMENTS_AUTO_APPROVE", False)
    _comment(comment_repo, blog_repo, reader, post.id, "Pending one")

    assert comment_repo.count() == 3
    assert comment_repo.count(approved=False) == 1
    assert comment_repo.count_for_author(blogger.id) == 1
    assert [c.content for c in comment_repo.list_recent(author_id=reader.id)] == ["Nice post"]
