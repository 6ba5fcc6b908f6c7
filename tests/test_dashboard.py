"""
Tests for dashboard aggregates and user administration.
"""
import pytest

from bloglytics.application.services import dashboard_service
from bloglytics.core.exceptions import BusinessRuleViolationException, EntityNotFoundException
from bloglytics.domain.models.blog_post import STATUS_ARCHIVED, STATUS_DRAFT
from bloglytics.domain.models.comment import Comment


@pytest.fixture
def site(blogger, admin, make_user, tech, make_category, make_post, db):
    """Two authors, a few posts in every state, approved and pending comments."""
    other = make_user(full_name="Olly Other")
    make_category("Hidden", is_active=False)
    mine = make_post(blogger, tech, title="Mine", view_count=10)
    make_post(blogger, tech, title="Mine draft", status=STATUS_DRAFT, view_count=1)
    theirs = make_post(other, tech, title="Theirs", view_count=20)
    make_post(other, tech, title="Theirs archived", status=STATUS_ARCHIVED)
    db.add_all([
        Comment(post_id=mine.id, user_id=other.id, content="approved", is_approved=True),
        Comment(post_id=mine.id, user_id=other.id, content="pending", is_approved=False),
        Comment(post_id=theirs.id, user_id=blogger.id, content="approved", is_approved=True),
    ])
    db.commit()
    return {"other": other}


def test_blogger_sees_own_numbers(site, blogger, blog_repo, comment_repo, user_repo):
    stats = dashboard_service.get_dashboard_stats(blog_repo, comment_repo, user_repo, blogger)

    assert stats.total_blogs == 2
    assert stats.published_blogs == 1
    assert stats.draft_blogs == 1
    assert stats.total_views == 11
    assert stats.total_comments == 1
    assert stats.total_users is None
    assert stats.blogs_last_30_days == 1


def test_admin_sees_site_numbers(site, admin, blog_repo, comment_repo, user_repo):
    stats = dashboard_service.get_dashboard_stats(blog_repo, comment_repo, user_repo, admin)

    assert stats.total_blogs == 4
    assert stats.published_blogs == 2
    assert stats.total_views == 31
    assert stats.total_comments == 2
    assert stats.total_users == 3


def test_dashboard_panels_are_scoped(site, blogger, blog_repo, comment_repo, user_repo):
    dashboard = dashboard_service.get_dashboard(blog_repo, comment_repo, user_repo, blogger)

    assert [p.title for p in dashboard["recent_blogs"]] == ["Mine draft", "Mine"]
    assert [p.title for p in dashboard["top_blogs"]] == ["Mine"]
    assert sorted(c.content for c in dashboard["recent_comments"]) == ["approved", "pending"]


def test_admin_stats(site, blog_repo, comment_repo, category_repo, user_repo):
    stats = dashboard_service.get_admin_stats(blog_repo, comment_repo, category_repo, user_repo)

    assert stats.total_users == 3
    assert stats.active_users == 3
    assert (stats.published_blogs, stats.draft_blogs, stats.archived_blogs) == (2, 1, 1)
    assert stats.total_comments == 3
    assert stats.pending_comments == 1
    assert (stats.total_categories, stats.active_categories) == (2, 1)
    assert stats.total_views == 31


def test_admin_dashboard_panels(site, blog_repo, comment_repo, category_repo, user_repo):
    dashboard = dashboard_service.get_admin_dashboard(blog_repo, comment_repo, category_repo, user_repo)

    assert len(dashboard["recent_blogs"]) == 4
    assert dashboard["recent_users"][0].id == site["other"].id
    assert [c.content for c in dashboard["pending_comments"]] == ["pending"]


def test_list_users_with_post_counts(site, blogger, user_repo):
    rows = dashboard_service.list_users(user_repo, search="olly")

    assert [(row["user"].full_name, row["post_count"]) for row in rows] == [("Olly Other", 2)]
    assert len(dashboard_service.list_users(user_repo)) == 3
    assert dashboard_service.list_users(user_repo, search="_") == []


def test_deactivate_and_reactivate_user(site, admin, user_repo):
    other = site["other"]

    dashboard_service.set_user_status(user_repo, admin, other.id, False)
    assert user_repo.count(active=False) == 1

    dashboard_service.set_user_status(user_repo, admin, other.id, True)
    assert user_repo.count(active=False) == 0


def test_admin_cannot_deactivate_self(admin, user_repo):
    with pytest.raises(BusinessRuleViolationException):
        dashboard_service.set_user_status(user_repo, admin, admin.id, False)


def test_status_of_missing_user(admin, user_repo):
    with pytest.raises(EntityNotFoundException):
        dashboard_service.set_user_status(user_repo, admin, 999, False)
