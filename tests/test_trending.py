"""
Tests for trending: weighted views and likes over a recent publishing window.
"""
from datetime import timedelta

from bloglytics.core import clock
from bloglytics.domain.models.blog_post import STATUS_DRAFT


def _likes(blog_repo, make_user, post, n):
    for _ in range(n):
        blog_repo.like(post.id, make_user().id)


def test_score_weights_views_over_likes(blogger, make_user, tech, make_post, blog_repo):
    # 0.6 * 10 + 0.4 * 0 = 6.0
    viewed = make_post(blogger, tech, title="Viewed", view_count=10)
    # 0.6 * 0 + 0.4 * 12 = 4.8
    liked = make_post(blogger, tech, title="Liked")
    _likes(blog_repo, make_user, liked, 12)
    # 0.6 * 5 + 0.4 * 10 = 7.0
    mixed = make_post(blogger, tech, title="Mixed", view_count=5)
    _likes(blog_repo, make_user, mixed, 10)

    assert [p.title for p in blog_repo.trending()] == ["Mixed", "Viewed", "Liked"]


def test_excludes_posts_outside_window(blogger, tech, make_post, blog_repo, monkeypatch):
    make_post(blogger, tech, title="Old but huge", view_count=10_000)
    later = clock.now() + timedelta(days=31)
    monkeypatch.setattr(clock, "now", lambda: later)
    make_post(blogger, tech, title="Fresh", view_count=1)

    assert [p.title for p in blog_repo.trending(days=30)] == ["Fresh"]
    assert [p.title for p in blog_repo.trending(days=60)] == ["Old but huge", "Fresh"]


def test_excludes_unpublished(blogger, tech, make_post, blog_repo):
    make_post(blogger, tech, title="Draft", status=STATUS_DRAFT, view_count=500)
    make_post(blogger, tech, title="Live", view_count=1)

    assert [p.title for p in blog_repo.trending()] == ["Live"]


def test_respects_limit(blogger, tech, make_post, blog_repo):
    for n in range(4):
        make_post(blogger, tech, title=f"Post {n}", view_count=n)

    assert [p.title for p in blog_repo.trending(limit=2)] == ["Post 3", "Post 2"]


def test_ties_prefer_newer_posts(blogger, tech, make_post, blog_repo):
    make_post(blogger, tech, title="First", view_count=2)
    make_post(blogger, tech, title="Second", view_count=2)

    assert [p.title for p in blog_repo.trending()] == ["Second", "First"]


def test_trending_endpoint(client, blogger, tech, make_post):
    make_post(blogger, tech, title="Only", view_count=3)

    response = client.get("/api/blogs/trending", params={"limit": 5, "days": 7})

    assert response.status_code == 200
    assert [p["title"] for p in response.json()] == ["Only"]
