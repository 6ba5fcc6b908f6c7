"""
Tests for the blog repository: publishing lifecycle, listings, engagement and aggregates.
"""
from concurrent.futures import ThreadPoolExecutor
from datetime import timedelta

from bloglytics.core import clock
from bloglytics.domain.models.blog_post import BlogPost, STATUS_ARCHIVED, STATUS_DRAFT, STATUS_PUBLISHED
from bloglytics.domain.models.comment import Comment
from bloglytics.domain.models.post_like import PostLike
from bloglytics.infrastructure.repositories.blog_repository import SQLAlchemyBlogRepository


# ── Lifecycle ──

def test_create_published_stamps_published_at(blogger, tech, make_post):
    post = make_post(blogger, tech)
    assert post.published_at is not None
    assert post.view_count == 0


def test_create_draft_leaves_published_at_empty(blogger, tech, make_post):
    post = make_post(blogger, tech, status=STATUS_DRAFT)
    assert post.published_at is None


def test_published_at_is_set_once(blogger, tech, make_post, blog_repo, monkeypatch):
    post = make_post(blogger, tech, status=STATUS_DRAFT)

    blog_repo.change_status(post.id, STATUS_PUBLISHED)
    first_published = blog_repo.get_by_id(post.id).published_at
    assert first_published is not None

    later = clock.now() + timedelta(days=3)
    monkeypatch.setattr(clock, "now", lambda: later)

    blog_repo.change_status(post.id, STATUS_DRAFT)
    blog_repo.change_status(post.id, STATUS_PUBLISHED)
    blog_repo.update(blog_repo.get_by_id(post.id), {"title": "Edited", "status": STATUS_PUBLISHED})

    assert blog_repo.get_by_id(post.id).published_at == first_published


def test_update_ignores_protected_fields(blogger, make_user, tech, make_post, blog_repo):
    other = make_user()
    post = make_post(blogger, tech, view_count=7)

    blog_repo.update(post, {"title": "New title", "author_id": other.id, "view_count": 0})

    reloaded = blog_repo.get_by_id(post.id)
    assert reloaded.title == "New title"
    assert reloaded.author_id == blogger.id
    assert reloaded.view_count == 7
    assert reloaded.updated_at is not None


def test_change_status_of_missing_post(blog_repo):
    assert blog_repo.change_status(999, STATUS_PUBLISHED) is False


def test_delete_removes_likes_and_comment_threads(blogger, make_user, tech, make_post, blog_repo, db):
    reader = make_user()
    post = make_post(blogger, tech)
    keep = make_post(blogger, tech, title="Keep me")

    blog_repo.like(post.id, reader.id)
    blog_repo.like(keep.id, reader.id)
    parent = Comment(post_id=post.id, user_id=reader.id, content="Top", is_approved=True)
    db.add(parent)
    db.commit()
    db.add(Comment(post_id=post.id, user_id=blogger.id, content="Reply", parent_comment_id=parent.id, is_approved=True))
    db.commit()

    assert blog_repo.delete(post.id) is True

    assert blog_repo.get_by_id(post.id) is None
    assert db.query(Comment).filter(Comment.post_id == post.id).count() == 0
    assert db.query(PostLike).filter(PostLike.post_id == post.id).count() == 0
    assert blog_repo.like_count(keep.id) == 1


def test_delete_missing_post(blog_repo):
    assert blog_repo.delete(12345) is False


# ── Listings ──

def test_list_published_excludes_drafts_and_archived(blogger, tech, make_post, blog_repo):
    make_post(blogger, tech, title="Live")
    make_post(blogger, tech, title="Draft", status=STATUS_DRAFT)
    make_post(blogger, tech, title="Old", status=STATUS_ARCHIVED)

    page = blog_repo.list_published()

    assert [p.title for p in page["items"]] == ["Live"]
    assert page["total"] == 1


def test_list_published_is_newest_first_and_paginated(blogger, tech, make_post, blog_repo):
    for n in range(5):
        make_post(blogger, tech, title=f"Post {n}")

    first = blog_repo.list_published(page=1, page_size=2)
    last = blog_repo.list_published(page=3, page_size=2)

    assert [p.title for p in first["items"]] == ["Post 4", "Post 3"]
    assert [p.title for p in last["items"]] == ["Post 0"]
    assert first["total"] == 5
    assert first["total_pages"] == 3


def test_list_by_category_matches_name(blogger, tech, make_category, make_post, blog_repo):
    food = make_category("Food")
    make_post(blogger, tech, title="Chips")
    make_post(blogger, food, title="Pasta")

    page = blog_repo.list_by_category("Food")

    assert [p.title for p in page["items"]] == ["Pasta"]


def test_search_matches_title_summary_and_content(blogger, tech, make_post, blog_repo):
    make_post(blogger, tech, title="Python tips")
    make_post(blogger, tech, title="Other", summary="all about PYTHON")
    make_post(blogger, tech, title="Third", content="I like python too")
    make_post(blogger, tech, title="Unrelated", content="Rust")
    make_post(blogger, tech, title="Hidden python", status=STATUS_DRAFT)

    page = blog_repo.search("python")

    assert sorted(p.title for p in page["items"]) == ["Other", "Python tips", "Third"]


def test_search_treats_wildcards_literally(blogger, tech, make_post, blog_repo):
    make_post(blogger, tech, title="Plain post", content="nothing special")
    make_post(blogger, tech, title="Discounts", content="save 50% today")
    make_post(blogger, tech, title="snake_case names")

    assert [p.title for p in blog_repo.search("%")["items"]] == ["Discounts"]
    assert [p.title for p in blog_repo.search("_")["items"]] == ["snake_case names"]
    assert blog_repo.search("e_c")["total"] == 1


def test_feed_combines_category_and_keyword(blogger, tech, make_category, make_post, blog_repo):
    food = make_category("Food")
    make_post(blogger, tech, title="Fast code")
    make_post(blogger, food, title="Fast food")
    make_post(blogger, food, title="Slow food")

    page = blog_repo.feed(category_name="Food", keyword="fast")

    assert [p.title for p in page["items"]] == ["Fast food"]
    assert page["page_size"] == 6


def test_list_by_author_includes_every_status(blogger, make_user, tech, make_post, blog_repo):
    make_post(blogger, tech, title="Mine live")
    make_post(blogger, tech, title="Mine draft", status=STATUS_DRAFT)
    make_post(make_user(), tech, title="Not mine")

    assert sorted(p.title for p in blog_repo.list_by_author(blogger.id)) == ["Mine draft", "Mine live"]


def test_related_posts_share_category(blogger, tech, make_category, make_post, blog_repo):
    food = make_category("Food")
    post = make_post(blogger, tech, title="Main")
    make_post(blogger, tech, title="Sibling")
    make_post(blogger, food, title="Stranger")

    assert [p.title for p in blog_repo.related(post)] == ["Sibling"]


def test_popular_orders_by_views(blogger, tech, make_post, blog_repo):
    make_post(blogger, tech, title="Quiet", view_count=1)
    make_post(blogger, tech, title="Loud", view_count=50)

    assert [p.title for p in blog_repo.popular()] == ["Loud", "Quiet"]


def test_admin_list_filters_status_and_searches_author(blogger, make_user, tech, make_post, blog_repo):
    other = make_user(full_name="Zed Writer")
    make_post(blogger, tech, title="Alpha")
    make_post(other, tech, title="Beta", status=STATUS_DRAFT)

    assert [p.title for p in blog_repo.admin_list(search="zed")["items"]] == ["Beta"]
    assert [p.title for p in blog_repo.admin_list(status=STATUS_PUBLISHED)["items"]] == ["Alpha"]
    assert blog_repo.admin_list()["total"] == 2
    assert blog_repo.admin_list(search="%")["total"] == 0


# ── Engagement ──

def test_increment_view(blogger, tech, make_post, blog_repo):
    post = make_post(blogger, tech)

    assert blog_repo.increment_view(post.id) is True
    assert blog_repo.increment_view(404) is False
    blog_repo.db.expire_all()
    assert blog_repo.get_by_id(post.id).view_count == 1


def test_concurrent_view_increments_are_not_lost(blogger, tech, make_post, session_factory):
    post = make_post(blogger, tech)
    workers, per_worker = 4, 25

    def bump(_):
        session = session_factory()
        try:
            repo = SQLAlchemyBlogRepository(session, BlogPost)
            for _ in range(per_worker):
                repo.increment_view(post.id)
        finally:
            session.close()

    with ThreadPoolExecutor(max_workers=workers) as pool:
        list(pool.map(bump, range(workers)))

    session = session_factory()
    try:
        assert session.get(BlogPost, post.id).view_count == workers * per_worker
    finally:
        session.close()


def test_like_is_idempotent(blogger, make_user, tech, make_post, blog_repo):
    reader = make_user()
    post = make_post(blogger, tech)

    assert blog_repo.like(post.id, reader.id) is True
    assert blog_repo.like(post.id, reader.id) is False
    assert blog_repo.like_count(post.id) == 1
    assert blog_repo.has_liked(post.id, reader.id)


def test_unlike(blogger, make_user, tech, make_post, blog_repo):
    reader = make_user()
    post = make_post(blogger, tech)
    blog_repo.like(post.id, reader.id)

    assert blog_repo.unlike(post.id, reader.id) is True
    assert blog_repo.unlike(post.id, reader.id) is False
    assert blog_repo.like_count(post.id) == 0
    assert not blog_repo.has_liked(post.id, reader.id)


def test_comment_count_only_counts_approved(blogger, tech, make_post, blog_repo, db):
    post = make_post(blogger, tech)
    db.add_all([
        Comment(post_id=post.id, user_id=blogger.id, content="yes", is_approved=True),
        Comment(post_id=post.id, user_id=blogger.id, content="no", is_approved=False),
    ])
    db.commit()

    assert blog_repo.comment_count(post.id) == 1


# ── Aggregates ──

def test_counts_and_views_scope_to_author(blogger, make_user, tech, make_post, blog_repo):
    other = make_user()
    make_post(blogger, tech, title="A", view_count=10)
    make_post(blogger, tech, title="B", status=STATUS_DRAFT, view_count=5)
    make_post(other, tech, title="C", view_count=100)

    assert blog_repo.count() == 3
    assert blog_repo.count(status=STATUS_DRAFT) == 1
    assert blog_repo.count(author_id=blogger.id) == 2
    assert blog_repo.total_views() == 115
    assert blog_repo.total_views(author_id=blogger.id) == 15
    assert blog_repo.total_views(author_id=9999) == 0


def test_count_published_since(blogger, tech, make_post, blog_repo, monkeypatch):
    make_post(blogger, tech, title="Old")
    future = clock.now() + timedelta(days=45)
    monkeypatch.setattr(clock, "now", lambda: future)
    make_post(blogger, tech, title="New")

    assert blog_repo.count_published_since(future - timedelta(days=30)) == 1
    assert blog_repo.count_published_since(future - timedelta(days=60), author_id=blogger.id) == 2


def test_top_by_views_skips_unpublished(blogger, tech, make_post, blog_repo):
    make_post(blogger, tech, title="Draft hit", status=STATUS_DRAFT, view_count=999)
    make_post(blogger, tech, title="Live", view_count=3)

    assert [p.title for p in blog_repo.top_by_views()] == ["Live"]
    assert [p.title for p in blog_repo.latest()] == ["Live", "Draft hit"]
