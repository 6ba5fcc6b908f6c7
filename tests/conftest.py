"""
Shared fixtures: a fresh SQLite database per test, repositories, factories,
a recording mailer and an API client wired to all of them.
"""
import os
import tempfile

_TMP_ROOT = tempfile.mkdtemp(prefix="bloglytics-tests-")

# Settings are read once at import time, so the environment is prepared first.
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_ROOT, 'app.db')}"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["MAIL_ENABLED"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_ROOT, "uploads")
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["COMMENTS_AUTO_APPROVE"] = "true"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["SESSION_SECRET_KEY"] = "test-session-secret"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from bloglytics.main import app
from bloglytics.infrastructure.database import Base, build_engine, get_db
from bloglytics.infrastructure.file_storage import ImageStorage, get_image_storage
from bloglytics.infrastructure.mailer import get_mailer
from bloglytics.application.services.auth_service import create_user
from bloglytics.domain.models.blog_post import BlogPost, STATUS_PUBLISHED
from bloglytics.domain.models.category import Category
from bloglytics.domain.models.comment import Comment
from bloglytics.domain.models.user import User, ROLE_ADMIN, ROLE_BLOGGER
from bloglytics.infrastructure.repositories.blog_repository import SQLAlchemyBlogRepository
from bloglytics.infrastructure.repositories.category_repository import SQLAlchemyCategoryRepository
from bloglytics.infrastructure.repositories.comment_repository import SQLAlchemyCommentRepository
from bloglytics.infrastructure.repositories.user_repository import SQLAlchemyUserRepository

PASSWORD = "secret123"


class RecordingMailer:
    """Stands in for the SMTP mailer and remembers every message."""

    def __init__(self):
        self.sent = []
        self.result = True

    def send(self, kind, recipient, template_data):
        self.sent.append({"kind": kind, "recipient": recipient, "data": dict(template_data)})
        return self.result

    def last(self, kind=None):
        messages = [m for m in self.sent if kind is None or m["kind"] == kind]
        return messages[-1] if messages else None


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'test.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def blog_repo(db):
    return SQLAlchemyBlogRepository(db, BlogPost)


@pytest.fixture
def category_repo(db):
    return SQLAlchemyCategoryRepository(db, Category)


@pytest.fixture
def comment_repo(db):
    return SQLAlchemyCommentRepository(db, Comment)


@pytest.fixture
def user_repo(db):
    return SQLAlchemyUserRepository(db, User)


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def storage(tmp_path):
    return ImageStorage(root=str(tmp_path / "uploads"))


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(email=None, role=ROLE_BLOGGER, full_name=None, password=PASSWORD,
              is_active=True, email_confirmed=True) -> User:
        counter["n"] += 1
        user = create_user(
            db,
            full_name=full_name or f"User {counter['n']}",
            email=email or f"user{counter['n']}@example.com",
            password=password,
            role=role,
            email_confirmed=email_confirmed,
        )
        if not is_active:
            user.is_active = False
            db.commit()
        return user

    return _make


@pytest.fixture
def blogger(make_user):
    return make_user(email="blogger@example.com", full_name="Bea Blogger")


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", full_name="Ada Admin", role=ROLE_ADMIN)


@pytest.fixture
def make_category(category_repo):
    def _make(name="Tech", is_active=True, description=None) -> Category:
        return category_repo.create({"name": name, "description": description, "is_active": is_active})

    return _make


@pytest.fixture
def tech(make_category):
    return make_category("Tech")


@pytest.fixture
def make_post(blog_repo):
    def _make(author, category, title="Hello World", status=STATUS_PUBLISHED, content="Body text",
              summary=None, view_count=0, featured_image=None) -> BlogPost:
        return blog_repo.create({
            "title": title,
            "slug": title.lower().replace(" ", "-"),
            "content": content,
            "summary": summary,
            "author_id": author.id,
            "category_id": category.id,
            "status": status,
            "view_count": view_count,
            "featured_image": featured_image,
        })

    return _make


@pytest.fixture
def client(session_factory, mailer, storage):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_image_storage] = lambda: storage

    yield TestClient(app)

    app.dependency_overrides.clear()


def login(client, email, password=PASSWORD, remember_me=False):
    response = client.post(
        "/api/auth/login",
        json={"email": email, "password": password, "remember_me": remember_me},
    )
    assert response.status_code == 200, response.text
    return response
