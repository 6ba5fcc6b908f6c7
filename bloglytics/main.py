"""FastAPI application: main entry point."""

import os
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import SQLAlchemyError

from bloglytics.config import get_settings
from bloglytics.infrastructure.database import engine, Base, SessionLocal
from bloglytics.core.logging import configure_logging
from bloglytics.core.middleware import setup_middleware
from bloglytics.core.exceptions import (
    ActionDenied,
    AppError,
    PageAccessDenied,
    action_denied_handler,
    global_exception_handler,
    page_access_denied_handler,
)

# Import all models so SQLAlchemy knows about them
from bloglytics.domain.models.user import User
from bloglytics.domain.models.category import Category
from bloglytics.domain.models.blog_post import BlogPost
from bloglytics.domain.models.comment import Comment
from bloglytics.domain.models.post_like import PostLike
from bloglytics.domain.models.password_reset_token import PasswordResetToken
from bloglytics.domain.models.pending_registration import PendingRegistration

# Import routers
from bloglytics.interfaces.api.auth import router as auth_router
from bloglytics.interfaces.api.home import router as home_router
from bloglytics.interfaces.api.blogs import router as blogs_router
from bloglytics.interfaces.api.dashboard import router as dashboard_router
from bloglytics.interfaces.api.admin import router as admin_router

settings = get_settings()

# Configure logging immediately
configure_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown: tables, default admin, scheduler."""
    logger.info("Starting Bloglytics...", env=settings.ENVIRONMENT)

    # create tables here in dev; production uses migrations
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created/verified")

    from bloglytics.application.services.auth_service import ensure_default_admin
    db = SessionLocal()
    try:
        ensure_default_admin(db)
    finally:
        db.close()

    if settings.SCHEDULER_ENABLED:
        from bloglytics.scheduler.jobs import start_scheduler
        start_scheduler()

    yield

    if settings.SCHEDULER_ENABLED:
        from bloglytics.scheduler.jobs import stop_scheduler
        stop_scheduler()
    logger.info("Bloglytics stopped")


app = FastAPI(
    title="Bloglytics",
    description="Blogging platform API: posts, comments, likes, trending and admin analytics",
    version="1.0.0",
    lifespan=lifespan,
)

# Setup Middleware (Correlation ID, Session, Logging)
setup_middleware(app)

# Exception handling
app.add_exception_handler(PageAccessDenied, page_access_denied_handler)
app.add_exception_handler(ActionDenied, action_denied_handler)
app.add_exception_handler(AppError, global_exception_handler)
app.add_exception_handler(SQLAlchemyError, global_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# Starlette runs middleware LIFO, so CORS added last sees requests first
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(auth_router)
app.include_router(home_router)
app.include_router(blogs_router)
app.include_router(dashboard_router)
app.include_router(admin_router)

# Uploaded images
os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=settings.UPLOAD_DIR), name="uploads")


@app.get("/")
def root():
    return {
        "name": "Bloglytics",
        "version": "1.0.0",
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health")
def health():
    return {"status": "healthy"}
