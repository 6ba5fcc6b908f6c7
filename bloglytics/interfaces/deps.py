"""
API Dependencies.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from bloglytics.infrastructure.database import get_db
from bloglytics.domain.models.blog_post import BlogPost
from bloglytics.domain.models.category import Category
from bloglytics.domain.models.comment import Comment
from bloglytics.domain.models.user import User
from bloglytics.domain.repositories.blog_repository import BlogRepository
from bloglytics.domain.repositories.category_repository import CategoryRepository
from bloglytics.domain.repositories.comment_repository import CommentRepository
from bloglytics.domain.repositories.user_repository import UserRepository
from bloglytics.infrastructure.repositories.blog_repository import SQLAlchemyBlogRepository
from bloglytics.infrastructure.repositories.category_repository import SQLAlchemyCategoryRepository
from bloglytics.infrastructure.repositories.comment_repository import SQLAlchemyCommentRepository
from bloglytics.infrastructure.repositories.user_repository import SQLAlchemyUserRepository


def get_blog_repository(db: Session = Depends(get_db)) -> BlogRepository:
    """Get blog repository instance."""
    return SQLAlchemyBlogRepository(db, BlogPost)


def get_category_repository(db: Session = Depends(get_db)) -> CategoryRepository:
    """Get category repository instance."""
    return SQLAlchemyCategoryRepository(db, Category)


def get_comment_repository(db: Session = Depends(get_db)) -> CommentRepository:
    """Get comment repository instance."""
    return SQLAlchemyCommentRepository(db, Comment)


def get_user_repository(db: Session = Depends(get_db)) -> UserRepository:
    """Get user repository instance."""
    return SQLAlchemyUserRepository(db, User)
