from __future__ import annotations

import json
import logging
from typing import Any

from sqlalchemy.orm import Session

from dispensary.core.errors import NotFoundError
from dispensary.models.blog_post import BlogPost
from dispensary.models.notification import Notification
from dispensary.models.user_preference import UserPreference

logger = logging.getLogger(__name__)


def list_published_posts(db: Session, limit: int | None = None) -> list[BlogPost]:
    query = (
        db.query(BlogPost)
        .filter(BlogPost.published.is_(True))
        .order_by(BlogPost.published_at.desc(), BlogPost.id.desc())
    )
    if limit:
        query = query.limit(limit)
    return query.all()


def get_post_by_slug(db: Session, slug: str) -> BlogPost:
    post = (
        db.query(BlogPost)
        .filter(BlogPost.slug == slug, BlogPost.published.is_(True))
        .first()
    )
    if post is None:
        raise NotFoundError(f"Blog post {slug} not found")
    return post


def list_notifications(db: Session, user_id: int) -> list[Notification]:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
        .all()
    )


def get_preferences(db: Session, user_id: int) -> UserPreference | None:
    return db.query(UserPreference).filter(UserPreference.user_id == user_id).first()


def load_json_field(value: str | None, default: Any) -> Any:
    if not value:
        return default
    try:
        return json.loads(value)
    except (TypeError, ValueError):
        logger.warning("Invalid JSON in preference field, using default")
        return default
