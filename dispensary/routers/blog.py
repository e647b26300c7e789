from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from dispensary.core.database import get_db
from dispensary.core.formatting import iso
from dispensary.models.blog_post import BlogPost
from dispensary.services import content

router = APIRouter(prefix="/api/blog", tags=["blog"])


def _post_to_dict(post: BlogPost, *, with_content: bool = True) -> dict:
    data = {
        "id": post.id,
        "title": post.title,
        "slug": post.slug,
        "excerpt": post.excerpt,
        "category": post.category,
        "author": post.author,
        "featured_image": post.featured_image,
        "published_at": iso(post.published_at),
        "generated_by_ai": post.generated_by_ai,
    }
    if with_content:
        data["content"] = post.content
    return data


@router.get("")
def list_posts(db: Session = Depends(get_db)):
    return [_post_to_dict(post, with_content=False) for post in content.list_published_posts(db)]


@router.get("/{slug}")
def get_post(slug: str, db: Session = Depends(get_db)):
    return _post_to_dict(content.get_post_by_slug(db, slug))
