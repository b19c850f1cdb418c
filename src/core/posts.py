"""
Post store used by the comment core.

Comments only need to know whether a post exists; creation and lookup
exist so the service can be run and exercised on its own.
"""
import re
import unicodedata

from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.db.tables.post import Post
from src.core.errors import NotFound

SLUG_MAX_LENGTH = 200


def post_exists(session: Session, post_id: int) -> bool:
    return session.execute(
        select(Post.id).where(Post.id == post_id)
    ).scalar() is not None


def get_post(session: Session, post_id: int) -> Post:
    post = session.execute(select(Post).where(Post.id == post_id)).scalar()
    if not post:
        raise NotFound("Post not found")
    return post


def slugify(title: str) -> str:
    """
    Turn a title into a URL slug: ascii, lowercase, words joined by hyphens.

    >>> slugify("Hello, World!")
    'hello-world'
    """
    normalized = unicodedata.normalize("NFKD", title).encode("ascii", "ignore").decode("ascii")
    slug = re.sub(r"[^a-z0-9]+", "-", normalized.lower()).strip("-")
    return slug[:SLUG_MAX_LENGTH].rstrip("-") or "post"


def unique_slug(session: Session, title: str) -> str:
    """Slug for title, suffixed with -2, -3, ... when already taken."""
    base = slugify(title)
    taken = set(
        session.execute(
            select(Post.slug).where(Post.slug.like(f"{base}%"))
        ).scalars().all()
    )
    if base not in taken:
        return base

    suffix = 2
    while f"{base}-{suffix}" in taken:
        suffix += 1
    return f"{base}-{suffix}"
