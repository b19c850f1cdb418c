from sqlalchemy.orm import Session
from fastapi import APIRouter, Depends, Path, Request, status

from src.core.db.session import get_current_user, get_db
from src.core.db.tables.base import MAX_ID
from src.core.db.tables.post import Post
from src.core.logger import get_logger
from src.core.posts import get_post, unique_slug
from src.core.principal import Principal
from src.core.rate_limit import limiter
from src.api.v0.post.models import PostCreate, PostResponse

router = APIRouter(prefix="/posts", tags=["posts"])
logger = get_logger(__name__)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/hour")
def create_post(
    request: Request,
    post_data: PostCreate,
    current_user: Principal = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Publish a post that readers can comment on.

    Rate limited to 20 posts per hour per IP.
    """
    post = Post(
        title=post_data.title,
        slug=unique_slug(session, post_data.title),
        content=post_data.content,
        category=post_data.category,
        author=current_user.id,
    )

    session.add(post)
    session.commit()
    session.refresh(post)

    logger.info(f"Post {post.id} ({post.slug}) created by {current_user.id}")
    return post


@router.get("/{post_id}", response_model=PostResponse)
def read_post(
    post_id: int = Path(..., ge=1, le=MAX_ID),
    session: Session = Depends(get_db),
):
    """Get a post (public)"""
    return get_post(session, post_id)
