"""
Like toggling.

The like-set of a comment is the set of comment_like rows for it. A toggle
is one row delete, or one row insert when nothing was deleted, so
concurrent toggles by different principals never lose each other's likes.
"""
from dataclasses import dataclass

from sqlalchemy import select, delete, insert, update, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from src.core.comments.store import get_comment
from src.core.db.tables.comment import Comment, CommentLike, utcnow
from src.core.logger import get_logger

logger = get_logger(__name__)


@dataclass
class LikeState:
    liked_by_viewer: bool
    like_count: int


def count_likes(session: Session, comment_id: int) -> int:
    return session.execute(
        select(func.count())
        .select_from(CommentLike)
        .where(CommentLike.comment_id == comment_id)
    ).scalar_one()


def toggle_like(session: Session, comment_id: int, principal_id: str) -> LikeState:
    """
    Flip principal_id's like on a comment.

    Raises:
        NotFound: the comment does not exist
    """
    get_comment(session, comment_id)

    removed = session.execute(
        delete(CommentLike).where(
            CommentLike.comment_id == comment_id,
            CommentLike.principal_id == principal_id,
        )
    ).rowcount

    try:
        if not removed:
            session.execute(
                insert(CommentLike).values(
                    comment_id=comment_id,
                    principal_id=principal_id,
                    created_at=utcnow(),
                )
            )
        session.execute(
            update(Comment)
            .where(Comment.id == comment_id)
            .values(updated_at=utcnow())
        )
        session.commit()
    except IntegrityError:
        # A concurrent toggle by the same principal inserted the row first
        session.rollback()
        logger.warning(f"Duplicate like by {principal_id} on comment {comment_id}; keeping existing like")

    liked = not removed
    logger.info(f"Comment {comment_id} {'liked' if liked else 'unliked'} by {principal_id}")
    return LikeState(liked_by_viewer=liked, like_count=count_likes(session, comment_id))
