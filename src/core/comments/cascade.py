"""
Cascading comment deletion.

Replies and their likes are deleted before the root, and everything is
committed together. A reply inserted by a concurrent request after the
reply ids were read is not seen here and can outlive its root.
"""
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.comments.store import get_comment, purge_comments
from src.core.db.tables.comment import Comment
from src.core.logger import get_logger

logger = get_logger(__name__)


def delete_with_replies(session: Session, comment_id: int) -> int:
    """
    Delete a comment and, for root comments, all of its direct replies.

    Returns:
        Number of replies deleted along with the comment
    """
    comment = get_comment(session, comment_id)

    reply_ids: list[int] = []
    if not comment.is_reply:
        reply_ids = list(
            session.execute(
                select(Comment.id).where(Comment.parent_id == comment_id)
            ).scalars().all()
        )

    purge_comments(session, reply_ids)
    purge_comments(session, [comment_id])
    session.commit()

    logger.info(f"Comment {comment_id} deleted with {len(reply_ids)} replies")
    return len(reply_ids)
