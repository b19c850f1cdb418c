"""
Comment persistence.

Plain functions over a SQLAlchemy session. Mutating functions commit;
the helpers prefixed with ``purge`` only stage their statements so that
callers can group them into one transaction.
"""
from sqlalchemy import select, delete, func
from sqlalchemy.orm import Session

from src.core.db.tables.comment import Comment, CommentLike, utcnow
from src.core.errors import InvalidNesting, NotFound, ValidationError
from src.core.logger import get_logger
from src.core.posts import post_exists

logger = get_logger(__name__)

MIN_CONTENT_LENGTH = 1
MAX_CONTENT_LENGTH = 1000
MAX_PAGE_SIZE = 100


def validate_content(content: str | None) -> str:
    """
    Check comment content and return it unchanged.

    Content is stored exactly as submitted. Length is counted in characters
    and whitespace-only content counts as empty.
    """
    if content is None:
        raise ValidationError("Comment content is required")
    if len(content) < MIN_CONTENT_LENGTH or not content.strip():
        raise ValidationError("Comment cannot be empty")
    if len(content) > MAX_CONTENT_LENGTH:
        raise ValidationError(f"Comment cannot exceed {MAX_CONTENT_LENGTH} characters")
    return content


def get_comment(session: Session, comment_id: int) -> Comment:
    comment = session.execute(select(Comment).where(Comment.id == comment_id)).scalar()
    if not comment:
        raise NotFound("Comment not found")
    return comment


def create_comment(
    session: Session,
    content: str,
    author: str,
    post_id: int,
    parent_id: int | None = None,
) -> Comment:
    """
    Create a root comment, or a reply when parent_id is given.

    Raises:
        ValidationError: content is empty or longer than 1000 characters
        NotFound: the post or the parent comment does not exist
        InvalidNesting: the parent is itself a reply, or belongs to another post
    """
    validate_content(content)

    if not post_exists(session, post_id):
        raise NotFound("Post not found")

    if parent_id is not None:
        parent = session.execute(select(Comment).where(Comment.id == parent_id)).scalar()
        if not parent:
            raise NotFound("Parent comment not found")
        if parent.is_reply:
            raise InvalidNesting("Cannot reply to a reply")
        if parent.post_id != post_id:
            raise InvalidNesting("Parent comment must belong to the same post")

    now = utcnow()
    comment = Comment(
        content=content,
        author=author,
        post_id=post_id,
        parent_id=parent_id,
        is_edited=False,
        is_approved=True,
        created_at=now,
        updated_at=now,
    )
    session.add(comment)
    session.commit()
    session.refresh(comment)

    logger.info(
        f"Comment {comment.id} created on post {post_id} by {author}"
        + (f" in reply to {parent_id}" if parent_id is not None else "")
    )
    return comment


def list_roots_for_post(session: Session, post_id: int) -> list[Comment]:
    """Approved root comments for a post, newest first."""
    return list(
        session.execute(
            select(Comment)
            .where(
                Comment.post_id == post_id,
                Comment.parent_id.is_(None),
                Comment.is_approved.is_(True),
            )
            .order_by(Comment.created_at.desc(), Comment.id.desc())
        ).scalars().all()
    )


def list_replies(session: Session, root_ids: list[int]) -> dict[int, list[Comment]]:
    """Approved direct replies grouped by root id, oldest first."""
    replies: dict[int, list[Comment]] = {root_id: [] for root_id in root_ids}
    if not root_ids:
        return replies

    rows = session.execute(
        select(Comment)
        .where(
            Comment.parent_id.in_(root_ids),
            Comment.is_approved.is_(True),
        )
        .order_by(Comment.created_at.asc(), Comment.id.asc())
    ).scalars().all()

    for reply in rows:
        replies[reply.parent_id].append(reply)
    return replies


def update_comment(session: Session, comment_id: int, content: str) -> Comment:
    validate_content(content)
    comment = get_comment(session, comment_id)

    comment.content = content
    comment.is_edited = True
    comment.updated_at = utcnow()
    session.commit()
    session.refresh(comment)

    logger.info(f"Comment {comment_id} edited")
    return comment


def set_approval(session: Session, comment_id: int, approved: bool) -> Comment:
    comment = get_comment(session, comment_id)

    comment.is_approved = approved
    comment.updated_at = utcnow()
    session.commit()
    session.refresh(comment)

    logger.info(f"Comment {comment_id} {'approved' if approved else 'hidden'}")
    return comment


def purge_comments(session: Session, comment_ids: list[int]) -> None:
    """Stage deletion of the given comments and their likes. Does not commit."""
    if not comment_ids:
        return
    session.execute(delete(CommentLike).where(CommentLike.comment_id.in_(comment_ids)))
    session.execute(delete(Comment).where(Comment.id.in_(comment_ids)))


def delete_comment(session: Session, comment_id: int) -> None:
    """
    Delete a single comment.

    Replies are not touched; use delete_with_replies for root comments.
    """
    get_comment(session, comment_id)
    purge_comments(session, [comment_id])
    session.commit()


def list_by_author(
    session: Session,
    author: str,
    page: int = 1,
    page_size: int = 10,
    include_unapproved: bool = False,
) -> tuple[list[Comment], int]:
    """
    Root comments written by author, newest first.

    Hidden comments are only listed when include_unapproved is set, which
    callers do for the author themselves and for admins.

    Returns:
        (comments on the requested page, total number of root comments)
    """
    if page < 1:
        raise ValidationError("page must be at least 1")
    if page_size < 1 or page_size > MAX_PAGE_SIZE:
        raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")

    condition = [Comment.author == author, Comment.parent_id.is_(None)]
    if not include_unapproved:
        condition.append(Comment.is_approved.is_(True))

    comments = session.execute(
        select(Comment)
        .where(*condition)
        .order_by(Comment.created_at.desc(), Comment.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).scalars().all()

    total = session.execute(
        select(func.count()).select_from(Comment).where(*condition)
    ).scalar_one()

    return list(comments), total
