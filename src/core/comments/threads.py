"""
Thread assembly: approved root comments with their approved replies.

Like counts, the viewer's like state and reply counts are derived here on
every read. None of them are stored on the comment rows.
"""
from dataclasses import dataclass, field

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from src.core.comments.store import list_replies, list_roots_for_post
from src.core.db.tables.comment import Comment, CommentLike
from src.core.errors import NotFound
from src.core.posts import post_exists
from src.core.principal import Principal


@dataclass
class CommentNode:
    """A comment annotated for a particular viewer."""

    comment: Comment
    like_count: int = 0
    liked_by_viewer: bool = False
    replies: list["CommentNode"] = field(default_factory=list)

    @property
    def reply_count(self) -> int:
        return len(self.replies)


def like_counts(session: Session, comment_ids: list[int]) -> dict[int, int]:
    if not comment_ids:
        return {}
    rows = session.execute(
        select(CommentLike.comment_id, func.count())
        .where(CommentLike.comment_id.in_(comment_ids))
        .group_by(CommentLike.comment_id)
    ).all()
    return {comment_id: count for comment_id, count in rows}


def liked_by(session: Session, comment_ids: list[int], principal_id: str) -> set[int]:
    """Subset of comment_ids that principal_id has liked."""
    if not comment_ids:
        return set()
    return set(
        session.execute(
            select(CommentLike.comment_id).where(
                CommentLike.comment_id.in_(comment_ids),
                CommentLike.principal_id == principal_id,
            )
        ).scalars().all()
    )


def annotate(
    session: Session,
    comments: list[Comment],
    viewer: Principal | None = None,
) -> list[CommentNode]:
    """Wrap comments in nodes carrying like_count and liked_by_viewer."""
    ids = [comment.id for comment in comments]
    counts = like_counts(session, ids)
    mine = liked_by(session, ids, viewer.id) if viewer else set()

    return [
        CommentNode(
            comment=comment,
            like_count=counts.get(comment.id, 0),
            liked_by_viewer=comment.id in mine,
        )
        for comment in comments
    ]


def assemble_thread(
    session: Session,
    post_id: int,
    viewer: Principal | None = None,
) -> list[CommentNode]:
    """
    Build the comment threads shown under a post.

    Roots come newest first, replies under each root oldest first. Anonymous
    viewers get liked_by_viewer=False everywhere.

    Raises:
        NotFound: the post does not exist
    """
    if not post_exists(session, post_id):
        raise NotFound("Post not found")

    roots = list_roots_for_post(session, post_id)
    replies = list_replies(session, [root.id for root in roots])

    flat = list(roots)
    for root in roots:
        flat.extend(replies[root.id])
    nodes = {node.comment.id: node for node in annotate(session, flat, viewer)}

    threads = []
    for root in roots:
        node = nodes[root.id]
        node.replies = [nodes[reply.id] for reply in replies[root.id]]
        threads.append(node)
    return threads
