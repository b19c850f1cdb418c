from sqlalchemy import String, Integer, DateTime, Boolean, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column
from datetime import datetime, timezone

from src.core.db.tables.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Comment(Base):
    """Comment on a post. parent_id is None for root comments."""

    __tablename__ = "comment"
    __table_args__ = (
        Index("ix_comment_post_created", "post_id", "created_at"),
        Index("ix_comment_parent_created", "parent_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, unique=True)
    post_id: Mapped[int] = mapped_column(Integer, ForeignKey("post.id"))
    author: Mapped[str] = mapped_column(String(256), index=True)
    content: Mapped[str] = mapped_column(String(1000))
    parent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("comment.id"), nullable=True, default=None
    )
    is_edited: Mapped[bool] = mapped_column(Boolean, default=False)
    is_approved: Mapped[bool] = mapped_column(Boolean, default=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    @property
    def is_reply(self) -> bool:
        return self.parent_id is not None


class CommentLike(Base):
    """
    One row per (comment, principal) like.

    The composite primary key is the like-set: membership changes are
    single-row inserts and deletes, so concurrent toggles by different
    principals never overwrite each other.
    """

    __tablename__ = "comment_like"

    comment_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("comment.id", ondelete="CASCADE"), primary_key=True
    )
    principal_id: Mapped[str] = mapped_column(String(256), primary_key=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)
