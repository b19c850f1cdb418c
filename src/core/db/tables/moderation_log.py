"""
Moderation audit log table for tracking admin actions on comments.
"""
from sqlalchemy import String, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from datetime import datetime

from src.core.db.tables.base import Base


class ModerationLog(Base):
    """
    Audit log for moderation actions.

    Written whenever an admin changes a comment's approval flag, or edits
    or deletes a comment they do not own.
    """

    __tablename__ = "moderation_log"

    id: Mapped[int] = mapped_column(primary_key=True)
    action: Mapped[str] = mapped_column(String(50))  # "set_approval", "update_comment", "delete_comment"
    moderator: Mapped[str] = mapped_column(String(256), index=True)
    target_id: Mapped[str | None] = mapped_column(String(256), nullable=True)
    target_type: Mapped[str | None] = mapped_column(String(50), nullable=True)  # "comment"
    details: Mapped[str | None] = mapped_column(Text, nullable=True)  # JSON
    ip_address: Mapped[str | None] = mapped_column(String(45), nullable=True)  # IPv6 max length
    user_agent: Mapped[str | None] = mapped_column(String(512), nullable=True)
    timestamp: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), index=True)


def log_moderation_action(
    session,
    action: str,
    moderator: str,
    target_id: str | None = None,
    target_type: str | None = None,
    details: str | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
) -> ModerationLog:
    """
    Add a moderation entry to the session.

    The caller commits, so the entry lands in the same transaction as the
    action it records.

    Args:
        session: Database session
        action: Type of action (set_approval, update_comment, delete_comment)
        moderator: Principal id of the admin acting
        target_id: ID of the target comment
        target_type: Type of target
        details: JSON string with additional details
        ip_address: IP address of the requester
        user_agent: User agent of the requester

    Returns:
        The pending ModerationLog entry
    """
    log_entry = ModerationLog(
        action=action,
        moderator=moderator,
        target_id=target_id,
        target_type=target_type,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    session.add(log_entry)
    return log_entry
