"""
Audit trail for admin actions on comments.
"""
import json

from sqlalchemy.orm import Session

from src.core.db.tables.comment import Comment
from src.core.db.tables.moderation_log import log_moderation_action
from src.core.logger import get_logger
from src.core.principal import Principal

logger = get_logger(__name__)


def audit_if_moderating(
    session: Session,
    principal: Principal,
    comment: Comment,
    action: str,
    details: dict | None = None,
    ip_address: str | None = None,
    user_agent: str | None = None,
    include_own: bool = False,
) -> bool:
    """
    Stage a moderation log entry when an admin acts on someone else's comment.

    With include_own, admin actions on their own comments are logged too;
    approval changes use this.

    The entry is committed by the store operation that follows, so it is
    only persisted if the action itself succeeds.

    Returns:
        True if an entry was staged
    """
    if not principal.is_admin:
        return False
    if principal.id == comment.author and not include_own:
        return False

    log_moderation_action(
        session,
        action=action,
        moderator=principal.id,
        target_id=str(comment.id),
        target_type="comment",
        details=json.dumps({"author": comment.author, "post_id": comment.post_id, **(details or {})}),
        ip_address=ip_address,
        user_agent=user_agent,
    )
    logger.info(f"Moderation: {principal.id} {action} on comment {comment.id} by {comment.author}")
    return True
