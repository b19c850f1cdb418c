"""
Authorization gate for comment mutations.

Every mutating operation goes through ensure_can_mutate or
ensure_can_moderate, whichever surface (HTTP or MCP) it came from.
A principal who is denied gets Forbidden, so the comment's existence is
visible to non-owners.
"""
from src.core.db.tables.comment import Comment
from src.core.errors import Forbidden
from src.core.logger import get_logger
from src.core.principal import Principal

logger = get_logger(__name__)


def can_mutate(principal: Principal, comment: Comment) -> bool:
    return principal.is_admin or principal.id == comment.author


def can_moderate(principal: Principal) -> bool:
    return principal.is_admin


def ensure_can_mutate(principal: Principal, comment: Comment, action: str = "modify") -> None:
    if not can_mutate(principal, comment):
        logger.warning(f"{principal.id} denied permission to {action} comment {comment.id}")
        raise Forbidden(f"Not authorized to {action} this comment")


def ensure_can_moderate(principal: Principal) -> None:
    if not can_moderate(principal):
        logger.warning(f"{principal.id} denied moderation access")
        raise Forbidden("Admin privileges required")
