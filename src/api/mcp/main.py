"""
MCP tools implementation for Inkwell.

Exposes the comment operations as MCP tools for the stdio server. The tools
call the same comment core as the HTTP API, so validation, authorization
and moderation logging behave identically.
"""
import json
from typing import Any
from dataclasses import dataclass
from pydantic import BaseModel, Field
from pydantic import ValidationError as SchemaValidationError

from sqlalchemy.orm import Session

from src.core.comments import store
from src.core.comments.authz import ensure_can_moderate, ensure_can_mutate
from src.core.comments.cascade import delete_with_replies
from src.core.comments.moderation import audit_if_moderating
from src.core.comments.reactions import toggle_like
from src.core.comments.threads import annotate, assemble_thread
from src.core.db.session import resolve_principal
from src.core.db.tables.base import MAX_ID
from src.core.errors import InkwellError, Unauthenticated
from src.core.logger import get_logger
from src.core.principal import Principal
from src.api.v0.comment.models import authored_comments, build_pagination, node_response, thread_response

logger = get_logger(__name__)


@dataclass
class ToolResult:
    """Result from tool execution."""
    content: list[dict]
    isError: bool = False


class ToolInputSchema(BaseModel):
    """Base class for tool input schemas."""
    pass


@dataclass
class Tool:
    """Represents an MCP tool definition."""
    name: str
    description: str
    inputSchema: type[ToolInputSchema]


class AuthenticatedInput(ToolInputSchema):
    """Tools acting as a user take that user's secret key."""
    secret_key: str | None = Field(None, description="Secret key of the acting user")


class VerifyAuthInput(ToolInputSchema):
    secret_key: str


class GetCommentsInput(AuthenticatedInput):
    post_id: int = Field(..., ge=1, le=MAX_ID)


class CreateCommentInput(AuthenticatedInput):
    post_id: int = Field(..., ge=1, le=MAX_ID)
    content: str
    parent_id: int | None = Field(None, ge=1, le=MAX_ID)


class UpdateCommentInput(AuthenticatedInput):
    comment_id: int = Field(..., ge=1, le=MAX_ID)
    content: str


class CommentIdInput(AuthenticatedInput):
    comment_id: int = Field(..., ge=1, le=MAX_ID)


class ListUserCommentsInput(AuthenticatedInput):
    username: str
    page: int = Field(default=1, ge=1)
    limit: int = Field(default=10, ge=1, le=store.MAX_PAGE_SIZE)


class SetCommentApprovalInput(AuthenticatedInput):
    comment_id: int = Field(..., ge=1, le=MAX_ID)
    is_approved: bool


TOOLS = [
    Tool(
        name="verify_auth",
        description="Verify if a secret key is valid and return the associated username and role.",
        inputSchema=VerifyAuthInput,
    ),
    Tool(
        name="get_comments",
        description="Get the approved comment threads for a post: root comments newest first, each with its replies oldest first.",
        inputSchema=GetCommentsInput,
    ),
    Tool(
        name="create_comment",
        description="Comment on a post, or reply to a root comment with parent_id. Requires authentication.",
        inputSchema=CreateCommentInput,
    ),
    Tool(
        name="update_comment",
        description="Edit a comment's content. Requires authentication (author or admin).",
        inputSchema=UpdateCommentInput,
    ),
    Tool(
        name="delete_comment",
        description="Delete a comment and all of its replies. Requires authentication (author or admin).",
        inputSchema=CommentIdInput,
    ),
    Tool(
        name="toggle_comment_like",
        description="Like a comment, or remove your like if you already liked it. Requires authentication.",
        inputSchema=CommentIdInput,
    ),
    Tool(
        name="list_user_comments",
        description="List a user's top-level comments, newest first, with pagination.",
        inputSchema=ListUserCommentsInput,
    ),
    Tool(
        name="set_comment_approval",
        description="Approve or hide a comment. Requires an admin account.",
        inputSchema=SetCommentApprovalInput,
    ),
]

TOOLS_BY_NAME = {tool.name: tool for tool in TOOLS}


def _text(payload: Any) -> ToolResult:
    return ToolResult(content=[{"type": "text", "text": json.dumps(payload)}])


def _require_user(current_user: Principal | None) -> Principal:
    if not current_user:
        raise Unauthenticated("Authentication required")
    return current_user


def execute_tool(
    name: str,
    arguments: dict[str, Any],
    current_user: Principal | None,
    session: Session,
) -> ToolResult:
    """
    Execute an MCP tool by name with the given arguments.

    Args:
        name: The tool name to execute
        arguments: The tool arguments
        current_user: The authenticated principal (if any)
        session: Database session

    Returns:
        ToolResult with content blocks and error status
    """
    tool = TOOLS_BY_NAME.get(name)
    if tool is None:
        return ToolResult(
            content=[{"type": "text", "text": f"Unknown tool: {name}"}],
            isError=True,
        )

    logger.info(f"MCP tool call: {name} by {current_user.id if current_user else 'anonymous'}")

    try:
        params = tool.inputSchema.model_validate(arguments)

        if name == "verify_auth":
            return _tool_verify_auth(params, session)

        elif name == "get_comments":
            return _tool_get_comments(params, current_user, session)

        elif name == "create_comment":
            return _tool_create_comment(params, current_user, session)

        elif name == "update_comment":
            return _tool_update_comment(params, current_user, session)

        elif name == "delete_comment":
            return _tool_delete_comment(params, current_user, session)

        elif name == "toggle_comment_like":
            return _tool_toggle_comment_like(params, current_user, session)

        elif name == "list_user_comments":
            return _tool_list_user_comments(params, current_user, session)

        else:
            return _tool_set_comment_approval(params, current_user, session)

    except InkwellError as e:
        return ToolResult(
            content=[{"type": "text", "text": f"{e.kind}: {e.message}"}],
            isError=True,
        )
    except SchemaValidationError as e:
        return ToolResult(
            content=[{"type": "text", "text": f"validation_error: {e}"}],
            isError=True,
        )


def _tool_verify_auth(params: VerifyAuthInput, session: Session) -> ToolResult:
    """Verify a secret key."""
    principal = resolve_principal(session, params.secret_key)
    if principal is None:
        return _text({"valid": False})
    return _text({"valid": True, "username": principal.id, "role": principal.role.value})


def _tool_get_comments(params: GetCommentsInput, current_user: Principal | None, session: Session) -> ToolResult:
    threads = assemble_thread(session, params.post_id, current_user)
    return _text([thread_response(node).model_dump(mode="json") for node in threads])


def _tool_create_comment(params: CreateCommentInput, current_user: Principal | None, session: Session) -> ToolResult:
    user = _require_user(current_user)
    comment = store.create_comment(
        session,
        content=params.content,
        author=user.id,
        post_id=params.post_id,
        parent_id=params.parent_id,
    )
    return _text(node_response(annotate(session, [comment], user)[0]).model_dump(mode="json"))


def _tool_update_comment(params: UpdateCommentInput, current_user: Principal | None, session: Session) -> ToolResult:
    user = _require_user(current_user)
    store.validate_content(params.content)
    comment = store.get_comment(session, params.comment_id)
    ensure_can_mutate(user, comment, "edit")
    audit_if_moderating(session, user, comment, "update_comment")

    comment = store.update_comment(session, params.comment_id, params.content)
    return _text(node_response(annotate(session, [comment], user)[0]).model_dump(mode="json"))


def _tool_delete_comment(params: CommentIdInput, current_user: Principal | None, session: Session) -> ToolResult:
    user = _require_user(current_user)
    comment = store.get_comment(session, params.comment_id)
    ensure_can_mutate(user, comment, "delete")
    audit_if_moderating(session, user, comment, "delete_comment")

    replies = delete_with_replies(session, params.comment_id)
    return _text({
        "success": True,
        "message": f"Comment {params.comment_id} deleted",
        "replies_deleted": replies,
    })


def _tool_toggle_comment_like(params: CommentIdInput, current_user: Principal | None, session: Session) -> ToolResult:
    user = _require_user(current_user)
    state = toggle_like(session, params.comment_id, user.id)
    return _text({"liked_by_viewer": state.liked_by_viewer, "like_count": state.like_count})


def _tool_list_user_comments(params: ListUserCommentsInput, current_user: Principal | None, session: Session) -> ToolResult:
    include_unapproved = current_user is not None and (
        current_user.id == params.username or current_user.is_admin
    )
    comments, total = store.list_by_author(
        session, params.username, params.page, params.limit, include_unapproved=include_unapproved
    )
    return _text({
        "comments": [item.model_dump(mode="json") for item in authored_comments(session, comments, current_user)],
        "pagination": build_pagination(params.page, params.limit, total).model_dump(),
    })


def _tool_set_comment_approval(params: SetCommentApprovalInput, current_user: Principal | None, session: Session) -> ToolResult:
    user = _require_user(current_user)
    ensure_can_moderate(user)
    comment = store.get_comment(session, params.comment_id)
    audit_if_moderating(
        session, user, comment, "set_approval",
        details={"is_approved": params.is_approved},
        include_own=True,
    )

    comment = store.set_approval(session, params.comment_id, params.is_approved)
    return _text(node_response(annotate(session, [comment], user)[0]).model_dump(mode="json"))
