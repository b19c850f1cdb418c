"""
Comment API endpoints: threads, replies, likes and moderation.
"""
from sqlalchemy.orm import Session
from fastapi import APIRouter, Depends, Path, Query, Request, status

from src.core.comments import store
from src.core.comments.authz import can_mutate, ensure_can_moderate, ensure_can_mutate
from src.core.comments.cascade import delete_with_replies
from src.core.comments.moderation import audit_if_moderating
from src.core.comments.reactions import toggle_like
from src.core.comments.threads import annotate, assemble_thread
from src.core.db.session import get_db, get_current_user, get_current_user_optional
from src.core.db.tables.base import MAX_ID
from src.core.errors import NotFound
from src.core.logger import get_logger
from src.core.principal import Principal
from src.core.rate_limit import limiter
from src.api.v0.comment.models import (
    AuthorCommentsResponse,
    CommentApproval,
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    CommentWithReplies,
    LikeResponse,
    authored_comments,
    build_pagination,
    node_response,
    thread_response,
)

router = APIRouter(prefix="/comments", tags=["comments"])
logger = get_logger(__name__)


def get_request_info(request: Request) -> tuple[str | None, str | None]:
    """Extract IP address and user agent from request for audit logging"""
    ip_address = request.client.host if request.client else None
    user_agent = request.headers.get("User-Agent")
    return ip_address, user_agent


@router.get("/post/{post_id}", response_model=list[CommentWithReplies])
def get_comments_for_post(
    post_id: int = Path(..., ge=1, le=MAX_ID),
    session: Session = Depends(get_db),
    viewer: Principal | None = Depends(get_current_user_optional),
):
    """Get the approved comment threads for a post, newest thread first"""
    threads = assemble_thread(session, post_id, viewer)
    return [thread_response(node) for node in threads]


@router.get("/user/{username}", response_model=AuthorCommentsResponse)
def get_user_comments(
    username: str,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=store.MAX_PAGE_SIZE),
    session: Session = Depends(get_db),
    viewer: Principal | None = Depends(get_current_user_optional),
):
    """
    Get a user's top-level comments, newest first.

    Hidden comments are included only when the author or an admin asks.
    """
    include_unapproved = viewer is not None and (viewer.id == username or viewer.is_admin)
    comments, total = store.list_by_author(
        session, username, page, limit, include_unapproved=include_unapproved
    )

    return AuthorCommentsResponse(
        comments=authored_comments(session, comments, viewer),
        pagination=build_pagination(page, limit, total),
    )


@router.get("/{comment_id}", response_model=CommentResponse)
def get_comment(
    comment_id: int = Path(..., ge=1, le=MAX_ID),
    session: Session = Depends(get_db),
    viewer: Principal | None = Depends(get_current_user_optional),
):
    """Get a single comment. Hidden comments are only visible to their author and admins"""
    comment = store.get_comment(session, comment_id)
    if not comment.is_approved and (viewer is None or not can_mutate(viewer, comment)):
        raise NotFound("Comment not found")

    return node_response(annotate(session, [comment], viewer)[0])


@router.post("", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("30/minute")
def create_comment(
    request: Request,
    comment_data: CommentCreate,
    current_user: Principal = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Comment on a post, or reply to a root comment with parent_id.

    Rate limited to 30 comments per minute per IP.
    """
    comment = store.create_comment(
        session,
        content=comment_data.content,
        author=current_user.id,
        post_id=comment_data.post_id,
        parent_id=comment_data.parent_id,
    )
    return node_response(annotate(session, [comment], current_user)[0])


@router.put("/{comment_id}", response_model=CommentResponse)
def update_comment(
    request: Request,
    comment_data: CommentUpdate,
    comment_id: int = Path(..., ge=1, le=MAX_ID),
    current_user: Principal = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Edit a comment's content (author or admin)"""
    store.validate_content(comment_data.content)
    comment = store.get_comment(session, comment_id)
    ensure_can_mutate(current_user, comment, "edit")

    ip_address, user_agent = get_request_info(request)
    audit_if_moderating(
        session, current_user, comment, "update_comment",
        ip_address=ip_address, user_agent=user_agent,
    )

    comment = store.update_comment(session, comment_id, comment_data.content)
    return node_response(annotate(session, [comment], current_user)[0])


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_comment(
    request: Request,
    comment_id: int = Path(..., ge=1, le=MAX_ID),
    current_user: Principal = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """Delete a comment and all of its replies (author or admin)"""
    comment = store.get_comment(session, comment_id)
    ensure_can_mutate(current_user, comment, "delete")

    ip_address, user_agent = get_request_info(request)
    audit_if_moderating(
        session, current_user, comment, "delete_comment",
        ip_address=ip_address, user_agent=user_agent,
    )

    delete_with_replies(session, comment_id)
    logger.info(f"Comment {comment_id} deleted by {current_user.id}")


@router.post("/{comment_id}/like", response_model=LikeResponse)
@limiter.limit("60/minute")
def like_comment(
    request: Request,
    comment_id: int = Path(..., ge=1, le=MAX_ID),
    current_user: Principal = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Like a comment, or remove the like if already liked.

    Rate limited to 60 toggles per minute per IP.
    """
    state = toggle_like(session, comment_id, current_user.id)
    return LikeResponse(
        liked_by_viewer=state.liked_by_viewer,
        like_count=state.like_count,
        message="Comment liked" if state.liked_by_viewer else "Comment unliked",
    )


@router.patch("/{comment_id}/approval", response_model=CommentResponse)
def set_comment_approval(
    request: Request,
    approval: CommentApproval,
    comment_id: int = Path(..., ge=1, le=MAX_ID),
    current_user: Principal = Depends(get_current_user),
    session: Session = Depends(get_db),
):
    """
    Approve or hide a comment (admin only).

    Hidden comments drop out of post threads and public user listings.
    All approval changes are logged for audit purposes.
    """
    ensure_can_moderate(current_user)
    comment = store.get_comment(session, comment_id)

    ip_address, user_agent = get_request_info(request)
    audit_if_moderating(
        session, current_user, comment, "set_approval",
        details={"is_approved": approval.is_approved},
        ip_address=ip_address, user_agent=user_agent,
        include_own=True,
    )

    comment = store.set_approval(session, comment_id, approval.is_approved)
    return node_response(annotate(session, [comment], current_user)[0])
