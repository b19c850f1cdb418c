from pydantic import BaseModel, Field
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.orm import Session

from src.core.comments.store import MAX_CONTENT_LENGTH
from src.core.comments.threads import CommentNode, annotate
from src.core.db.tables.base import MAX_ID
from src.core.db.tables.comment import Comment
from src.core.db.tables.post import Post
from src.core.principal import Principal


class CommentCreate(BaseModel):
    post_id: int = Field(..., ge=1, le=MAX_ID, description="ID of the post to comment on")
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)
    parent_id: int | None = Field(None, ge=1, le=MAX_ID, description="ID of the root comment being replied to")


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=MAX_CONTENT_LENGTH)


class CommentApproval(BaseModel):
    is_approved: bool


class CommentResponse(BaseModel):
    id: int
    post_id: int
    author: str
    content: str
    parent_id: int | None
    is_edited: bool
    is_approved: bool
    like_count: int = 0
    liked_by_viewer: bool = False
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommentWithReplies(CommentResponse):
    reply_count: int = 0
    replies: list[CommentResponse] = []


class LikeResponse(BaseModel):
    liked_by_viewer: bool
    like_count: int
    message: str


class AuthoredComment(CommentResponse):
    post_title: str | None = None
    post_slug: str | None = None


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_comments: int
    has_next: bool
    has_prev: bool


class AuthorCommentsResponse(BaseModel):
    comments: list[AuthoredComment]
    pagination: Pagination


def comment_response(comment: Comment, like_count: int = 0, liked_by_viewer: bool = False) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        post_id=comment.post_id,
        author=comment.author,
        content=comment.content,
        parent_id=comment.parent_id,
        is_edited=comment.is_edited,
        is_approved=comment.is_approved,
        like_count=like_count,
        liked_by_viewer=liked_by_viewer,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
    )


def node_response(node: CommentNode) -> CommentResponse:
    return comment_response(node.comment, node.like_count, node.liked_by_viewer)


def thread_response(node: CommentNode) -> CommentWithReplies:
    """Convert an assembled thread node into its API shape"""
    return CommentWithReplies(
        **node_response(node).model_dump(),
        reply_count=node.reply_count,
        replies=[node_response(reply) for reply in node.replies],
    )


def authored_comments(
    session: Session,
    comments: list[Comment],
    viewer: Principal | None = None,
) -> list[AuthoredComment]:
    """Annotate a user's comments and attach the title and slug of each owning post"""
    post_ids = {comment.post_id for comment in comments}
    posts = {
        post.id: post
        for post in session.execute(select(Post).where(Post.id.in_(post_ids))).scalars().all()
    } if post_ids else {}

    items = []
    for node in annotate(session, comments, viewer):
        post = posts.get(node.comment.post_id)
        items.append(
            AuthoredComment(
                **node_response(node).model_dump(),
                post_title=post.title if post else None,
                post_slug=post.slug if post else None,
            )
        )
    return items


def build_pagination(page: int, limit: int, total: int) -> Pagination:
    total_pages = (total + limit - 1) // limit
    return Pagination(
        current_page=page,
        total_pages=total_pages,
        total_comments=total,
        has_next=page * limit < total,
        has_prev=page > 1,
    )
