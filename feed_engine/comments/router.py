from typing import List

from fastapi import APIRouter, Depends, status
from pydantic import ValidationError

from feed_engine.comments.dependencies import get_comment_or_404, get_comment_service
from feed_engine.comments.exceptions import raise_for_comment_result
from feed_engine.comments.schemas import Comment, CommentCreate, CommentDraft, CommentResult
from feed_engine.comments.service import CommentService
from feed_engine.exceptions import (
    StoreUnavailableException,
    store_unavailable_exception,
    validation_exception,
)
from feed_engine.identity.dependencies import get_current_user
from feed_engine.identity.schemas import CurrentUser
from feed_engine.posts.dependencies import get_post_or_404
from feed_engine.posts.schemas import Post

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["Comments"])


@router.get("/", response_model=List[Comment])
async def get_comments(
    post: Post = Depends(get_post_or_404),
    current_user: CurrentUser = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """
    Comments on a post, oldest first
    """
    try:
        return await service.fetch(post)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)


@router.post("/", response_model=CommentResult, status_code=status.HTTP_201_CREATED)
async def add_comment(
    body: CommentCreate,
    post: Post = Depends(get_post_or_404),
    current_user: CurrentUser = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """
    Comment on a post as the current user
    """
    try:
        draft = CommentDraft(content=body.content)
    except ValidationError as e:
        raise validation_exception(str(e))

    try:
        return await service.add(post, draft, current_user)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)


@router.delete("/{comment_id}", response_model=CommentResult)
async def delete_comment(
    comment_id: str,
    post: Post = Depends(get_post_or_404),
    comment: Comment = Depends(get_comment_or_404),
    current_user: CurrentUser = Depends(get_current_user),
    service: CommentService = Depends(get_comment_service),
):
    """
    Delete a comment. Its author and the post's author may do so.
    """
    try:
        result = await service.remove(post, comment, current_user)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)
    return raise_for_comment_result(result, comment_id)
