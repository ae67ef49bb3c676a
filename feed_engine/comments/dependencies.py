from functools import lru_cache

from fastapi import Depends

from feed_engine.comments.exceptions import comment_not_found_exception
from feed_engine.comments.schemas import Comment
from feed_engine.comments.service import CommentService
from feed_engine.comments.store import SqlCommentStore
from feed_engine.database import AsyncSessionLocal
from feed_engine.exceptions import StoreUnavailableException, store_unavailable_exception


@lru_cache
def get_comment_service() -> CommentService:
    return CommentService(SqlCommentStore(AsyncSessionLocal))


async def get_comment_or_404(
    post_id: str,
    comment_id: str,
    service: CommentService = Depends(get_comment_service),
) -> Comment:
    """
    Load a comment of post_id or raise 404

    A comment that exists on another post is reported as missing.
    """
    try:
        comment = await service.comment_store.get(comment_id)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)
    if comment is None or comment.post_id != post_id:
        raise comment_not_found_exception(comment_id)
    return comment
