from fastapi import HTTPException, status

from feed_engine.comments.constants import COMMENT_NOT_FOUND, NOT_COMMENT_PARTY
from feed_engine.comments.schemas import CommentResult
from feed_engine.posts.schemas import MutationStatus


def comment_not_found_exception(comment_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{COMMENT_NOT_FOUND}: {comment_id}"
    )


def cannot_delete_comment_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=NOT_COMMENT_PARTY
    )


def raise_for_comment_result(result: CommentResult, comment_id: str) -> CommentResult:
    if result.status == MutationStatus.NOT_FOUND:
        raise comment_not_found_exception(comment_id)
    if result.status == MutationStatus.UNAUTHORIZED:
        raise cannot_delete_comment_exception()
    return result
