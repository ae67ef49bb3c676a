from fastapi import HTTPException, status

from feed_engine.posts.constants import (
    ALREADY_FAVORITED,
    NOT_FAVORITED,
    NOT_POST_AUTHOR,
    POST_NOT_FOUND,
)
from feed_engine.posts.schemas import MutationResult, MutationStatus


def post_not_found_exception(post_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"{POST_NOT_FOUND}: {post_id}"
    )


def insufficient_permissions_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=NOT_POST_AUTHOR
    )


def already_favorited_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=ALREADY_FAVORITED
    )


def not_favorited_exception() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=NOT_FAVORITED
    )


def raise_for_result(result: MutationResult, post_id: str) -> MutationResult:
    """Turn a non-success mutation status into its HTTP error"""
    if result.status == MutationStatus.NOT_FOUND:
        raise post_not_found_exception(post_id)
    if result.status == MutationStatus.UNAUTHORIZED:
        raise insufficient_permissions_exception()
    if result.status == MutationStatus.ALREADY_FAVORITED:
        raise already_favorited_exception()
    if result.status == MutationStatus.NOT_FAVORITED:
        raise not_favorited_exception()
    return result
