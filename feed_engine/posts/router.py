from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from pydantic import ValidationError

from feed_engine.exceptions import (
    StoreUnavailableException,
    validation_exception,
    store_unavailable_exception,
)
from feed_engine.identity.dependencies import get_current_user
from feed_engine.identity.schemas import CurrentUser
from feed_engine.posts.dependencies import get_feed_composer, get_post_or_404
from feed_engine.posts.exceptions import raise_for_result
from feed_engine.posts.schemas import FeedFilter, FeedScope, MutationResult, Post, PostDraft
from feed_engine.posts.service import FeedComposer

router = APIRouter(prefix="/posts", tags=["Posts"])


@router.get("/", response_model=List[Post])
async def get_posts(
    scope: FeedScope = Query(FeedScope.ALL, description="all, author or favorites"),
    author_id: Optional[str] = Query(None, description="Author ID (author scope only)"),
    current_user: CurrentUser = Depends(get_current_user),
    composer: FeedComposer = Depends(get_feed_composer),
):
    """
    Feed of posts, newest first, with is_favorite set for the current user

    - **scope**: `all` (default), `author` (requires **author_id**) or `favorites`
    """
    try:
        feed_filter = FeedFilter(scope=scope, author_id=author_id)
    except ValidationError as e:
        raise validation_exception(str(e))

    try:
        return await composer.fetch(feed_filter, current_user)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)


@router.post("/", response_model=MutationResult, status_code=status.HTTP_201_CREATED)
async def create_post(
    title: str = Form(...),
    content: str = Form(...),
    image: Optional[UploadFile] = File(None),
    current_user: CurrentUser = Depends(get_current_user),
    composer: FeedComposer = Depends(get_feed_composer),
):
    """
    Create a post, optionally with an image

    - **title**, **content**: required, whitespace is normalised
    - **image**: optional image file; if its upload fails the post is still
      created and the response carries a warning
    """
    payload = await image.read() if image is not None else None
    try:
        draft = PostDraft(
            title=title,
            content=content,
            image=payload or None,
            image_content_type=image.content_type if image is not None else None,
        )
    except ValidationError as e:
        raise validation_exception(str(e))

    try:
        return await composer.create(draft, current_user)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)


@router.delete("/{post_id}", response_model=MutationResult)
async def delete_post(
    post_id: str,
    post: Post = Depends(get_post_or_404),
    current_user: CurrentUser = Depends(get_current_user),
    composer: FeedComposer = Depends(get_feed_composer),
):
    """
    Delete a post. Only its author may do so.

    If the image could not be removed the post is still deleted and the
    response carries a warning.
    """
    try:
        result = await composer.delete(post, current_user)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)
    return raise_for_result(result, post_id)


@router.post("/{post_id}/favorite", response_model=MutationResult)
async def favorite_post(
    post_id: str,
    post: Post = Depends(get_post_or_404),
    current_user: CurrentUser = Depends(get_current_user),
    composer: FeedComposer = Depends(get_feed_composer),
):
    """
    Add a post to the current user's favorites (409 if it already is one)
    """
    try:
        result = await composer.favorite(post, current_user)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)
    return raise_for_result(result, post_id)


@router.delete("/{post_id}/favorite", response_model=MutationResult)
async def unfavorite_post(
    post_id: str,
    current_user: CurrentUser = Depends(get_current_user),
    composer: FeedComposer = Depends(get_feed_composer),
):
    """
    Remove a post from the current user's favorites (404 if it is not one)

    Also works for a post that has since been deleted; the response then
    carries no post.
    """
    try:
        post = await composer.content_store.get(post_id)
        if post is None:
            result = await composer.forget_favorite(post_id, current_user)
        else:
            result = await composer.unfavorite(post, current_user)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)
    return raise_for_result(result, post_id)
