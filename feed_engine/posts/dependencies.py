from functools import lru_cache

from fastapi import Depends

from feed_engine.database import AsyncSessionLocal
from feed_engine.exceptions import StoreUnavailableException, store_unavailable_exception
from feed_engine.favorites.store import SqlRelationStore
from feed_engine.posts.exceptions import post_not_found_exception
from feed_engine.posts.schemas import Post
from feed_engine.posts.service import FeedComposer
from feed_engine.posts.store import SqlContentStore
from feed_engine.storage import S3AssetStore


@lru_cache
def get_feed_composer() -> FeedComposer:
    """One composer for the whole process; it only holds store handles"""
    return FeedComposer(
        content_store=SqlContentStore(AsyncSessionLocal),
        relation_store=SqlRelationStore(AsyncSessionLocal),
        asset_store=S3AssetStore(),
    )


async def get_post_or_404(
    post_id: str,
    composer: FeedComposer = Depends(get_feed_composer),
) -> Post:
    """
    Load a post by ID or raise 404

    Raises:
        HTTPException: 404 if the post does not exist, 503 if the store is down
    """
    try:
        post = await composer.content_store.get(post_id)
    except StoreUnavailableException as e:
        raise store_unavailable_exception(e)
    if post is None:
        raise post_not_found_exception(post_id)
    return post
