"""
Feed composer: favorite-annotated feeds and authorized post mutations
"""
import asyncio
import logging
from typing import List

from feed_engine.exceptions import StoreUnavailableException
from feed_engine.favorites.store import RelationStore, StoreOutcome
from feed_engine.identity.schemas import CurrentUser
from feed_engine.posts.constants import (
    ASSET_DELETE_FAILED,
    DUPLICATE_FAVORITES,
    IMAGE_ATTACH_FAILED,
    IMAGE_UPLOAD_FAILED,
    UNATTACHED_IMAGE_LEFT,
)
from feed_engine.posts.schemas import (
    Author,
    FeedFilter,
    FeedScope,
    MutationResult,
    MutationStatus,
    Post,
    PostDraft,
    PostQuery,
)
from feed_engine.posts.store import ContentStore
from feed_engine.storage import AssetStore

logger = logging.getLogger(__name__)


class FeedComposer:
    """Joins the content and relation stores into per-user feeds.

    Holds nothing but store handles, so one instance can serve any number of
    concurrent feeds and requests.
    """

    def __init__(self, content_store: ContentStore, relation_store: RelationStore, asset_store: AssetStore):
        self.content_store = content_store
        self.relation_store = relation_store
        self.asset_store = asset_store

    async def fetch(self, feed_filter: FeedFilter, requesting_user: CurrentUser) -> List[Post]:
        """
        Posts for feed_filter, newest first, annotated with requesting_user's favorites

        Args:
            feed_filter: all posts, one author's posts, or the user's favorites
            requesting_user: user whose favorites drive the is_favorite flag

        Raises:
            StoreUnavailableException: if either store read fails
        """
        if feed_filter.scope == FeedScope.FAVORITES:
            favorite_ids = await self.relation_store.query_by_user(requesting_user.id)
            if not favorite_ids:
                return []
            # Relations to deleted posts match no row and simply drop out
            posts = await self.content_store.query_ordered(PostQuery(id_in=frozenset(favorite_ids)))
        else:
            query = PostQuery(author_id=feed_filter.author_id)
            posts, favorite_ids = await asyncio.gather(
                self.content_store.query_ordered(query),
                self.relation_store.query_by_user(requesting_user.id),
            )

        return [post.with_favorite(post.id in favorite_ids) for post in posts]

    async def create(self, draft: PostDraft, author: CurrentUser) -> MutationResult:
        """
        Create a post, then attach its image if the draft carries one

        The write is two-phase: the post row is committed first. A failed
        image upload leaves the post without image and is reported as a
        warning on an otherwise successful result.
        """
        post = await self.content_store.insert(draft.title, draft.content, Author.from_user(author))
        logger.info("Post %s created by user %s", post.id, author.id)

        warnings: List[str] = []
        if draft.image is not None:
            try:
                image_url = await self.asset_store.create_asset(draft.image, post.id, draft.image_content_type)
            except StoreUnavailableException as e:
                logger.warning("Image upload for post %s failed: %s", post.id, e)
                warnings.append(IMAGE_UPLOAD_FAILED.format(post_id=post.id, reason=e))
            else:
                post = await self._attach_image(post, image_url, warnings)

        return MutationResult(status=MutationStatus.SUCCESS, post=post, warnings=warnings)

    async def _attach_image(self, post: Post, image_url: str, warnings: List[str]) -> Post:
        """Record image_url on post; if that fails, remove the uploaded asset again"""
        try:
            attached = await self.content_store.update_image(post.id, image_url)
        except StoreUnavailableException as e:
            logger.warning("Recording the image of post %s failed: %s", post.id, e)
            warnings.append(IMAGE_UPLOAD_FAILED.format(post_id=post.id, reason=e))
        else:
            if attached:
                return post.model_copy(update={"image_url": image_url})
            logger.warning("Post %s vanished before its image was attached", post.id)
            warnings.append(IMAGE_ATTACH_FAILED.format(post_id=post.id))

        # Nothing references the upload now
        try:
            await self.asset_store.delete_asset(post.id)
        except StoreUnavailableException as e:
            logger.warning("Could not remove unattached image of post %s: %s", post.id, e)
            warnings.append(UNATTACHED_IMAGE_LEFT.format(post_id=post.id, reason=e))
        return post

    async def delete(self, post: Post, requesting_user: CurrentUser) -> MutationResult:
        """
        Delete post if requesting_user wrote it

        The row goes first and is the source of truth; the image asset is
        removed afterwards and a failure there only produces a warning.
        """
        if not self.can_delete(post, requesting_user):
            logger.warning("User %s is not allowed to delete post %s", requesting_user.id, post.id)
            return MutationResult(status=MutationStatus.UNAUTHORIZED, post=post)

        if not await self.content_store.delete_by_id(post.id):
            return MutationResult(status=MutationStatus.NOT_FOUND, post=post)
        logger.info("Post %s deleted by user %s", post.id, requesting_user.id)

        warnings: List[str] = []
        if post.image_url:
            try:
                if not await self.asset_store.delete_asset(post.id):
                    logger.info("Image of post %s was already gone", post.id)
            except StoreUnavailableException as e:
                logger.warning("Image cleanup for deleted post %s failed: %s", post.id, e)
                warnings.append(ASSET_DELETE_FAILED.format(post_id=post.id, reason=e))

        return MutationResult(status=MutationStatus.SUCCESS, post=post, warnings=warnings)

    async def favorite(self, post: Post, requesting_user: CurrentUser) -> MutationResult:
        outcome = await self.relation_store.insert(post.id, requesting_user.id)
        if outcome == StoreOutcome.CONFLICT:
            return MutationResult(status=MutationStatus.ALREADY_FAVORITED, post=post.with_favorite(True))

        logger.info("User %s favorited post %s", requesting_user.id, post.id)
        return MutationResult(status=MutationStatus.SUCCESS, post=post.with_favorite(True))

    async def unfavorite(self, post: Post, requesting_user: CurrentUser) -> MutationResult:
        matched = await self.relation_store.delete_matching(post.id, requesting_user.id)
        if matched == 0:
            return MutationResult(status=MutationStatus.NOT_FAVORITED, post=post.with_favorite(False))

        if matched > 1:
            warning = self._report_duplicates(matched, post.id, requesting_user)
            # The remaining relations keep the post a favorite
            return MutationResult(status=MutationStatus.SUCCESS, post=post.with_favorite(True), warnings=[warning])

        logger.info("User %s unfavorited post %s", requesting_user.id, post.id)
        return MutationResult(status=MutationStatus.SUCCESS, post=post.with_favorite(False))

    async def forget_favorite(self, post_id: str, requesting_user: CurrentUser) -> MutationResult:
        """
        Unfavorite a post whose row no longer exists

        The relation is all that is left, so the result carries no post.
        """
        matched = await self.relation_store.delete_matching(post_id, requesting_user.id)
        if matched == 0:
            return MutationResult(status=MutationStatus.NOT_FAVORITED)

        warnings: List[str] = []
        if matched > 1:
            warnings.append(self._report_duplicates(matched, post_id, requesting_user))
        logger.info("User %s dropped favorite of deleted post %s", requesting_user.id, post_id)
        return MutationResult(status=MutationStatus.SUCCESS, warnings=warnings)

    def _report_duplicates(self, matched: int, post_id: str, requesting_user: CurrentUser) -> str:
        # Data-integrity fault: report it, keep the best-effort single deletion
        logger.error(
            "Integrity fault: %d favorite relations for post %s and user %s",
            matched, post_id, requesting_user.id,
        )
        return DUPLICATE_FAVORITES.format(count=matched, post_id=post_id, user_id=requesting_user.id)

    def can_delete(self, post: Post, requesting_user: CurrentUser) -> bool:
        return requesting_user.id == post.author.id
