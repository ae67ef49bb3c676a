"""
Local view cache: the caller-side copy of one feed.

Mutations are applied locally (optimistically for favorites) and reconciled
with whatever the feed composer confirms. Errors are recorded on the cache
and announced to subscribers instead of being raised into the caller.
"""
import asyncio
import logging
from typing import List, Optional

from feed_engine.exceptions import FeedException
from feed_engine.identity.context import IdentityContext
from feed_engine.posts.schemas import FeedFilter, MutationResult, MutationStatus, Post, PostDraft
from feed_engine.posts.service import FeedComposer
from feed_engine.utils.observable import ObservableState

logger = logging.getLogger(__name__)


class PostFeedCache(ObservableState):
    """Ordered, favorite-annotated posts for one bound filter.

    One caller drives a cache at a time; mutations are expected to be issued
    one after another. The composer behind it may be shared freely.
    """

    def __init__(
        self,
        composer: FeedComposer,
        identity: IdentityContext,
        feed_filter: Optional[FeedFilter] = None,
    ):
        super().__init__()
        self.composer = composer
        self.identity = identity
        self.feed_filter = feed_filter or FeedFilter.all_posts()
        self.posts: List[Post] = []
        self.is_loading = False
        self._refresh_started = 0
        self._refresh_applied = 0
        self._refreshes_in_flight = 0

    # Reads

    def load(self) -> "asyncio.Task[bool]":
        """Start a refresh in the background"""
        return asyncio.create_task(self.refresh())

    async def refresh(self) -> bool:
        """
        Replace the whole sequence with a fresh fetch.

        Returns True if the result was applied. A failed fetch keeps the
        previous sequence and records the error. A fetch that finishes after
        a newer one has already been applied is discarded.
        """
        self._refresh_started += 1
        generation = self._refresh_started
        self._refreshes_in_flight += 1
        self.is_loading = True
        self._notify()

        try:
            posts = await self.composer.fetch(self.feed_filter, self.identity.current_user())
        except FeedException as e:
            self._finish_refresh()
            if generation < self._refresh_applied:
                self._notify()
            else:
                self._record_error(e, "refresh")
            return False
        except BaseException:
            self._finish_refresh()
            self._notify()
            raise

        self._finish_refresh()
        if generation < self._refresh_applied:
            logger.debug("Discarding stale refresh #%d (latest applied #%d)", generation, self._refresh_applied)
            self._notify()
            return False

        self._refresh_applied = generation
        self.posts = posts
        self._notify()
        return True

    def _finish_refresh(self) -> None:
        self._refreshes_in_flight -= 1
        self.is_loading = self._refreshes_in_flight > 0

    def matching(self, text: str) -> List[Post]:
        """Cached posts whose title, content, author or date contain text"""
        if not text:
            return list(self.posts)
        return [post for post in self.posts if post.contains(text)]

    # Mutations

    async def submit(self, draft: PostDraft) -> Optional[MutationResult]:
        """Create a post and put it at the front of the feed if it belongs there"""
        try:
            result = await self.composer.create(draft, self.identity.current_user())
        except FeedException as e:
            self._record_error(e, "submit")
            return None

        self.warnings = list(result.warnings)
        if result.post is not None and self.feed_filter.includes(result.post):
            # Newest first, and the new post is the newest
            self.posts = [result.post] + [post for post in self.posts if post.id != result.post.id]
        self._notify()
        return result

    async def request_delete(self, post: Post) -> Optional[MutationResult]:
        """
        Delete post and drop it from the feed.

        Returns UNAUTHORIZED without a store round-trip when the current user
        may not delete it. A NOT_FOUND post is gone either way and is dropped too.
        """
        user = self.identity.current_user()
        if not self.composer.can_delete(post, user):
            return MutationResult(status=MutationStatus.UNAUTHORIZED, post=post)

        try:
            result = await self.composer.delete(post, user)
        except FeedException as e:
            self._record_error(e, "delete")
            return None

        self.warnings = list(result.warnings)
        if result.status in (MutationStatus.SUCCESS, MutationStatus.NOT_FOUND):
            self.posts = [cached for cached in self.posts if cached.id != post.id]
        self._notify()
        return result

    async def toggle_favorite(self, post: Post) -> Optional[MutationResult]:
        """
        Flip the favorite flag locally, then confirm it with the composer.

        On failure only this entry's flip is reverted (if nothing else changed
        it meanwhile) and one error is recorded. When the composer reports the
        relation was already in the target state, the cached flag follows what
        it confirmed.
        """
        was_favorite = self._cached_favorite(post)
        self._set_favorite(post.id, not was_favorite)

        user = self.identity.current_user()
        try:
            if was_favorite:
                result = await self.composer.unfavorite(post, user)
            else:
                result = await self.composer.favorite(post, user)
        except FeedException as e:
            self._set_favorite(post.id, was_favorite, only_if=not was_favorite)
            self._record_error(e, "favorite toggle")
            return None
        except BaseException:
            self._set_favorite(post.id, was_favorite, only_if=not was_favorite)
            raise

        self.warnings = list(result.warnings)
        if result.post is not None:
            self._set_favorite(result.post.id, result.post.is_favorite, only_if=not was_favorite)
        return result

    def _cached_favorite(self, post: Post) -> bool:
        for cached in self.posts:
            if cached.id == post.id:
                return cached.is_favorite
        return post.is_favorite

    def _set_favorite(self, post_id: str, is_favorite: bool, only_if: Optional[bool] = None) -> None:
        """Set one entry's flag; with only_if, touch it only while it still holds that value"""
        changed = False
        posts = []
        for cached in self.posts:
            if cached.id == post_id and cached.is_favorite != is_favorite:
                if only_if is None or cached.is_favorite == only_if:
                    cached = cached.with_favorite(is_favorite)
                    changed = True
            posts.append(cached)
        if changed:
            self.posts = posts
        self._notify()
