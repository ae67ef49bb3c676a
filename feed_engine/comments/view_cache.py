"""
Local comment thread: the caller-side copy of one post's comments
"""
import logging
from typing import List, Optional

from feed_engine.comments.schemas import Comment, CommentDraft, CommentResult
from feed_engine.comments.service import CommentService
from feed_engine.exceptions import FeedException
from feed_engine.identity.context import IdentityContext
from feed_engine.posts.schemas import MutationStatus, Post
from feed_engine.utils.observable import ObservableState

logger = logging.getLogger(__name__)


class CommentThreadCache(ObservableState):
    """Comments of one post, oldest first; new comments are appended"""

    def __init__(self, service: CommentService, identity: IdentityContext, post: Post):
        super().__init__()
        self.service = service
        self.identity = identity
        self.post = post
        self.comments: List[Comment] = []
        self.is_loading = False
        self._refresh_started = 0
        self._refresh_applied = 0
        self._refreshes_in_flight = 0

    async def refresh(self) -> bool:
        """Replace the thread with a fresh fetch; stale and failed fetches leave it as is"""
        self._refresh_started += 1
        generation = self._refresh_started
        self._refreshes_in_flight += 1
        self.is_loading = True
        self._notify()

        try:
            comments = await self.service.fetch(self.post)
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
            logger.debug("Discarding stale comment refresh #%d for post %s", generation, self.post.id)
            self._notify()
            return False

        self._refresh_applied = generation
        self.comments = comments
        self._notify()
        return True

    def _finish_refresh(self) -> None:
        self._refreshes_in_flight -= 1
        self.is_loading = self._refreshes_in_flight > 0

    async def submit(self, draft: CommentDraft) -> Optional[CommentResult]:
        try:
            result = await self.service.add(self.post, draft, self.identity.current_user())
        except FeedException as e:
            self._record_error(e, "submit")
            return None

        if result.comment is not None:
            self.comments = self.comments + [result.comment]
        self._notify()
        return result

    def can_delete(self, comment: Comment) -> bool:
        return self.service.can_delete(self.post, comment, self.identity.current_user())

    async def request_delete(self, comment: Comment) -> Optional[CommentResult]:
        """
        Delete comment and drop it from the thread.

        Returns UNAUTHORIZED without a store round-trip when the current user
        is neither the comment's nor the post's author.
        """
        if not self.can_delete(comment):
            return CommentResult(status=MutationStatus.UNAUTHORIZED, comment=comment)

        try:
            result = await self.service.remove(self.post, comment, self.identity.current_user())
        except FeedException as e:
            self._record_error(e, "delete")
            return None

        if result.status in (MutationStatus.SUCCESS, MutationStatus.NOT_FOUND):
            self.comments = [cached for cached in self.comments if cached.id != comment.id]
        self._notify()
        return result
