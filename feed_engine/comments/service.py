"""
Comment service: reading and authorized mutation of a post's comments
"""
import logging
from typing import List

from feed_engine.comments.schemas import Comment, CommentDraft, CommentResult
from feed_engine.comments.store import CommentStore
from feed_engine.identity.schemas import CurrentUser
from feed_engine.posts.schemas import Author, MutationStatus, Post

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, comment_store: CommentStore):
        self.comment_store = comment_store

    async def fetch(self, post: Post) -> List[Comment]:
        """Comments on post, oldest first"""
        return await self.comment_store.query_by_post(post.id)

    async def add(self, post: Post, draft: CommentDraft, author: CurrentUser) -> CommentResult:
        comment = await self.comment_store.insert(post.id, draft.content, Author.from_user(author))
        logger.info("Comment %s added to post %s by user %s", comment.id, post.id, author.id)
        return CommentResult(status=MutationStatus.SUCCESS, comment=comment)

    async def remove(self, post: Post, comment: Comment, requesting_user: CurrentUser) -> CommentResult:
        """
        Delete comment from post

        Allowed for the comment's author and for the author of the post it
        is on. A comment that belongs to another post is NOT_FOUND.
        """
        if comment.post_id != post.id:
            return CommentResult(status=MutationStatus.NOT_FOUND, comment=comment)
        if not self.can_delete(post, comment, requesting_user):
            logger.warning("User %s is not allowed to delete comment %s", requesting_user.id, comment.id)
            return CommentResult(status=MutationStatus.UNAUTHORIZED, comment=comment)

        if not await self.comment_store.delete_by_id(comment.id):
            return CommentResult(status=MutationStatus.NOT_FOUND, comment=comment)
        logger.info("Comment %s on post %s deleted by user %s", comment.id, post.id, requesting_user.id)
        return CommentResult(status=MutationStatus.SUCCESS, comment=comment)

    def can_delete(self, post: Post, comment: Comment, requesting_user: CurrentUser) -> bool:
        return requesting_user.id in (comment.author.id, post.author.id)
