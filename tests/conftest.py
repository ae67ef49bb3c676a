"""Shared fixtures: in-memory stores and the users that drive them."""
import os

# Settings are read at import time; keep tests away from a real Postgres
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./feed_engine_test.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("AWS_S3_BUCKET", "feed-test-bucket")

from datetime import datetime, timedelta, timezone  # noqa: E402
from typing import Dict, List, Optional, Set, Tuple  # noqa: E402

import pytest  # noqa: E402

from feed_engine.comments.schemas import Comment  # noqa: E402
from feed_engine.comments.service import CommentService  # noqa: E402
from feed_engine.comments.view_cache import CommentThreadCache  # noqa: E402
from feed_engine.exceptions import StoreUnavailableException  # noqa: E402
from feed_engine.favorites.store import StoreOutcome  # noqa: E402
from feed_engine.identity.context import StaticIdentityContext  # noqa: E402
from feed_engine.identity.schemas import CurrentUser  # noqa: E402
from feed_engine.posts.schemas import Author, Post, PostQuery  # noqa: E402
from feed_engine.posts.service import FeedComposer  # noqa: E402
from feed_engine.posts.view_cache import PostFeedCache  # noqa: E402

BASE_TIME = datetime(2021, 8, 9, 12, 0, tzinfo=timezone.utc)


class InMemoryContentStore:
    """Content store that assigns ids p1, p2, ... and one-second-apart timestamps."""

    def __init__(self) -> None:
        self.posts: Dict[str, Post] = {}
        self.queries: List[PostQuery] = []
        self.unavailable = False
        self._counter = 0

    def _check(self) -> None:
        if self.unavailable:
            raise StoreUnavailableException("content store", "connection refused")

    async def insert(self, title: str, content: str, author: Author) -> Post:
        self._check()
        self._counter += 1
        post = Post(
            id=f"p{self._counter}",
            title=title,
            content=content,
            author=author,
            created_at=BASE_TIME + timedelta(seconds=self._counter),
        )
        self.posts[post.id] = post
        return post

    async def get(self, post_id: str) -> Optional[Post]:
        self._check()
        return self.posts.get(post_id)

    async def update_image(self, post_id: str, image_url: str) -> bool:
        self._check()
        if post_id not in self.posts:
            return False
        self.posts[post_id] = self.posts[post_id].model_copy(update={"image_url": image_url})
        return True

    async def delete_by_id(self, post_id: str) -> bool:
        self._check()
        return self.posts.pop(post_id, None) is not None

    async def query_ordered(self, query: PostQuery) -> List[Post]:
        if query.id_in is not None and not query.id_in:
            raise AssertionError("empty membership query issued")
        self._check()
        self.queries.append(query)
        posts = [
            post for post in self.posts.values()
            if (query.author_id is None or post.author.id == query.author_id)
            and (query.id_in is None or post.id in query.id_in)
        ]
        posts.sort(key=lambda post: post.id)
        posts.sort(key=lambda post: post.created_at, reverse=True)
        return posts


class InMemoryRelationStore:
    """Relation store that, unlike a unique index, can be seeded with duplicates."""

    def __init__(self) -> None:
        self.rows: List[Tuple[str, str]] = []
        self.unavailable = False

    def _check(self) -> None:
        if self.unavailable:
            raise StoreUnavailableException("relation store", "connection refused")

    def seed_duplicate(self, post_id: str, user_id: str) -> None:
        self.rows.append((post_id, user_id))

    async def insert(self, post_id: str, user_id: str) -> StoreOutcome:
        self._check()
        if (post_id, user_id) in self.rows:
            return StoreOutcome.CONFLICT
        self.rows.append((post_id, user_id))
        return StoreOutcome.OK

    async def delete_matching(self, post_id: str, user_id: str) -> int:
        self._check()
        matched = self.rows.count((post_id, user_id))
        if matched:
            self.rows.remove((post_id, user_id))
        return matched

    async def query_by_user(self, user_id: str) -> Set[str]:
        self._check()
        return {post_id for post_id, owner in self.rows if owner == user_id}


class InMemoryAssetStore:
    def __init__(self) -> None:
        self.assets: Dict[str, bytes] = {}
        self.fail_uploads = False
        self.fail_deletes = False

    async def create_asset(self, payload: bytes, key: str, content_type: str) -> str:
        if self.fail_uploads:
            raise StoreUnavailableException("asset store", "upload timed out")
        self.assets[key] = payload
        return f"https://assets.test/posts/{key}"

    async def delete_asset(self, key: str) -> bool:
        if self.fail_deletes:
            raise StoreUnavailableException("asset store", "delete timed out")
        return self.assets.pop(key, None) is not None


class InMemoryCommentStore:
    """Comment store that assigns ids c1, c2, ... and one-second-apart timestamps."""

    def __init__(self) -> None:
        self.comments: Dict[str, Comment] = {}
        self.unavailable = False
        self._counter = 0

    def _check(self) -> None:
        if self.unavailable:
            raise StoreUnavailableException("comment store", "connection refused")

    async def insert(self, post_id: str, content: str, author: Author) -> Comment:
        self._check()
        self._counter += 1
        comment = Comment(
            id=f"c{self._counter}",
            post_id=post_id,
            content=content,
            author=author,
            created_at=BASE_TIME + timedelta(seconds=self._counter),
        )
        self.comments[comment.id] = comment
        return comment

    async def get(self, comment_id: str) -> Optional[Comment]:
        self._check()
        return self.comments.get(comment_id)

    async def delete_by_id(self, comment_id: str) -> bool:
        self._check()
        return self.comments.pop(comment_id, None) is not None

    async def query_by_post(self, post_id: str) -> List[Comment]:
        self._check()
        comments = [comment for comment in self.comments.values() if comment.post_id == post_id]
        comments.sort(key=lambda comment: (comment.created_at, comment.id))
        return comments


@pytest.fixture()
def alice() -> CurrentUser:
    return CurrentUser(id="u1", name="Alice", image_url="https://assets.test/avatars/u1.png")


@pytest.fixture()
def bob() -> CurrentUser:
    return CurrentUser(id="u2", name="Bob")


@pytest.fixture()
def content_store() -> InMemoryContentStore:
    return InMemoryContentStore()


@pytest.fixture()
def relation_store() -> InMemoryRelationStore:
    return InMemoryRelationStore()


@pytest.fixture()
def asset_store() -> InMemoryAssetStore:
    return InMemoryAssetStore()


@pytest.fixture()
def composer(content_store, relation_store, asset_store) -> FeedComposer:
    return FeedComposer(content_store, relation_store, asset_store)


@pytest.fixture()
def make_cache(composer):
    def factory(user: CurrentUser, feed_filter=None) -> PostFeedCache:
        return PostFeedCache(composer, StaticIdentityContext(user), feed_filter)

    return factory


@pytest.fixture()
def carol() -> CurrentUser:
    return CurrentUser(id="u3", name="Carol")


@pytest.fixture()
def comment_store() -> InMemoryCommentStore:
    return InMemoryCommentStore()


@pytest.fixture()
def comment_service(comment_store) -> CommentService:
    return CommentService(comment_store)


@pytest.fixture()
def make_thread(comment_service):
    def factory(user: CurrentUser, post: Post) -> CommentThreadCache:
        return CommentThreadCache(comment_service, StaticIdentityContext(user), post)

    return factory
