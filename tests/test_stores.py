"""SQL-backed stores against a throwaway SQLite database."""
from datetime import datetime

import pytest
from sqlalchemy import update

from feed_engine.comments.models import CommentRecord
from feed_engine.comments.store import SqlCommentStore
from feed_engine.database import create_engine_for, create_session_factory, create_tables
from feed_engine.favorites.store import SqlRelationStore, StoreOutcome
from feed_engine.posts.models import PostRecord
from feed_engine.posts.schemas import Author, PostQuery
from feed_engine.posts.store import SqlContentStore

AUTHOR = Author(id="u1", name="Alice")
OTHER = Author(id="u2", name="Bob")


@pytest.fixture()
async def session_factory(tmp_path):
    engine = create_engine_for(f"sqlite+aiosqlite:///{tmp_path / 'feed.db'}")
    await create_tables(engine)
    yield create_session_factory(engine)
    await engine.dispose()


@pytest.fixture()
def content_store(session_factory):
    return SqlContentStore(session_factory)


@pytest.fixture()
def relation_store(session_factory):
    return SqlRelationStore(session_factory)


async def test_insert_assigns_id_and_timestamp(content_store):
    post = await content_store.insert("Hello", "Body", AUTHOR)

    assert len(post.id) == 36
    assert post.created_at is not None
    assert post.image_url is None
    assert (await content_store.get(post.id)).title == "Hello"


async def test_query_orders_newest_first_with_id_tiebreak(content_store, session_factory):
    posts = [await content_store.insert(f"t{i}", "b", AUTHOR) for i in range(3)]
    same_time = datetime(2021, 8, 9, 12, 0)
    async with session_factory() as session:
        await session.execute(update(PostRecord).values(created_at=same_time))
        await session.commit()

    result = await content_store.query_ordered(PostQuery())

    assert [p.id for p in result] == sorted(p.id for p in posts)


async def test_query_by_author_and_id_set(content_store):
    first = await content_store.insert("a", "b", AUTHOR)
    second = await content_store.insert("c", "d", OTHER)

    assert [p.id for p in await content_store.query_ordered(PostQuery(author_id="u2"))] == [second.id]
    by_ids = await content_store.query_ordered(PostQuery(id_in=frozenset({first.id, "missing"})))
    assert [p.id for p in by_ids] == [first.id]


async def test_empty_id_set_returns_nothing(content_store):
    await content_store.insert("a", "b", AUTHOR)
    assert await content_store.query_ordered(PostQuery(id_in=frozenset())) == []


async def test_update_image_and_delete(content_store):
    post = await content_store.insert("a", "b", AUTHOR)

    assert await content_store.update_image(post.id, "https://assets.test/posts/x") is True
    assert (await content_store.get(post.id)).image_url == "https://assets.test/posts/x"

    assert await content_store.delete_by_id(post.id) is True
    assert await content_store.delete_by_id(post.id) is False
    assert await content_store.update_image(post.id, "https://assets.test/posts/y") is False
    assert await content_store.get(post.id) is None


async def test_relation_insert_conflicts_on_duplicate(relation_store):
    assert await relation_store.insert("p1", "u2") == StoreOutcome.OK
    assert await relation_store.insert("p1", "u2") == StoreOutcome.CONFLICT
    assert await relation_store.query_by_user("u2") == {"p1"}


async def test_relation_delete_matching(relation_store):
    await relation_store.insert("p1", "u2")
    await relation_store.insert("p2", "u2")

    assert await relation_store.delete_matching("p1", "u2") == 1
    assert await relation_store.delete_matching("p1", "u2") == 0
    assert await relation_store.query_by_user("u2") == {"p2"}
    assert await relation_store.query_by_user("u1") == set()


@pytest.fixture()
def comment_store(session_factory):
    return SqlCommentStore(session_factory)


async def test_comments_by_post_oldest_first(comment_store, session_factory):
    second = await comment_store.insert("p1", "second", AUTHOR)
    first = await comment_store.insert("p1", "first", OTHER)
    await comment_store.insert("p2", "elsewhere", AUTHOR)
    async with session_factory() as session:
        await session.execute(
            update(CommentRecord).where(CommentRecord.id == first.id).values(created_at=datetime(2021, 8, 9, 12, 0))
        )
        await session.commit()

    comments = await comment_store.query_by_post("p1")

    assert [c.id for c in comments] == [first.id, second.id]
    assert comments[0].author == OTHER
    assert (await comment_store.get(second.id)).content == "second"


async def test_comment_delete(comment_store):
    comment = await comment_store.insert("p1", "bye", AUTHOR)

    assert await comment_store.delete_by_id(comment.id) is True
    assert await comment_store.delete_by_id(comment.id) is False
    assert await comment_store.get(comment.id) is None
    assert await comment_store.query_by_post("p1") == []
