import asyncio

import pytest

from feed_engine.exceptions import StoreUnavailableException
from feed_engine.posts.schemas import FeedFilter, MutationStatus, PostDraft


async def seed(composer, author, *titles):
    posts = []
    for title in titles:
        posts.append((await composer.create(PostDraft(title=title, content=f"{title} body"), author)).post)
    return posts


async def test_refresh_replaces_sequence_and_notifies(make_cache, composer, alice):
    await seed(composer, alice, "one", "two")
    cache = make_cache(alice)
    snapshots = []
    cache.subscribe(lambda c: snapshots.append((c.is_loading, [p.title for p in c.posts])))

    assert await cache.refresh() is True

    assert [p.title for p in cache.posts] == ["two", "one"]
    assert snapshots[0] == (True, [])
    assert snapshots[-1] == (False, ["two", "one"])


async def test_refresh_failure_keeps_previous_posts(make_cache, composer, content_store, alice):
    await seed(composer, alice, "one")
    cache = make_cache(alice)
    await cache.refresh()

    content_store.unavailable = True
    assert await cache.refresh() is False

    assert [p.title for p in cache.posts] == ["one"]
    assert isinstance(cache.error, StoreUnavailableException)
    assert cache.is_loading is False


async def test_stale_refresh_is_discarded(make_cache, composer, content_store, alice):
    await seed(composer, alice, "old")
    cache = make_cache(alice)
    first_gate = asyncio.Event()
    original_query = content_store.query_ordered
    calls = []

    async def gated_query(query):
        calls.append(query)
        result = await original_query(query)
        if len(calls) == 1:
            await first_gate.wait()
        return result

    content_store.query_ordered = gated_query

    slow = asyncio.create_task(cache.refresh())
    await asyncio.sleep(0)
    await seed(composer, alice, "new")
    assert await cache.refresh() is True
    assert [p.title for p in cache.posts] == ["new", "old"]

    first_gate.set()
    assert await slow is False
    assert [p.title for p in cache.posts] == ["new", "old"]
    assert cache.is_loading is False


async def test_submit_prepends_new_post(make_cache, composer, alice):
    await seed(composer, alice, "one")
    cache = make_cache(alice)
    await cache.refresh()

    result = await cache.submit(PostDraft(title="two", content="fresh"))

    assert result.ok
    assert [p.title for p in cache.posts] == ["two", "one"]


async def test_submit_skips_posts_outside_the_bound_filter(make_cache, alice, bob):
    cache = make_cache(alice, FeedFilter.by_author(bob.id))

    result = await cache.submit(PostDraft(title="mine", content="not bob's"))

    assert result.ok
    assert cache.posts == []


async def test_submit_failure_is_recorded(make_cache, content_store, alice):
    cache = make_cache(alice)
    content_store.unavailable = True

    assert await cache.submit(PostDraft(title="t", content="c")) is None
    assert len(cache.errors) == 1
    assert cache.posts == []


async def test_request_delete_not_permitted_without_round_trip(make_cache, composer, content_store, alice, bob):
    (post,) = await seed(composer, alice, "alice's")
    cache = make_cache(bob)
    await cache.refresh()
    content_store.unavailable = True  # any store call would now fail

    result = await cache.request_delete(post)

    assert result.status == MutationStatus.UNAUTHORIZED
    assert cache.errors == []
    assert [p.id for p in cache.posts] == [post.id]


async def test_request_delete_removes_post(make_cache, composer, alice):
    first, second = await seed(composer, alice, "one", "two")
    cache = make_cache(alice)
    await cache.refresh()

    result = await cache.request_delete(first)

    assert result.ok
    assert [p.id for p in cache.posts] == [second.id]


async def test_toggle_favorite_is_optimistic(make_cache, composer, relation_store, alice, bob):
    (post,) = await seed(composer, alice, "one")
    cache = make_cache(bob)
    await cache.refresh()
    seen = []
    cache.subscribe(lambda c: seen.append(c.posts[0].is_favorite))

    result = await cache.toggle_favorite(cache.posts[0])

    assert result.ok
    # First notification is the local flip, before the store answered
    assert seen[0] is True
    assert cache.posts[0].is_favorite is True
    assert relation_store.rows == [(post.id, bob.id)]

    await cache.toggle_favorite(cache.posts[0])
    assert cache.posts[0].is_favorite is False
    assert relation_store.rows == []


async def test_toggle_favorite_rolls_back_on_failure(make_cache, composer, relation_store, alice, bob):
    await seed(composer, alice, "one")
    cache = make_cache(bob)
    await cache.refresh()
    relation_store.unavailable = True

    result = await cache.toggle_favorite(cache.posts[0])

    assert result is None
    assert cache.posts[0].is_favorite is False
    assert len(cache.errors) == 1
    assert isinstance(cache.error, StoreUnavailableException)


async def test_toggle_rollback_leaves_other_entries_alone(make_cache, composer, relation_store, alice, bob):
    first, second = await seed(composer, alice, "one", "two")
    cache = make_cache(bob)
    await cache.refresh()
    await cache.toggle_favorite(cache.posts[1])
    relation_store.unavailable = True

    await cache.toggle_favorite(cache.posts[0])

    by_id = {p.id: p.is_favorite for p in cache.posts}
    assert by_id == {second.id: False, first.id: True}


async def test_toggle_follows_store_when_already_favorited(make_cache, composer, alice, bob):
    (post,) = await seed(composer, alice, "one")
    cache = make_cache(bob)
    await cache.refresh()
    # Favorited elsewhere after this cache loaded
    await composer.favorite(post, bob)

    result = await cache.toggle_favorite(cache.posts[0])

    assert result.status == MutationStatus.ALREADY_FAVORITED
    assert cache.posts[0].is_favorite is True
    assert cache.errors == []


async def test_matching_filters_cached_posts(make_cache, composer, alice):
    await seed(composer, alice, "Garden notes", "Kitchen log")
    cache = make_cache(alice)
    await cache.refresh()

    assert [p.title for p in cache.matching("garden")] == ["Garden notes"]
    assert [p.title for p in cache.matching("alice")] == ["Kitchen log", "Garden notes"]
    assert len(cache.matching("")) == 2


async def test_unsubscribe_stops_notifications(make_cache, alice):
    cache = make_cache(alice)
    calls = []
    unsubscribe = cache.subscribe(lambda c: calls.append(1))
    unsubscribe()

    await cache.refresh()

    assert calls == []


async def test_load_refreshes_in_background(make_cache, composer, alice):
    await seed(composer, alice, "one")
    cache = make_cache(alice)

    assert await cache.load() is True
    assert [p.title for p in cache.posts] == ["one"]


async def test_clear_errors(make_cache, content_store, alice):
    cache = make_cache(alice)
    content_store.unavailable = True
    await cache.refresh()
    assert cache.error is not None

    cache.clear_errors()

    assert cache.error is None


async def test_request_delete_drops_post_already_gone(make_cache, composer, content_store, alice):
    first, second = await seed(composer, alice, "one", "two")
    cache = make_cache(alice)
    await cache.refresh()
    # Deleted from another session after this cache loaded
    await content_store.delete_by_id(first.id)

    result = await cache.request_delete(first)

    assert result.status == MutationStatus.NOT_FOUND
    assert [p.id for p in cache.posts] == [second.id]
    assert cache.errors == []


async def test_refresh_settles_loading_on_unexpected_error(make_cache, content_store, alice, monkeypatch):
    cache = make_cache(alice)

    async def refused(query):
        raise ConnectionRefusedError("database is down")

    monkeypatch.setattr(content_store, "query_ordered", refused)

    with pytest.raises(ConnectionRefusedError):
        await cache.refresh()

    assert cache.is_loading is False


async def test_toggle_reverts_flip_on_unexpected_error(make_cache, composer, relation_store, alice, bob, monkeypatch):
    await seed(composer, alice, "one")
    cache = make_cache(bob)
    await cache.refresh()

    async def refused(post_id, user_id):
        raise ConnectionRefusedError("database is down")

    monkeypatch.setattr(relation_store, "insert", refused)

    with pytest.raises(ConnectionRefusedError):
        await cache.toggle_favorite(cache.posts[0])

    assert cache.posts[0].is_favorite is False
    assert relation_store.rows == []


async def test_cancelled_refresh_settles_loading(make_cache, content_store, alice, monkeypatch):
    cache = make_cache(alice)
    started = asyncio.Event()

    async def hanging(query):
        started.set()
        await asyncio.Event().wait()

    monkeypatch.setattr(content_store, "query_ordered", hanging)

    task = asyncio.create_task(cache.refresh())
    await started.wait()
    task.cancel()
    with pytest.raises(asyncio.CancelledError):
        await task

    assert cache.is_loading is False
