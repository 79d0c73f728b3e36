"""
Use-case tests — thread and comment services against the in-memory
repositories, so the business rules are checked without SQL or HTTP.
"""
from datetime import datetime, timedelta, timezone

import pytest

from forum_api.config import Settings
from forum_api.exceptions import AuthorizationError, NotFoundError, ValidationError
from forum_api.services import comment_service, thread_service
from forum_api.services.thread_service import DELETED_COMMENT_PLACEHOLDER


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ticking_clock():
    """Clock that advances one second per call, for deterministic ordering."""
    base = datetime(2024, 1, 1, tzinfo=timezone.utc)
    ticks = iter(range(10_000))
    return lambda: base + timedelta(seconds=next(ticks))


async def _seed(memory_repos):
    store, threads, comments, users = memory_repos
    store.clock = _ticking_clock()
    await users.add_user("user-alice", "alice")
    await users.add_user("user-bob", "bob")
    thread = await thread_service.add_thread(
        threads, "user-alice", {"title": "post-title", "body": "post-body"}
    )
    return thread


# ---------------------------------------------------------------------------
# add_thread
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_add_thread_returns_generated_id_and_owner(memory_repos):
    store, threads, _, _ = memory_repos
    added = await thread_service.add_thread(threads, "user-alice", {"title": "t", "body": "b"})
    assert added.id.startswith("thread-")
    assert added.title == "t"
    assert added.owner == "user-alice"
    assert store.threads[added.id].body == "b"


@pytest.mark.asyncio
async def test_add_thread_uses_injected_id_generator(memory_repos):
    from forum_api.repositories import InMemoryThreadRepository

    store = memory_repos[0]
    threads = InMemoryThreadRepository(store, id_generator=lambda: "123")
    added = await thread_service.add_thread(threads, "user-alice", {"title": "t", "body": "b"})
    assert added.id == "thread-123"


@pytest.mark.asyncio
async def test_add_thread_invalid_payload_persists_nothing(memory_repos):
    store, threads, _, _ = memory_repos
    with pytest.raises(ValidationError):
        await thread_service.add_thread(threads, "user-alice", {"title": "only title"})
    assert store.threads == {}


# ---------------------------------------------------------------------------
# add_comment
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_add_comment(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, _ = memory_repos

    added = await comment_service.add_comment(
        threads, comments, "user-bob", thread.id, {"content": "a-content"}
    )
    assert added.id.startswith("comment-")
    assert added.content == "a-content"
    assert added.owner == "user-bob"

    stored = await comments.get_comment_by_id(added.id)
    assert stored.thread_id == thread.id
    assert stored.is_deleted is False


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{"content": "fine"}, {"content": 1}, {}, None])
async def test_add_comment_missing_thread_is_not_found_for_any_payload(memory_repos, payload):
    _, threads, comments, _ = memory_repos
    with pytest.raises(NotFoundError):
        await comment_service.add_comment(threads, comments, "user-bob", "thread-nope", payload)


@pytest.mark.asyncio
async def test_add_comment_invalid_payload(memory_repos):
    thread = await _seed(memory_repos)
    store, threads, comments, _ = memory_repos
    with pytest.raises(ValidationError):
        await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": 234})
    assert store.comments == {}


# ---------------------------------------------------------------------------
# delete_comment
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_delete_comment_by_owner(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, _ = memory_repos
    added = await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "x"})

    await comment_service.delete_comment(threads, comments, "user-bob", thread.id, added.id)

    assert (await comments.get_comment_by_id(added.id)).is_deleted is True


@pytest.mark.asyncio
async def test_delete_comment_twice_is_idempotent(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, _ = memory_repos
    added = await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "x"})

    await comment_service.delete_comment(threads, comments, "user-bob", thread.id, added.id)
    await comment_service.delete_comment(threads, comments, "user-bob", thread.id, added.id)

    assert (await comments.get_comment_by_id(added.id)).is_deleted is True


@pytest.mark.asyncio
async def test_delete_comment_by_non_owner_is_forbidden(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, _ = memory_repos
    added = await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "x"})

    with pytest.raises(AuthorizationError):
        await comment_service.delete_comment(threads, comments, "user-alice", thread.id, added.id)
    assert (await comments.get_comment_by_id(added.id)).is_deleted is False


@pytest.mark.asyncio
async def test_delete_missing_comment_is_not_found_even_for_stranger(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, _ = memory_repos
    with pytest.raises(NotFoundError):
        await comment_service.delete_comment(threads, comments, "user-x", thread.id, "comment-nope")


@pytest.mark.asyncio
async def test_delete_comment_in_missing_thread(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, _ = memory_repos
    added = await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "x"})
    with pytest.raises(NotFoundError):
        await comment_service.delete_comment(threads, comments, "user-bob", "thread-nope", added.id)


@pytest.mark.asyncio
async def test_delete_comment_through_wrong_thread(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, _ = memory_repos
    other = await thread_service.add_thread(threads, "user-bob", {"title": "t2", "body": "b2"})
    added = await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "x"})

    with pytest.raises(NotFoundError):
        await comment_service.delete_comment(threads, comments, "user-bob", other.id, added.id)


# ---------------------------------------------------------------------------
# get_thread_detail
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_thread_detail_masks_deleted_comments_in_order(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, users = memory_repos

    ids = []
    for i, owner in enumerate(["user-bob", "user-alice", "user-bob", "user-alice"]):
        added = await comment_service.add_comment(threads, comments, owner, thread.id, {"content": f"c{i}"})
        ids.append(added.id)
    await comment_service.delete_comment(threads, comments, "user-alice", thread.id, ids[1])
    await comment_service.delete_comment(threads, comments, "user-alice", thread.id, ids[3])

    detail = await thread_service.get_thread_detail(threads, comments, users, thread.id)

    assert detail.id == thread.id
    assert detail.title == "post-title"
    assert detail.body == "post-body"
    assert detail.username == "alice"
    assert [c.id for c in detail.comments] == ids
    assert [c.username for c in detail.comments] == ["bob", "alice", "bob", "alice"]
    assert [c.content for c in detail.comments] == [
        "c0",
        DELETED_COMMENT_PLACEHOLDER,
        "c2",
        DELETED_COMMENT_PLACEHOLDER,
    ]
    dates = [c.date for c in detail.comments]
    assert dates == sorted(dates)


@pytest.mark.asyncio
async def test_thread_detail_orders_by_created_at_not_insertion(memory_repos):
    thread = await _seed(memory_repos)
    store, threads, comments, users = memory_repos

    # Second comment gets an earlier timestamp than the first.
    times = iter([
        datetime(2024, 6, 2, tzinfo=timezone.utc),
        datetime(2024, 6, 1, tzinfo=timezone.utc),
    ])
    store.clock = lambda: next(times)
    late = await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "late"})
    early = await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "early"})

    detail = await thread_service.get_thread_detail(threads, comments, users, thread.id)
    assert [c.id for c in detail.comments] == [early.id, late.id]


@pytest.mark.asyncio
async def test_thread_detail_without_comments(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, users = memory_repos
    detail = await thread_service.get_thread_detail(threads, comments, users, thread.id)
    assert detail.comments == []


@pytest.mark.asyncio
async def test_thread_detail_missing_thread(memory_repos):
    _, threads, comments, users = memory_repos
    with pytest.raises(NotFoundError):
        await thread_service.get_thread_detail(threads, comments, users, "thread-nope")


@pytest.mark.asyncio
async def test_thread_detail_breaks_timestamp_ties_by_id(memory_repos):
    thread = await _seed(memory_repos)
    store, threads, _, users = memory_repos
    from forum_api.repositories import InMemoryCommentRepository

    fixed = datetime(2024, 6, 1, tzinfo=timezone.utc)
    store.clock = lambda: fixed
    comments = InMemoryCommentRepository(store, id_generator=iter(["b", "a"]).__next__)
    await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "x"})
    await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "y"})

    detail = await thread_service.get_thread_detail(threads, comments, users, thread.id)
    assert [c.id for c in detail.comments] == ["comment-a", "comment-b"]


@pytest.mark.asyncio
async def test_thread_detail_with_missing_comment_owner(memory_repos):
    thread = await _seed(memory_repos)
    _, threads, comments, users = memory_repos
    await comment_service.add_comment(threads, comments, "user-gone", thread.id, {"content": "x"})

    with pytest.raises(NotFoundError):
        await thread_service.get_thread_detail(threads, comments, users, thread.id)


@pytest.mark.asyncio
async def test_placeholder_ignores_environment(memory_repos, monkeypatch):
    monkeypatch.setenv("DELETED_COMMENT_PLACEHOLDER", "overridden")
    assert not hasattr(Settings(), "DELETED_COMMENT_PLACEHOLDER")

    thread = await _seed(memory_repos)
    _, threads, comments, users = memory_repos
    added = await comment_service.add_comment(threads, comments, "user-bob", thread.id, {"content": "x"})
    await comment_service.delete_comment(threads, comments, "user-bob", thread.id, added.id)

    detail = await thread_service.get_thread_detail(threads, comments, users, thread.id)
    assert detail.comments[0].content == "**komentar telah dihapus**"
    assert DELETED_COMMENT_PLACEHOLDER == "**komentar telah dihapus**"
