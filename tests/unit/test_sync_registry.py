"""Tests for SyncRegistry (one subscription per partition, released with its last user)."""

import asyncio
from unittest.mock import AsyncMock

from trackdesk.application.services import PathResolver, SyncRegistry
from trackdesk.domain.value_objects import Identity
from trackdesk.infrastructure.memory import InMemoryRealtimeStore


async def test_admins_share_one_cache(
    registry: SyncRegistry, store: InMemoryRealtimeStore, admin: Identity, other_admin: Identity
) -> None:
    async with registry.collection("tickets", admin) as a, registry.collection(
        "tickets", other_admin
    ) as b:
        assert a is b
        assert registry.users("data/admin/tickets") == 2
    assert store.subscribe_calls == ["data/admin/tickets"]


async def test_private_collections_are_separate(
    registry: SyncRegistry, admin: Identity, other_admin: Identity
) -> None:
    async with registry.collection("notifications", admin) as a, registry.collection(
        "notifications", other_admin
    ) as b:
        assert a is not b
        assert sorted(registry.open_paths()) == [
            "data/alice/notifications",
            "data/bob/notifications",
        ]


async def test_unavailable_partition_not_registered(
    registry: SyncRegistry, store: InMemoryRealtimeStore, employee: Identity
) -> None:
    async with registry.collection("tickets", employee) as cache:
        assert (cache.data, cache.loading) == ([], False)
        assert registry.open_paths() == []
    assert store.subscribe_calls == []


async def test_last_release_unsubscribes(
    registry: SyncRegistry, store: InMemoryRealtimeStore, admin: Identity
) -> None:
    for i in range(20):
        async with registry.collection(f"scratch{i}", admin) as cache:
            assert cache.subscribed
    assert store.subscriber_count == 0
    assert registry.open_paths() == []


async def test_cache_stays_open_while_one_user_remains(
    registry: SyncRegistry, store: InMemoryRealtimeStore, admin: Identity, other_admin: Identity
) -> None:
    first = await registry.acquire_collection("tickets", admin)
    second = await registry.acquire_collection("tickets", other_admin)
    await registry.release(first)
    assert store.subscriber_count == 1
    assert second.subscribed
    await registry.release(second)
    assert store.subscriber_count == 0
    assert not second.subscribed


async def test_release_on_error_still_unsubscribes(
    registry: SyncRegistry, store: InMemoryRealtimeStore, admin: Identity
) -> None:
    try:
        async with registry.object("prefs", admin):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert store.subscriber_count == 0


async def test_idle_cache_is_reused_before_timeout(
    store: InMemoryRealtimeStore, resolver: PathResolver, admin: Identity
) -> None:
    registry = SyncRegistry(store, resolver, idle_timeout=0.05)
    async with registry.collection("tickets", admin) as first:
        pass
    assert store.subscriber_count == 1
    async with registry.collection("tickets", admin) as second:
        assert second is first
    await asyncio.sleep(0.1)
    assert store.subscriber_count == 0
    assert store.subscribe_calls == ["data/admin/tickets"]
    assert registry.open_paths() == []


async def test_close_all_unsubscribes(
    registry: SyncRegistry, store: InMemoryRealtimeStore, admin: Identity
) -> None:
    await registry.acquire_collection("tickets", admin)
    await registry.acquire_object("lastRenewalCheck", admin)
    assert store.subscriber_count == 2
    await registry.close_all()
    assert store.subscriber_count == 0
    assert registry.open_paths() == []


async def test_changes_are_broadcast_per_partition(
    store: InMemoryRealtimeStore, resolver: PathResolver, admin: Identity
) -> None:
    broadcaster = AsyncMock()
    registry = SyncRegistry(store, resolver, broadcaster=broadcaster)
    cache = await registry.acquire_collection("tickets", admin)
    new_id = await cache.add({"title": "x"})
    await registry.close_all()

    path, message = broadcaster.await_args_list[-1].args
    assert path == "data/admin/tickets"
    assert message["type"] == "snapshot"
    assert message["collection"] == "tickets"
    assert message["data"] == [{"id": new_id, "title": "x"}]
