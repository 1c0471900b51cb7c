"""Tests for InMemoryRealtimeStore."""

import pytest

from trackdesk.application.interfaces import SubscriptionError
from trackdesk.domain.exceptions import StoreWriteException
from trackdesk.infrastructure.memory import InMemoryRealtimeStore


async def test_subscribe_emits_current_value() -> None:
    store = InMemoryRealtimeStore({"data": {"a": {"x": 1}}})
    seen: list = []
    await store.subscribe("data/a", seen.append, lambda e: None)
    assert seen == [{"x": 1}]


async def test_ancestor_and_descendant_writes_notify() -> None:
    store = InMemoryRealtimeStore()
    seen: list = []
    await store.subscribe("data/a/tickets", seen.append, lambda e: None)
    await store.write_full("data/a/tickets/k1", {"t": 1})
    await store.write_full("data/a", {"tickets": {"k2": {"t": 2}}})
    await store.write_full("data/b/tickets/k3", {"t": 3})
    assert seen == [None, {"k1": {"t": 1}}, {"k2": {"t": 2}}]


async def test_delete_prunes_empty_parents() -> None:
    store = InMemoryRealtimeStore()
    await store.write_full("data/a/tickets/k1", {"t": 1})
    await store.delete("data/a/tickets/k1")
    assert await store.read("data") is None


async def test_none_members_dropped() -> None:
    store = InMemoryRealtimeStore()
    await store.write_full("p", {"a": 1, "b": None})
    assert await store.read("p") == {"a": 1}


async def test_unsubscribe_stops_delivery() -> None:
    store = InMemoryRealtimeStore()
    seen: list = []
    unsubscribe = await store.subscribe("p", seen.append, lambda e: None)
    unsubscribe()
    await store.write_full("p", 1)
    assert seen == [None]
    assert store.subscriber_count == 0


async def test_failure_switches() -> None:
    store = InMemoryRealtimeStore()
    store.fail_writes = True
    with pytest.raises(StoreWriteException):
        await store.write_full("p", 1)

    store.fail_subscriptions = True
    errors: list = []
    await store.subscribe("p", lambda v: None, errors.append)
    assert isinstance(errors[0], SubscriptionError)
    assert store.subscriber_count == 0


async def test_deleting_under_scalar_keeps_value() -> None:
    store = InMemoryRealtimeStore()
    await store.write_full("data/a/obj", 5)
    await store.delete("data/a/obj/missing")
    assert await store.read("data/a/obj") == 5


async def test_empty_values_are_not_stored() -> None:
    store = InMemoryRealtimeStore()
    await store.write_full("data/a/tickets/k1", {})
    await store.write_full("data/a/tickets/k2", {"tags": [], "meta": {}})
    assert await store.read("data") is None

    await store.write_full("data/a/tickets/k3", {"t": 1})
    await store.write_full("data/a/tickets/k3", {})
    assert await store.read("data/a/tickets/k3") is None
