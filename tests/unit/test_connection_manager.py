"""Tests for the per-partition WebSocket ConnectionManager."""

from unittest.mock import AsyncMock

from trackdesk.api.websocket import ConnectionManager


def _socket(fail: bool = False) -> AsyncMock:
    ws = AsyncMock()
    if fail:
        ws.send_json.side_effect = RuntimeError("closed")
    return ws


async def test_broadcast_reaches_only_that_partition() -> None:
    manager = ConnectionManager()
    admin_ws, employee_ws = _socket(), _socket()
    await manager.connect(admin_ws, "data/admin/tickets")
    await manager.connect(employee_ws, "data/emp-1/notifications")

    await manager.broadcast_to_partition("data/admin/tickets", {"type": "snapshot"})

    admin_ws.send_json.assert_awaited_once_with({"type": "snapshot"})
    employee_ws.send_json.assert_not_awaited()


async def test_text_messages() -> None:
    manager = ConnectionManager()
    ws = _socket()
    await manager.connect(ws, "p")
    await manager.broadcast_to_partition("p", "ping")
    ws.send_text.assert_awaited_once_with("ping")


async def test_failed_socket_is_dropped() -> None:
    manager = ConnectionManager()
    good, bad = _socket(), _socket(fail=True)
    await manager.connect(good, "p")
    await manager.connect(bad, "p")

    await manager.broadcast_to_partition("p", {"n": 1})

    assert manager.connection_count() == 1
    await manager.broadcast_to_partition("p", {"n": 2})
    assert good.send_json.await_count == 2
    assert bad.send_json.await_count == 1


async def test_disconnect_forgets_path() -> None:
    manager = ConnectionManager()
    ws = _socket()
    await manager.connect(ws, "p")
    assert manager.watched_paths() == ["p"]
    await manager.disconnect(ws)
    assert manager.watched_paths() == []
    assert manager.connection_count() == 0
