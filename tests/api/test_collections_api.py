"""Tests for the collections and objects endpoints (in-memory store)."""

from httpx import AsyncClient

from trackdesk.domain.value_objects import Identity
from trackdesk.infrastructure.memory import InMemoryRealtimeStore
from trackdesk.main import app


async def test_read_without_token_is_empty(client: AsyncClient) -> None:
    """GET /collections/tickets with no identity returns an empty, loaded partition."""
    response = await client.get("/api/v1/collections/tickets")
    assert response.status_code == 200
    assert response.json() == {"data": [], "loading": False}


async def test_admin_add_then_list(client: AsyncClient, admin_headers: dict) -> None:
    response = await client.post(
        "/api/v1/collections/tickets",
        json={"title": "Printer jam", "meta": {"room.no": "4"}},
        headers=admin_headers,
    )
    assert response.status_code == 201
    new_id = response.json()["id"]
    assert len(new_id) == 20

    response = await client.get("/api/v1/collections/tickets", headers=admin_headers)
    assert response.json()["data"] == [
        {"id": new_id, "title": "Printer jam", "meta": {"room_no": "4"}}
    ]


async def test_admins_share_tickets_but_not_notifications(
    client: AsyncClient, admin_headers: dict, other_admin_headers: dict
) -> None:
    await client.post("/api/v1/collections/tickets", json={"t": 1}, headers=admin_headers)
    await client.post("/api/v1/collections/notifications", json={"m": 1}, headers=admin_headers)

    tickets = await client.get("/api/v1/collections/tickets", headers=other_admin_headers)
    notifications = await client.get(
        "/api/v1/collections/notifications", headers=other_admin_headers
    )
    assert len(tickets.json()["data"]) == 1
    assert notifications.json()["data"] == []


async def test_employee_reads_only_notifications(
    client: AsyncClient,
    app_store: InMemoryRealtimeStore,
    employee_headers: dict,
) -> None:
    await app_store.write_full("data/admin/tickets/k1", {"title": "secret"})
    await app_store.write_full("data/emp-1/notifications/n1", {"message": "hi"})

    tickets = await client.get("/api/v1/collections/tickets", headers=employee_headers)
    notifications = await client.get(
        "/api/v1/collections/notifications", headers=employee_headers
    )
    assert tickets.json()["data"] == []
    assert notifications.json()["data"] == [{"id": "n1", "message": "hi"}]


async def test_write_without_token_returns_401(client: AsyncClient) -> None:
    response = await client.post("/api/v1/collections/tickets", json={"t": 1})
    assert response.status_code == 401
    assert response.json()["error"] == "NOT_AUTHENTICATED"


async def test_employee_write_to_tickets_returns_403(
    client: AsyncClient, employee_headers: dict
) -> None:
    response = await client.post(
        "/api/v1/collections/tickets", json={"t": 1}, headers=employee_headers
    )
    assert response.status_code == 403
    assert response.json()["error"] == "PARTITION_UNAVAILABLE"


async def test_invalid_collection_name_returns_400(
    client: AsyncClient, admin_headers: dict
) -> None:
    response = await client.get("/api/v1/collections/tick$ets", headers=admin_headers)
    assert response.status_code == 400


async def test_patch_merges_and_delete_removes(
    client: AsyncClient, app_store: InMemoryRealtimeStore, admin_headers: dict
) -> None:
    await app_store.write_full("data/admin/tickets/k1", {"title": "a", "status": "Open"})

    response = await client.patch(
        "/api/v1/collections/tickets/k1", json={"status": "Closed"}, headers=admin_headers
    )
    assert response.status_code == 204
    assert await app_store.read("data/admin/tickets/k1") == {"title": "a", "status": "Closed"}

    response = await client.delete("/api/v1/collections/tickets/k1", headers=admin_headers)
    assert response.status_code == 204
    assert await app_store.read("data/admin/tickets/k1") is None


async def test_store_rejection_returns_502(
    client: AsyncClient, app_store: InMemoryRealtimeStore, admin_headers: dict
) -> None:
    app_store.fail_writes = True
    response = await client.post(
        "/api/v1/collections/tickets", json={"t": 1}, headers=admin_headers
    )
    assert response.status_code == 502
    assert response.json()["details"]["path"].startswith("data/admin/tickets/")


async def test_object_put_and_get(client: AsyncClient, admin_headers: dict) -> None:
    response = await client.get("/api/v1/objects/preferences", headers=admin_headers)
    assert response.json() == {"value": None, "loading": False}

    response = await client.put(
        "/api/v1/objects/preferences", json={"theme": "dark"}, headers=admin_headers
    )
    assert response.status_code == 204
    response = await client.get("/api/v1/objects/preferences", headers=admin_headers)
    assert response.json()["value"] == {"theme": "dark"}


async def test_ready_counts_open_partitions(
    client: AsyncClient, admin: Identity, admin_headers: dict
) -> None:
    async with app.state.sync_registry.collection("tickets", admin):
        response = await client.get("/api/v1/health/ready")
    assert response.json()["open_partitions"] == 1
    assert response.json()["stream_connections"] == 0

    response = await client.get("/api/v1/health/ready")
    assert response.json()["open_partitions"] == 0


async def test_reads_release_their_subscriptions(
    client: AsyncClient, app_store: InMemoryRealtimeStore, admin_headers: dict
) -> None:
    for i in range(20):
        response = await client.get(f"/api/v1/collections/scratch{i}", headers=admin_headers)
        assert response.status_code == 200
    await client.put("/api/v1/objects/preferences", json={"theme": "dark"}, headers=admin_headers)
    await client.post("/api/v1/collections/tickets", json={"title": "x"}, headers=admin_headers)
    assert app_store.subscriber_count == 0
