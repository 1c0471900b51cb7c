"""Pytest configuration and fixtures for trackdesk.

Environment is set before trackdesk.main is imported so the app is built
with the in-memory realtime store. The client fixture runs the app lifespan,
so app.state.store / app.state.sync_registry are fresh for every test.
"""

import os

os.environ["STORE_BACKEND"] = "memory"
os.environ["SECRET_KEY"] = "test-secret-key-not-for-production"
os.environ["ENVELOPE_PASSPHRASE"] = "test-envelope-passphrase"
os.environ["TELEMETRY_ENABLED"] = "false"
os.environ["SNAPSHOT_TIMEOUT_SECONDS"] = "1"

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from trackdesk.application.services import (  # noqa: E402
    EnvelopeCodec,
    PathResolver,
    SyncRegistry,
)
from trackdesk.core.config import get_settings  # noqa: E402
from trackdesk.core.lifespan import create_lifespan  # noqa: E402
from trackdesk.domain.enums import Role  # noqa: E402
from trackdesk.domain.value_objects import Identity  # noqa: E402
from trackdesk.infrastructure.memory import InMemoryRealtimeStore  # noqa: E402
from trackdesk.infrastructure.security.jwt import create_identity_token  # noqa: E402
from trackdesk.main import app  # noqa: E402

SHARED = ("tickets", "renewals", "work", "bills", "customForms", "formEntries")


@pytest.fixture
def store() -> InMemoryRealtimeStore:
    return InMemoryRealtimeStore()


@pytest.fixture
def resolver() -> PathResolver:
    return PathResolver("admin", SHARED)


@pytest.fixture
def admin() -> Identity:
    return Identity("alice", Role.ADMIN)


@pytest.fixture
def other_admin() -> Identity:
    return Identity("bob", Role.ADMIN)


@pytest.fixture
def employee() -> Identity:
    return Identity("emp-1", Role.EMPLOYEE)


@pytest.fixture
def codec() -> EnvelopeCodec:
    return EnvelopeCodec("unit-test-passphrase")


@pytest.fixture
async def registry(store: InMemoryRealtimeStore, resolver: PathResolver):
    reg = SyncRegistry(store, resolver)
    yield reg
    await reg.close_all()


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI), with lifespan run."""
    get_settings.cache_clear()
    async with create_lifespan(app):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac


@pytest.fixture
def app_store(client: AsyncClient) -> InMemoryRealtimeStore:
    """The in-memory store the running app writes to."""
    return app.state.store


@pytest.fixture
def admin_headers(admin: Identity) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_identity_token(admin)}"}


@pytest.fixture
def other_admin_headers(other_admin: Identity) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_identity_token(other_admin)}"}


@pytest.fixture
def employee_headers(employee: Identity) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_identity_token(employee)}"}
