"""Tests for Settings validation."""

import pytest
from pydantic import ValidationError

from trackdesk.core.config import Settings


def _settings(**overrides) -> Settings:
    values = {
        "store_backend": "memory",
        "secret_key": "s3cret",
        "envelope_passphrase": "pass",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def test_memory_backend_needs_no_connection() -> None:
    settings = _settings()
    assert settings.store_backend == "memory"


def test_shared_collections_parsed() -> None:
    settings = _settings(shared_admin_collections=" tickets, bills ,,")
    assert settings.shared_collections == frozenset({"tickets", "bills"})


@pytest.mark.parametrize(
    "overrides",
    [
        {"store_backend": "sqlite"},
        {"secret_key": ""},
        {"envelope_passphrase": ""},
        {"key_substitute": "."},
        {"key_substitute": "--"},
        {"store_backend": "firebase", "firebase_database_url": ""},
        {"store_backend": "firebase", "firebase_database_url": "https://db.example"},
    ],
)
def test_invalid_settings_rejected(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        _settings(**overrides)


def test_firebase_with_key_path() -> None:
    settings = _settings(
        store_backend="firebase",
        firebase_database_url="https://db.example",
        firebase_service_account_path="/etc/sa.json",
    )
    assert settings.firebase_service_account_path == "/etc/sa.json"
