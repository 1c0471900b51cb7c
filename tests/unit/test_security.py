"""Tests for identity tokens and domain exception payloads."""

from datetime import timedelta

import pytest

from trackdesk.domain.enums import Role
from trackdesk.domain.exceptions import (
    PartitionUnavailableException,
    StoreWriteException,
    ValidationException,
)
from trackdesk.domain.value_objects import Identity
from trackdesk.infrastructure.security import (
    create_access_token,
    create_identity_token,
    identity_from_claims,
    verify_token,
)


def test_identity_token_round_trip(admin: Identity) -> None:
    payload = verify_token(create_identity_token(admin))
    assert identity_from_claims(payload) == admin


def test_expired_token_rejected(admin: Identity) -> None:
    token = create_identity_token(admin, expires_delta=timedelta(seconds=-5))
    with pytest.raises(ValueError):
        verify_token(token)


def test_unknown_role_rejected() -> None:
    payload = verify_token(create_access_token({"sub": "x", "role": "Root"}))
    with pytest.raises(ValueError):
        identity_from_claims(payload)


def test_garbage_token_rejected() -> None:
    with pytest.raises(ValueError):
        verify_token("not-a-jwt")


def test_identity_validation() -> None:
    assert Identity("emp-1", "Employee").role is Role.EMPLOYEE
    with pytest.raises(ValueError):
        Identity("", Role.ADMIN)
    with pytest.raises(ValueError):
        Identity("a/b", Role.ADMIN)


def test_exception_payloads() -> None:
    assert ValidationException("bad", field="id").to_dict() == {
        "error": "VALIDATION_ERROR",
        "message": "bad",
        "details": {"field": "id"},
    }
    exc = PartitionUnavailableException("tickets", "Employee")
    assert exc.details == {"collection": "tickets", "role": "Employee"}
    assert StoreWriteException("data/a", status_code=401).details == {
        "path": "data/a",
        "status_code": 401,
    }
