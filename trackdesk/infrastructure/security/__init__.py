"""Security infrastructure: JWT identity tokens."""

from trackdesk.infrastructure.security.jwt import (
    create_access_token,
    create_identity_token,
    identity_from_claims,
    verify_token,
)

__all__ = [
    "create_access_token",
    "create_identity_token",
    "identity_from_claims",
    "verify_token",
]
