"""Bearer tokens carrying the caller identity.

Claims: 'sub' (subject id, a single path segment) and 'role' ('Admin' or
'Employee'). Signed with settings.secret_key using settings.algorithm.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from jose import JWTError, jwt

from trackdesk.core.config import get_settings
from trackdesk.domain.enums import Role
from trackdesk.domain.value_objects import Identity

_REQUIRED_CLAIMS = ("sub", "role")


def create_access_token(claims: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Sign claims with an 'exp' added (default TTL: access_token_expire_minutes)."""
    settings = get_settings()
    ttl = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {**claims, "exp": datetime.now(UTC) + ttl}
    return jwt.encode(payload, settings.secret_key.get_secret_value(), algorithm=settings.algorithm)


def create_identity_token(identity: Identity, expires_delta: timedelta | None = None) -> str:
    return create_access_token(
        {"sub": identity.subject_id, "role": identity.role.value}, expires_delta
    )


def verify_token(token: str) -> dict[str, Any]:
    """Check signature and expiry and return the claims.

    Raises:
        ValueError: Bad signature, expired, malformed, or missing sub / role.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e}") from e
    missing = [name for name in _REQUIRED_CLAIMS if not claims.get(name)]
    if missing:
        raise ValueError(f"Token missing claims: {', '.join(missing)}")
    return claims


def identity_from_claims(claims: dict[str, Any]) -> Identity:
    """Build the caller Identity from verified claims.

    Raises:
        ValueError: Unknown role, or a sub that is not a valid path segment.
    """
    role = claims.get("role")
    if role not in Role.values():
        raise ValueError(f"Token carries unknown role: {role!r}")
    return Identity(subject_id=str(claims["sub"]), role=Role(role))
