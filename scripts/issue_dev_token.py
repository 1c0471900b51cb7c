"""Mint a bearer token for local development against the API.

Usage:
    python -m scripts.issue_dev_token <subject_id> <Admin|Employee> [minutes]
Requires SECRET_KEY (and the rest of the settings) in env or .env.
"""

import sys
from datetime import timedelta

from trackdesk.domain.enums import Role
from trackdesk.domain.value_objects import Identity
from trackdesk.infrastructure.security.jwt import create_identity_token


def main() -> None:
    """Print a token for the given subject and role."""
    if len(sys.argv) < 3:
        print(
            "Usage: python -m scripts.issue_dev_token <subject_id> <Admin|Employee> [minutes]",
            file=sys.stderr,
        )
        sys.exit(1)
    subject_id = sys.argv[1]
    role = sys.argv[2]
    if role not in Role.values():
        print(f"Unknown role: {role} (expected one of {', '.join(Role.values())})", file=sys.stderr)
        sys.exit(1)
    expires = timedelta(minutes=int(sys.argv[3])) if len(sys.argv) > 3 else None

    identity = Identity(subject_id=subject_id, role=Role(role))
    print(create_identity_token(identity, expires))


if __name__ == "__main__":
    main()
