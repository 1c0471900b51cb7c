"""Domain value objects for trackdesk.

Value objects are immutable types that represent domain concepts with
self-validation. They have no identity, only value.
"""

from dataclasses import dataclass

from trackdesk.core.constants import FORBIDDEN_KEY_CHARS
from trackdesk.domain.enums import Role


@dataclass(frozen=True)
class Identity:
    """Authenticated caller: subject id plus role.

    Supplied by the identity collaborator (JWT claims) and passed explicitly
    to the path resolver and caches. subject_id becomes a path segment, so it
    must be non-empty and free of store-forbidden characters.
    """

    subject_id: str
    role: Role

    def __post_init__(self) -> None:
        if not self.subject_id or not isinstance(self.subject_id, str):
            raise ValueError("subject_id must be a non-empty string")
        if any(ch in FORBIDDEN_KEY_CHARS for ch in self.subject_id):
            raise ValueError(
                f"subject_id must not contain any of {FORBIDDEN_KEY_CHARS!r}"
            )
        if not isinstance(self.role, Role):
            object.__setattr__(self, "role", Role(self.role))

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN
