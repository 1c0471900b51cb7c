"""Domain enumerations for trackdesk.

Enums represent fixed sets of domain values (e.g. caller role).
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class Role(_ValuesMixin, str, Enum):
    """Caller role. Determines which partition a collection resolves to."""

    ADMIN = "Admin"
    EMPLOYEE = "Employee"


class TicketStatus(_ValuesMixin, str, Enum):
    """Ticket lifecycle status."""

    OPEN = "Open"
    IN_PROGRESS = "In Progress"
    CLOSED = "Closed"


class NotificationType(_ValuesMixin, str, Enum):
    """Kind of in-app notification stored in the notifications collection."""

    TICKET = "ticket"
    RENEWAL = "renewal"


class FormFieldType(_ValuesMixin, str, Enum):
    """Field types of custom forms whose entries are stored encrypted."""

    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    TEXTAREA = "textarea"
    GROUP = "group"
