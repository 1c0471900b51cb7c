"""Domain layer: value objects, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from trackdesk.domain.enums import FormFieldType, NotificationType, Role, TicketStatus
from trackdesk.domain.exceptions import (
    NotAuthenticatedException,
    PartitionUnavailableException,
    ResourceNotFoundException,
    StoreWriteException,
    TrackdeskException,
    ValidationException,
)
from trackdesk.domain.value_objects import Identity

__all__ = [
    # Enums
    "FormFieldType",
    "NotificationType",
    "Role",
    "TicketStatus",
    # Exceptions
    "NotAuthenticatedException",
    "PartitionUnavailableException",
    "ResourceNotFoundException",
    "StoreWriteException",
    "TrackdeskException",
    "ValidationException",
    # Value objects
    "Identity",
]
