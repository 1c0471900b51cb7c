"""Domain exceptions for trackdesk.

Defines domain-level exceptions for the sync core. These exceptions are
independent of infrastructure concerns. Presentation layer maps them to
HTTP responses in exception handlers.

Read-side failures (unresolvable partitions, subscription errors, failed
decryption) are never raised; they degrade to empty state or the original
value. Only write-side failures reach callers.
"""

from typing import Any


class TrackdeskException(Exception):
    """Base of every trackdesk error.

    error_code is the machine-readable name used in API error bodies;
    details carries context such as the store path or collection.
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code or type(self).__name__
        self.details = dict(details) if details else {}

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(TrackdeskException):
    """Raised when input validation fails (e.g. invalid key or collection name)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, "VALIDATION_ERROR", {"field": field} if field else None)


class NotAuthenticatedException(TrackdeskException):
    """Raised when a write is attempted without a resolved identity."""

    def __init__(self, message: str = "User not authenticated") -> None:
        super().__init__(message, "NOT_AUTHENTICATED")


class PartitionUnavailableException(TrackdeskException):
    """Raised when a write targets a collection the caller's role cannot resolve."""

    def __init__(self, collection: str, role: str | None = None) -> None:
        """Initialize with the collection and role that failed to resolve.

        Args:
            collection: Logical collection name.
            role: Caller role, when known.
        """
        details: dict[str, Any] = {"collection": collection}
        if role:
            details["role"] = role
        super().__init__(
            f"No partition available for collection '{collection}'",
            "PARTITION_UNAVAILABLE",
            details,
        )


class StoreWriteException(TrackdeskException):
    """Raised when the realtime store rejects a write or delete. Never retried."""

    def __init__(
        self,
        path: str,
        message: str = "Store rejected the write",
        status_code: int | None = None,
    ) -> None:
        """Initialize with the target path and optional upstream status.

        Args:
            path: Store path that was being written.
            message: Human-readable reason.
            status_code: HTTP status returned by the store, if any.
        """
        details: dict[str, Any] = {"path": path}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(message, "STORE_WRITE_ERROR", details)


class ResourceNotFoundException(TrackdeskException):
    """Raised when a requested record is not in the mirrored partition."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        super().__init__(
            f"No {resource_type} with id '{resource_id}' in this partition",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )
