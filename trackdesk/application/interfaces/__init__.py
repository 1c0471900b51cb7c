"""Application interfaces (ports) implemented by infrastructure."""

from trackdesk.application.interfaces.store import (
    ErrorCallback,
    IRealtimeStore,
    SnapshotCallback,
    SubscriptionError,
    Unsubscribe,
)

__all__ = [
    "ErrorCallback",
    "IRealtimeStore",
    "SnapshotCallback",
    "SubscriptionError",
    "Unsubscribe",
]
