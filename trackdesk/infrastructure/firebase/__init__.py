"""Firebase Realtime Database adapter for the realtime store port."""

from trackdesk.infrastructure.firebase._rest_client import RealtimeDatabaseRESTClient
from trackdesk.infrastructure.firebase.client import (
    close_realtime_database,
    get_realtime_client,
    init_realtime_database,
)

__all__ = [
    "RealtimeDatabaseRESTClient",
    "close_realtime_database",
    "get_realtime_client",
    "init_realtime_database",
]
