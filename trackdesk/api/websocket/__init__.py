"""WebSocket connection manager.

Used by the WebSocket endpoint and the sync registry to push partition snapshots.
"""

from trackdesk.api.websocket.manager import ConnectionManager

__all__ = ["ConnectionManager"]
