"""In-memory realtime store."""

from trackdesk.infrastructure.memory.store import InMemoryRealtimeStore

__all__ = ["InMemoryRealtimeStore"]
