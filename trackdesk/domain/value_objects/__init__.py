"""Domain value objects and shared value types."""

from trackdesk.domain.value_objects.core import Identity

__all__ = ["Identity"]
