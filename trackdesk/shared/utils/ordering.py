"""Child ordering as the realtime store reports it.

Keys that parse as 32-bit integers come first, in numeric order; all other
keys follow in lexicographic (code point) order. Push keys are therefore
listed oldest first.
"""

import re
from typing import Any

_INT_KEY = re.compile(r"-?(0|[1-9][0-9]*)")
_INT32_MIN = -(2**31)
_INT32_MAX = 2**31 - 1


def store_key_order(key: str) -> tuple[int, int, str]:
    """Sort key for a child key, matching the store's default ordering."""
    if _INT_KEY.fullmatch(key):
        number = int(key)
        if _INT32_MIN <= number <= _INT32_MAX:
            return (0, number, "")
    return (1, 0, key)


def ordered_children(value: Any) -> list[tuple[str, Any]]:
    """Return (key, child) pairs of a snapshot node in store order.

    Dicts yield their items; lists (the store's rendering of dense integer
    keys) yield (index, element) with missing elements skipped. Any other
    value has no children.
    """
    if isinstance(value, dict):
        items = [(str(key), child) for key, child in value.items() if child is not None]
    elif isinstance(value, list):
        items = [(str(index), child) for index, child in enumerate(value) if child is not None]
    else:
        return []
    return sorted(items, key=lambda item: store_key_order(item[0]))
