"""ID generators (store push keys)."""

import secrets
import threading

from trackdesk.shared.utils.datetime import now_ms

# Ordered the way the store sorts keys (ASCII), so keys sort by creation time.
PUSH_CHARS = "-0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ_abcdefghijklmnopqrstuvwxyz"
PUSH_KEY_LENGTH = 20


class PushKeyGenerator:
    """Generate 20-character, time-ordered push keys locally.

    The first 8 characters encode the millisecond timestamp; the last 12 are
    random. Keys generated in the same millisecond reuse the previous random
    part incremented by one, so they stay unique and ordered within a process.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._last_ms = -1
        self._last_rand = [0] * 12

    def __call__(self, timestamp_ms: int | None = None) -> str:
        with self._lock:
            ts = now_ms() if timestamp_ms is None else timestamp_ms
            duplicate = ts == self._last_ms
            self._last_ms = ts

            prefix = []
            for _ in range(8):
                prefix.append(PUSH_CHARS[ts % 64])
                ts //= 64
            prefix.reverse()

            if not duplicate:
                self._last_rand = [secrets.randbelow(64) for _ in range(12)]
            else:
                i = 11
                while i >= 0 and self._last_rand[i] == 63:
                    self._last_rand[i] = 0
                    i -= 1
                if i >= 0:
                    self._last_rand[i] += 1

            return "".join(prefix) + "".join(PUSH_CHARS[n] for n in self._last_rand)


push_key_generator = PushKeyGenerator()


def generate_push_key() -> str:
    """Generate a unique, chronologically sortable push key.

    Returns:
        A new 20-character key safe to use as a store path segment.
    """
    result = push_key_generator()
    if len(result) != PUSH_KEY_LENGTH:
        raise ValueError(f"Expected {PUSH_KEY_LENGTH}-char push key, got {result!r}")
    return result
