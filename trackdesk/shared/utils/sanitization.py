"""Key sanitization for structured payloads written to the realtime store.

The store rejects '.', '#', '$', '[', ']' and '/' in keys. User-authored
field names (custom form fields, imported sheet headers) must pass through
sanitize_deep before they are handed to a cache for writing.

The transform is lossy: "a.b" and "a#b" both become "a_b". Collisions are
detected at every level; by default the later key wins and a warning is
logged, with strict=True a KeyCollisionError is raised instead.
"""

import logging
import re
from typing import Any, ClassVar

from trackdesk.core.constants import FORBIDDEN_KEY_CHARS, KEY_SUBSTITUTE

logger = logging.getLogger(__name__)


class SanitizedKey(str):
    """A key that went through sanitize_key (safe as a store path segment)."""

    __slots__ = ()


class KeyCollisionError(ValueError):
    """Distinct raw keys at the same level sanitized to the same key."""

    def __init__(self, key: str, originals: list[str]) -> None:
        self.key = key
        self.originals = originals
        super().__init__(
            f"Keys {originals!r} collide as {key!r} after sanitization"
        )


class KeySanitizer:
    """Sanitize dict keys for the realtime store, recursively."""

    FORBIDDEN_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        "[" + re.escape(FORBIDDEN_KEY_CHARS) + "]"
    )

    @classmethod
    def sanitize_key(cls, name: str, substitute: str = KEY_SUBSTITUTE) -> SanitizedKey:
        """Replace each forbidden character in name with substitute.

        Args:
            name: Raw field name.
            substitute: Replacement character (must itself be allowed).

        Returns:
            The sanitized key.
        """
        if isinstance(name, SanitizedKey) and substitute == KEY_SUBSTITUTE:
            return name
        return SanitizedKey(cls.FORBIDDEN_PATTERN.sub(substitute, str(name)))

    @classmethod
    def sanitize_dict(
        cls,
        data: dict[str, Any],
        max_depth: int = 100,
        *,
        substitute: str = KEY_SUBSTITUTE,
        strict: bool = False,
    ) -> dict[SanitizedKey, Any]:
        """Recursively sanitize the keys of a dict.

        Args:
            data: Dictionary to sanitize.
            max_depth: Maximum recursion depth (default 100).
            substitute: Replacement character.
            strict: Raise on collisions instead of keeping the later key.

        Returns:
            New dict with sanitized keys.

        Raises:
            ValueError: If max_depth <= 0 or recursion exceeds max_depth.
            KeyCollisionError: If strict and two keys collide.
        """
        if max_depth <= 0:
            raise ValueError("Maximum recursion depth exceeded or invalid max_depth")
        sanitized: dict[SanitizedKey, Any] = {}
        sources: dict[SanitizedKey, list[str]] = {}
        for key, value in data.items():
            new_key = cls.sanitize_key(key, substitute)
            sources.setdefault(new_key, []).append(str(key))
            if new_key in sanitized:
                if strict:
                    raise KeyCollisionError(new_key, sources[new_key])
                logger.warning(
                    "Keys %r collide as %r after sanitization; keeping the last one",
                    sources[new_key],
                    new_key,
                )
            sanitized[new_key] = cls._sanitize_value(
                value, max_depth - 1, substitute=substitute, strict=strict
            )
        return sanitized

    @classmethod
    def sanitize_list(
        cls,
        data: list[Any],
        max_depth: int = 100,
        *,
        substitute: str = KEY_SUBSTITUTE,
        strict: bool = False,
    ) -> list[Any]:
        """Recursively sanitize dict keys found inside a list.

        Raises:
            ValueError: If max_depth <= 0 or recursion exceeds max_depth.
        """
        if max_depth <= 0:
            raise ValueError("Maximum recursion depth exceeded or invalid max_depth")
        return [
            cls._sanitize_value(item, max_depth - 1, substitute=substitute, strict=strict)
            for item in data
        ]

    @classmethod
    def _sanitize_value(
        cls, value: Any, max_depth: int, *, substitute: str, strict: bool
    ) -> Any:
        if isinstance(value, dict):
            return cls.sanitize_dict(
                value, max_depth=max_depth, substitute=substitute, strict=strict
            )
        if isinstance(value, list):
            return cls.sanitize_list(
                value, max_depth=max_depth, substitute=substitute, strict=strict
            )
        return value

    @classmethod
    def find_collisions(
        cls, value: Any, substitute: str = KEY_SUBSTITUTE
    ) -> dict[SanitizedKey, list[str]]:
        """Return every sanitized key produced by more than one raw key.

        Walks nested dicts and lists; raw keys from different levels are
        reported under the same sanitized key only if they share a level.
        """
        found: dict[SanitizedKey, list[str]] = {}
        stack = [value]
        while stack:
            current = stack.pop()
            if isinstance(current, dict):
                level: dict[SanitizedKey, list[str]] = {}
                for key, child in current.items():
                    level.setdefault(cls.sanitize_key(key, substitute), []).append(str(key))
                    stack.append(child)
                for key, originals in level.items():
                    if len(originals) > 1:
                        found.setdefault(key, []).extend(originals)
            elif isinstance(current, list):
                stack.extend(current)
        return found


def sanitize_key(name: str, substitute: str = KEY_SUBSTITUTE) -> SanitizedKey:
    """Return name with every forbidden store key character replaced."""
    return KeySanitizer.sanitize_key(name, substitute)


def sanitize_deep(
    value: Any,
    *,
    max_depth: int = 100,
    substitute: str = KEY_SUBSTITUTE,
    strict: bool = False,
) -> Any:
    """Sanitize every dict key in value (dicts, lists; scalars untouched).

    Args:
        value: Payload to sanitize.
        max_depth: Max recursion depth for dict/list (default 100).
        substitute: Replacement character.
        strict: Raise KeyCollisionError on collisions.

    Returns:
        Sanitized value (new structure for dict/list).
    """
    if isinstance(value, dict):
        return KeySanitizer.sanitize_dict(
            value, max_depth=max_depth, substitute=substitute, strict=strict
        )
    if isinstance(value, list):
        return KeySanitizer.sanitize_list(
            value, max_depth=max_depth, substitute=substitute, strict=strict
        )
    return value


def find_key_collisions(
    value: Any, substitute: str = KEY_SUBSTITUTE
) -> dict[SanitizedKey, list[str]]:
    """Return sanitized keys that more than one raw key maps to."""
    return KeySanitizer.find_collisions(value, substitute)
