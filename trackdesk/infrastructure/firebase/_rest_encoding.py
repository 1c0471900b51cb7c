"""Convert Python values to Realtime Database JSON and apply streamed events."""

import base64
from datetime import date, datetime
from enum import Enum
from typing import Any

from trackdesk.core.constants import FORBIDDEN_KEY_CHARS, PATH_SEP
from trackdesk.domain.exceptions import ValidationException
from trackdesk.shared.utils.datetime import ensure_utc


def validate_key(key: Any) -> str:
    """Return key as str, rejecting keys the store does not accept."""
    key = str(key)
    if not key:
        raise ValidationException("Store keys must not be empty", field=key)
    bad = sorted({ch for ch in key if ch in FORBIDDEN_KEY_CHARS})
    if bad:
        raise ValidationException(
            f"Store key {key!r} contains forbidden characters {''.join(bad)!r}; sanitize it first",
            field=key,
        )
    return key


def to_store_value(v: Any) -> Any:
    """Normalise a value for writing: JSON types only.

    None members and empty objects or arrays are dropped, the way the store
    never holds them. A value that normalises to nothing returns None, which
    writers treat as a delete.
    """
    if v is None or isinstance(v, (bool, int, float, str)):
        return v.value if isinstance(v, Enum) else v
    if isinstance(v, Enum):
        return to_store_value(v.value)
    if isinstance(v, datetime):
        return ensure_utc(v).isoformat().replace("+00:00", "Z")
    if isinstance(v, date):
        return v.isoformat()
    if isinstance(v, bytes):
        return base64.standard_b64encode(v).decode("ascii")
    if isinstance(v, (list, tuple)):
        items = [to_store_value(x) for x in v]
        return items if any(x is not None for x in items) else None
    if isinstance(v, dict):
        members = {}
        for k, x in v.items():
            x = to_store_value(x)
            if x is not None:
                members[validate_key(k)] = x
        return members or None
    raise TypeError(f"Unsupported store value type: {type(v)}")


def split_path(path: str) -> list[str]:
    """Split a '/'-separated store path into segments ('/' is the root)."""
    return [segment for segment in path.split(PATH_SEP) if segment]


def _exists(tree: Any, segments: list[str]) -> bool:
    node = tree
    for segment in segments:
        if isinstance(node, dict):
            node = node.get(segment)
        elif isinstance(node, list) and segment.isdigit() and int(segment) < len(node):
            node = node[int(segment)]
        else:
            return False
    return node is not None


def _as_dict(node: Any) -> dict:
    if isinstance(node, dict):
        return node
    if isinstance(node, list):
        return {str(i): child for i, child in enumerate(node) if child is not None}
    return {}


def apply_put(tree: Any, path: str, data: Any) -> Any:
    """Set data at path (relative to tree) and return the new tree.

    None deletes the node; parents left empty are removed as well, the way
    the store never holds empty objects. Deleting a node that does not exist
    (including a child of a scalar) leaves the tree unchanged.
    """
    segments = split_path(path)
    if not segments:
        return data
    if data is None and not _exists(tree, segments):
        return tree
    root = _as_dict(tree)
    parents = [root]
    node = root
    for segment in segments[:-1]:
        child = _as_dict(node.get(segment))
        node[segment] = child
        node = child
        parents.append(node)
    if data is None:
        node.pop(segments[-1], None)
        for depth in range(len(segments) - 1, 0, -1):
            if parents[depth]:
                break
            parents[depth - 1].pop(segments[depth - 1], None)
    else:
        node[segments[-1]] = data
    return root or None


def apply_patch(tree: Any, path: str, data: dict[str, Any]) -> Any:
    """Merge each child of data under path (a 'patch' event)."""
    prefix = PATH_SEP.join(split_path(path))
    for key, value in (data or {}).items():
        tree = apply_put(tree, f"{prefix}{PATH_SEP}{key}" if prefix else key, value)
    return tree
