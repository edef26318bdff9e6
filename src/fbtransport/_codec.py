"""Key encoding and value packing.

Firebase forbids ``/ $ # . [ ]`` in keys, so every key and path segment is
percent-encoded on the way out and percent-decoded on the way in. ``%`` is
escaped too, so keys that already look percent-encoded survive a round trip.
Only the top level of a value is packed; nested mapping keys are stored as
given.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote

_RESERVED_RE = re.compile(r"[%/$#.\]\[]")


def encode(segment: str) -> str:
    """Escape reserved characters as ``%`` plus two lowercase hex digits."""
    return _RESERVED_RE.sub(lambda m: f"%{ord(m.group(0)):02x}", segment)


def decode(segment: str) -> str:
    return unquote(segment)


def is_empty(value: Any) -> bool:
    """Whether *value* is dropped by :func:`compact`.

    ``False`` and ``0`` are real values and are kept.
    """
    if value is None:
        return True
    if isinstance(value, str):
        return value == ""
    if isinstance(value, (Mapping, list, tuple, set, frozenset)):
        return len(value) == 0
    return False


def compact(value: Mapping[str, Any] | None) -> dict[str, Any]:
    if not value:
        return {}
    return {key: item for key, item in value.items() if not is_empty(item)}


def pack_out(value: Mapping[str, Any] | None) -> dict[str, Any]:
    """Compact *value* and encode its keys for storage."""
    return {encode(str(key)): item for key, item in compact(value).items()}


def pack_in(value: Any) -> dict[str, Any]:
    """Decode the keys of a stored mapping.

    Missing data and non-mapping leaves read back as an empty mapping.
    """
    if not isinstance(value, Mapping):
        return {}
    return {decode(str(key)): item for key, item in value.items()}
