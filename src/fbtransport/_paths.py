"""Slash-delimited path helpers."""

from __future__ import annotations

from collections.abc import Sequence
from urllib.parse import urlsplit

from fbtransport._codec import encode


def split_path(path: str | None) -> list[str]:
    """Split on ``/`` and drop empty segments."""
    if not path:
        return []
    return [part for part in path.split("/") if part]


def join_path(parts: Sequence[str]) -> str:
    return "/".join(parts)


def channel_parts(
    prefix_parts: Sequence[str],
    id: str | None = None,
    band: str | None = None,
) -> list[str]:
    """Build the segments for a record channel.

    ``prefix_parts`` is copied, never extended in place. ``id`` and ``band``
    are encoded one segment at a time.
    """
    parts = list(prefix_parts)
    if id:
        parts.append(encode(id))
    if band:
        parts.append(encode(band))
    return parts


def notification_parts(location: str) -> list[str]:
    """Segments of a notified node, given either a bare path or a full URL."""
    if "://" in location:
        location = urlsplit(location).path
    return split_path(location)
