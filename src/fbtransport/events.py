"""Classification of ``child_changed`` notifications.

A notification is classified by how far below the configured prefix the
notified node sits:

- ``diff > 2``: something nested inside a band changed; report the band
  with no value.
- ``diff == 2``: a band changed; report it with its decoded value.
- ``diff == 1``: a whole thing changed; report every band in it, each
  band value exactly as stored.
- ``diff <= 0``: at or above the prefix; too broad to report.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from enum import Enum
from typing import Any

from fbtransport._codec import decode, pack_in
from fbtransport.models import Record

_logger = logging.getLogger(__name__)


class ChangeDepth(Enum):
    IGNORED = "ignored"
    THING = "thing"
    BAND = "band"
    NESTED = "nested"


def change_depth(prefix_parts: Sequence[str], notified_parts: Sequence[str]) -> ChangeDepth:
    diff = len(notified_parts) - len(prefix_parts)
    if diff > 2:
        return ChangeDepth.NESTED
    if diff == 2:
        return ChangeDepth.BAND
    if diff == 1:
        return ChangeDepth.THING
    return ChangeDepth.IGNORED


def records_for_change(
    prefix_parts: Sequence[str],
    notified_parts: Sequence[str],
    value: Any,
) -> list[Record]:
    """Translate one change notification into the records it affects."""
    depth = change_depth(prefix_parts, notified_parts)
    if depth is ChangeDepth.IGNORED:
        _logger.debug("Ignoring change at %s", "/".join(notified_parts) or "/")
        return []

    base = len(prefix_parts)
    thing_id = decode(notified_parts[base])

    if depth is ChangeDepth.THING:
        records: list[Record] = []
        for band, band_value in pack_in(value).items():
            if not band:
                continue
            records.append(Record(id=thing_id, band=band, value=band_value))
        return records

    band = decode(notified_parts[base + 1])
    if depth is ChangeDepth.NESTED:
        return [Record(id=thing_id, band=band, value=None)]
    return [Record(id=thing_id, band=band, value=pack_in(value))]
