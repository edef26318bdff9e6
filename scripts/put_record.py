#!/usr/bin/env python3
"""Write, read back, or delete one record.

Examples::

    python scripts/put_record.py MyThing istate '{"on": true}'
    python scripts/put_record.py MyThing istate
    python scripts/put_record.py MyThing --delete
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from fbtransport import PathTransport, TransportConfig  # noqa: E402


async def run(args: argparse.Namespace) -> int:
    config = TransportConfig.from_env()
    async with PathTransport(config, host=args.host, prefix=args.prefix, credentials=args.credentials) as transport:
        if args.delete:
            await transport.remove(args.id, args.band)
            return 0
        if args.value is not None:
            value = json.loads(args.value)
            if not isinstance(value, dict):
                print("value must be a JSON object", file=sys.stderr)
                return 2
            await transport.update(args.id, args.band, value)
        record = await transport.get(args.id, args.band)
        print(json.dumps(record.model_dump(), indent=2, sort_keys=True))
    return 0


def main() -> None:
    parser = argparse.ArgumentParser(description="Write or read one record in a Realtime Database.")
    parser.add_argument("id", help="Thing id")
    parser.add_argument("band", nargs="?", help="Band (required unless --delete)")
    parser.add_argument("value", nargs="?", help="JSON object to store; omitted to read")
    parser.add_argument("--host", help="Database URL (default: FBTRANSPORT_HOST)")
    parser.add_argument("--prefix", help="Path prefix (default: FBTRANSPORT_PREFIX or /)")
    parser.add_argument("--credentials", help="Service account JSON file")
    parser.add_argument("--delete", action="store_true", help="Delete the band, or the whole thing without one")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if not args.delete and not args.band:
        parser.error("band is required unless --delete is given")

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
