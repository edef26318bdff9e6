#!/usr/bin/env python3
"""Print every record change seen under a prefix.

Connection settings come from ``FBTRANSPORT_*`` environment variables,
overridable on the command line::

    FBTRANSPORT_HOST=https://my-db.firebaseio.com python scripts/watch_updates.py --prefix things
    python scripts/watch_updates.py --id MyThingID --band meta
"""

from __future__ import annotations

import argparse
import asyncio
import contextlib
import json
import logging
import signal
import sys
from pathlib import Path
from typing import Any

# Allow running from repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from fbtransport import PathTransport, Scope, TransportConfig  # noqa: E402


def _print_change(id: str, band: str, value: Any) -> None:
    shown = "<changed below band>" if value is None else json.dumps(value, sort_keys=True, default=str)
    print(f"+ {id}/{band} {shown}", flush=True)


async def run(args: argparse.Namespace) -> None:
    config = TransportConfig.from_env()
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)

    async with PathTransport(config, host=args.host, prefix=args.prefix, credentials=args.credentials) as transport:
        if args.list:
            await transport.list(lambda ids: print(f"= {ids[0]}", flush=True))
        await transport.updated(Scope(id=args.id, band=args.band), _print_change)
        await stop.wait()


def main() -> None:
    parser = argparse.ArgumentParser(description="Watch record changes in a Realtime Database.")
    parser.add_argument("--host", help="Database URL (default: FBTRANSPORT_HOST)")
    parser.add_argument("--prefix", help="Path prefix (default: FBTRANSPORT_PREFIX or /)")
    parser.add_argument("--credentials", help="Service account JSON file")
    parser.add_argument("--id", help="Only watch this thing")
    parser.add_argument("--band", help="Only watch this band (requires --id)")
    parser.add_argument("--list", action="store_true", help="Also print every known thing id")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    else:
        logging.basicConfig(level=logging.WARNING)

    asyncio.run(run(args))


if __name__ == "__main__":
    main()
