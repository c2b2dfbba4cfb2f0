#!/usr/bin/env python3
"""Run the pyhammer web application.

Usage
-----
::

    export HAMMER_PRIVILEGED_NAME="auctioneer"
    python scripts/serve.py --port 8080 --data-dir ./data

Options::

    --host HOST         Interface to bind (default: 127.0.0.1)
    --port PORT         Port to bind (default: 8080)
    --data-dir DIR      Persist state and vote locks under DIR
                        (default: in-memory, lost on exit)
    --verbose           Enable DEBUG logging
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Allow running from the repo root without installing the package.
_repo = Path(__file__).resolve().parent.parent
_src = _repo / "src"
if _src.is_dir():
    sys.path.insert(0, str(_src))

from aiohttp import web  # noqa: E402

from pyhammer import FileKeyValueStore, HammerConfig, HammerService, MemoryKeyValueStore  # noqa: E402
from pyhammer._storage import KeyValueStore  # noqa: E402
from pyhammer.web import create_app  # noqa: E402


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Serve the pyhammer vote/comment API")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8080)
    parser.add_argument("--data-dir", type=Path, default=None)
    parser.add_argument("--verbose", action="store_true")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    kv: KeyValueStore
    if args.data_dir is not None:
        kv = FileKeyValueStore(args.data_dir)
    else:
        logging.getLogger(__name__).warning("No --data-dir given; state is kept in memory only")
        kv = MemoryKeyValueStore()

    service = HammerService(kv, HammerConfig.from_env())
    web.run_app(create_app(service), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
