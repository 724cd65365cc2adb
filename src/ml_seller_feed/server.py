"""Run the feed HTTP API under uvicorn.

Registered as ``ml-seller-feed-server`` in ``pyproject.toml``.  CLI
arguments override the environment; the resulting service is installed into
``api`` before the server starts so every request shares it.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys

import uvicorn

from . import api
from .bootstrap import build_feed_service
from .cli import CommonArgs, add_common_arguments, configure_logging
from .config import FeedConfig

_log = logging.getLogger(__name__)


def _make_server_parser() -> argparse.ArgumentParser:
    """Build and return the server CLI argument parser."""
    p = argparse.ArgumentParser(prog="ml_seller_feed_server", description="Serve the seller product feed over HTTP.")
    add_common_arguments(p)
    p.add_argument("--host", default=os.environ.get("HOST", "0.0.0.0"))
    p.add_argument("--port", type=int, default=int(os.environ.get("PORT", "3000")))
    return p


def main(argv: list[str] | None = None) -> int:
    """Parse CLI arguments, install the service, and serve until stopped."""
    args = _make_server_parser().parse_args(argv)
    common = CommonArgs.from_namespace(args)
    configure_logging(common.log_level)
    try:
        config = common.apply_to(FeedConfig.from_env())
    except ValueError as exc:
        sys.stderr.write(f"invalid configuration: {exc}\n")
        return 3
    api._SERVICE = build_feed_service(config)
    _log.info("Serving %s on http://%s:%d", "/api/products", args.host, args.port)
    uvicorn.run(api.app, host=args.host, port=args.port, log_level=common.log_level.lower())
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
