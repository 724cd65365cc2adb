"""Shared CLI argument definitions for ml_seller_feed.

Both ``__main__.py`` and ``server.py`` accept the same credential, seller and
logging arguments.  Defaults come from the environment (see ``config.py``)
so a flag only needs to be passed to override it.
"""

from __future__ import annotations

import argparse
from dataclasses import dataclass, replace
import logging
import os

from .config import ENV_CLIENT_ID, ENV_CLIENT_SECRET, ENV_SELLER_ID, ENV_SITE_ID, FeedConfig

_ENV_LOG_LEVEL = "ML_FEED_LOG_LEVEL"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def add_common_arguments(parser: argparse.ArgumentParser) -> None:
    """Add the shared feed arguments to *parser*.

    Defaults are resolved from environment variables at call time, so tests
    can monkeypatch env before calling this to control behaviour.
    """
    parser.add_argument("--client-id", default=os.environ.get(ENV_CLIENT_ID), help="Marketplace app client id (or ML_CLIENT_ID)")
    parser.add_argument(
        "--client-secret", default=os.environ.get(ENV_CLIENT_SECRET), help="Marketplace app client secret (or ML_CLIENT_SECRET)",
    )
    parser.add_argument("--seller-id", default=os.environ.get(ENV_SELLER_ID), help="Skip seller discovery (or ML_SELLER_ID)")
    parser.add_argument("--site", default=os.environ.get(ENV_SITE_ID), help="Marketplace site id, e.g. MLB (or ML_SITE_ID)")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=os.environ.get(_ENV_LOG_LEVEL, "INFO").upper(),
        help="Logging level (default: INFO or ML_FEED_LOG_LEVEL)",
    )


@dataclass(frozen=True, slots=True)
class CommonArgs:
    """Typed view of the shared CLI arguments."""

    client_id:     str | None
    client_secret: str | None
    seller_id:     str | None
    site_id:       str | None
    log_level:     str

    @staticmethod
    def from_namespace(ns: argparse.Namespace) -> "CommonArgs":
        """Build a ``CommonArgs`` from a parsed ``argparse.Namespace``."""
        return CommonArgs(
            client_id=ns.client_id or None,
            client_secret=ns.client_secret or None,
            seller_id=ns.seller_id or None,
            site_id=(ns.site or "").strip().upper() or None,
            log_level=ns.log_level,
        )

    def apply_to(self, config: FeedConfig) -> FeedConfig:
        """Return *config* with every explicitly given argument applied."""
        return replace(
            config,
            client_id=self.client_id or config.client_id,
            client_secret=self.client_secret or config.client_secret,
            seller_id=self.seller_id or config.seller_id,
            site_id=self.site_id or config.site_id,
        )


def configure_logging(level: str) -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=_LOG_FORMAT)
