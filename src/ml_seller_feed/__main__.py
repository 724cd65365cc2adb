from __future__ import annotations

import argparse
import sys

from .bootstrap import build_feed_service
from .cli import CommonArgs, add_common_arguments, configure_logging
from .config import FeedConfig, load_env_file


def _build_config(common: CommonArgs) -> FeedConfig:
    """Resolve config from .env, the environment and CLI overrides."""
    load_env_file()
    return common.apply_to(FeedConfig.from_env())


def main(argv: list[str] | None = None) -> int:
    """Fetch the seller feed once and print it as JSON; exit 2 when degraded."""
    parser = argparse.ArgumentParser(prog="ml_seller_feed", description="Fetch a Mercado Livre seller's product feed.")
    add_common_arguments(parser)
    args = parser.parse_args(argv)
    common = CommonArgs.from_namespace(args)
    configure_logging(common.log_level)
    try:
        config = _build_config(common)
    except ValueError as exc:
        sys.stderr.write(f"invalid configuration: {exc}\n")
        return 3
    service = build_feed_service(config)
    try:
        result = service.fetcher.fetch()
    finally:
        service.close()
    sys.stdout.write(result.to_pretty_json() + "\n")
    return 2 if result.is_degraded else 0


if __name__ == "__main__":
    raise SystemExit(main())
