from __future__ import annotations

import argparse

import pytest

from ml_seller_feed.cli import CommonArgs, add_common_arguments
from ml_seller_feed.config import FeedConfig


def _parse(argv: list[str]) -> CommonArgs:
    parser = argparse.ArgumentParser()
    add_common_arguments(parser)
    return CommonArgs.from_namespace(parser.parse_args(argv))


def test_defaults_come_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ML_CLIENT_ID", "env-id")
    monkeypatch.setenv("ML_SELLER_ID", "env-seller")
    monkeypatch.setenv("ML_FEED_LOG_LEVEL", "warning")
    args = _parse([])
    assert args.client_id == "env-id"
    assert args.seller_id == "env-seller"
    assert args.log_level == "WARNING"


def test_flags_override_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ML_CLIENT_ID", "env-id")
    args = _parse(["--client-id", "flag-id", "--site", "mla"])
    assert args.client_id == "flag-id"
    assert args.site_id == "MLA"


def test_blank_values_become_none(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("ML_SELLER_ID", raising=False)
    monkeypatch.delenv("ML_SITE_ID", raising=False)
    args = _parse(["--seller-id", ""])
    assert args.seller_id is None
    assert args.site_id is None


def test_apply_to_only_overrides_given_values() -> None:
    base = FeedConfig(client_id="cfg-id", client_secret="cfg-secret", site_id="MLB")
    args = CommonArgs(client_id=None, client_secret="flag-secret", seller_id="9", site_id=None, log_level="INFO")
    merged = args.apply_to(base)
    assert merged.client_id == "cfg-id"
    assert merged.client_secret == "flag-secret"
    assert merged.seller_id == "9"
    assert merged.site_id == "MLB"


def test_invalid_log_level_is_rejected() -> None:
    with pytest.raises(SystemExit):
        _parse(["--log-level", "LOUD"])
