from __future__ import annotations

from fastapi.testclient import TestClient
import httpx
import pytest

from ml_seller_feed.bootstrap import build_feed_service
from ml_seller_feed.config import FeedConfig
import ml_seller_feed.api as api


def _client() -> TestClient:
    return TestClient(api.app)


@pytest.fixture
def service(marketplace, clock, monkeypatch: pytest.MonkeyPatch):
    svc = build_feed_service(FeedConfig(client_id="id", client_secret="secret"), transport=marketplace.transport(), clock=clock)
    monkeypatch.setattr(api, "_SERVICE", svc)
    yield svc
    svc.close()


def test_products_refresh_products_round_trip(service, marketplace, search_payload) -> None:
    first = _client().get("/api/products").json()
    marketplace.set("/sites/MLB/search", httpx.Response(200, json={"results": search_payload["results"][:1]}))
    assert _client().get("/api/products").json()["count"] == first["count"]
    assert _client().get("/api/refresh").json()["count"] == 1
    after = _client().get("/api/products").json()
    assert after["source"] == "cache"
    assert after["count"] == 1


def test_health_tracks_cache_activity(service) -> None:
    for _ in range(3):
        _client().get("/api/products")
    stats = _client().get("/api/health").json()["diagnostics"]["cache"]["stats"]
    assert stats == {"hits": 2, "misses": 1, "keys": 1}


def test_cache_expiry_triggers_new_upstream_search(service, marketplace, clock) -> None:
    _client().get("/api/products")
    clock.advance(1800)
    body = _client().get("/api/products").json()
    assert body["source"] == "api"
    assert marketplace.calls("/sites/MLB/search") == 2


def test_config_reflects_discovered_identity(service) -> None:
    before = _client().get("/api/config").json()["config"]
    _client().get("/api/products")
    after = _client().get("/api/config").json()["config"]
    assert before["seller_id"] == "not configured"
    assert after["seller_id"] == "184520391"
    assert after["token_status"] == "active"
