from __future__ import annotations

import threading
import time

from fastapi.testclient import TestClient
import httpx
import pytest

from ml_seller_feed.bootstrap import build_feed_service
from ml_seller_feed.config import FeedConfig
import ml_seller_feed.api as api

_SECRET = "super-secret-value"


def _client() -> TestClient:
    return TestClient(api.app)


@pytest.fixture
def service(marketplace, clock, monkeypatch: pytest.MonkeyPatch):
    cfg = FeedConfig(client_id="app-id", client_secret=_SECRET)
    svc = build_feed_service(cfg, transport=marketplace.transport(), clock=clock)
    monkeypatch.setattr(api, "_SERVICE", svc)
    yield svc
    svc.close()


def test_products_returns_feed_envelope(service) -> None:
    response = _client().get("/api/products")
    body = response.json()
    assert response.status_code == 200
    assert set(body.keys()) >= {"success", "count", "products", "timestamp", "source", "seller_id", "cache_info"}
    assert body["count"] == 3
    assert body["source"] == "api"
    assert body["seller_id"] == "184520391"
    assert body["cache_info"]["cached"] is False
    assert body["cache_info"]["ttl"] is not None
    assert "error" not in body


def test_products_second_call_is_served_from_cache(service, marketplace) -> None:
    first = _client().get("/api/products").json()
    second = _client().get("/api/products").json()
    assert second["source"] == "cache"
    assert second["cache_info"]["cached"] is True
    assert first["products"] == second["products"]
    assert marketplace.calls("/sites/MLB/search") == 1


def test_products_upstream_failure_still_returns_200(service, marketplace) -> None:
    marketplace.set("/sites/MLB/search", httpx.Response(500, text="down"))
    response = _client().get("/api/products")
    body = response.json()
    assert response.status_code == 200
    assert body["success"] is True
    assert [p["id"] for p in body["products"]] == ["fallback-1", "fallback-2", "fallback-3", "fallback-4"]
    assert body["cache_info"]["degraded"] is True
    assert "500" in body["error"]


def test_products_unexpected_error_serves_fallback(service, monkeypatch: pytest.MonkeyPatch) -> None:
    def _explode(_service):
        raise RuntimeError("cache exploded")

    monkeypatch.setattr(api, "_products_payload", _explode)
    response = _client().get("/api/products")
    body = response.json()
    assert response.status_code == 200
    assert body["source"] == "fallback"
    assert body["count"] == 4
    assert body["error"] == "cache exploded"


def test_health_reports_diagnostics_without_secrets(service) -> None:
    _client().get("/api/products")
    response = _client().get("/api/health")
    body = response.json()
    assert response.status_code == 200
    assert body["status"] == "online"
    ml = body["diagnostics"]["ml_config"]
    assert ml["client_secret"] == "configured"
    assert ml["has_token"] is True
    assert ml["user_id"] == "184520391"
    assert body["diagnostics"]["cache"]["stats"] == {"hits": 0, "misses": 1, "keys": 1}
    assert body["diagnostics"]["cache"]["keys"] == ["ml_products_v2"]
    assert _SECRET not in response.text


def test_health_before_first_fetch(service) -> None:
    ml = _client().get("/api/health").json()["diagnostics"]["ml_config"]
    assert ml["has_token"] is False
    assert ml["token_expires"] is None
    assert ml["user_id"] == "not discovered"


def test_config_is_masked(service) -> None:
    response = _client().get("/api/config")
    body = response.json()
    assert body["config"]["client_id"] == "configured"
    assert body["config"]["client_secret"] == "configured"
    assert body["config"]["token_status"] == "inactive"
    assert body["config"]["cache_ttl"] == "30 minutes"
    assert _SECRET not in response.text
    assert "app-id" not in response.text


def test_refresh_refetches_and_repopulates_cache(service, marketplace) -> None:
    _client().get("/api/products")
    response = _client().get("/api/refresh")
    assert response.status_code == 200
    assert response.json()["count"] == 3
    assert response.json()["source"] == "api"
    assert marketplace.calls("/sites/MLB/search") == 2
    assert _client().get("/api/products").json()["source"] == "cache"


def test_refresh_with_failing_upstream_returns_500(service, marketplace) -> None:
    marketplace.set("/oauth/token", httpx.Response(401, json={"error": "invalid_client"}))
    response = _client().get("/api/refresh")
    assert response.status_code == 500
    assert response.json()["success"] is False
    assert "token request rejected" in response.json()["error"]


def test_refresh_unexpected_error_returns_500(service, monkeypatch: pytest.MonkeyPatch) -> None:
    def _explode():
        raise RuntimeError("boom")

    monkeypatch.setattr(service.cache, "refresh", _explode)
    response = _client().get("/api/refresh")
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "boom"}


def test_refresh_with_no_listings_is_not_an_error(service, marketplace) -> None:
    marketplace.set("/sites/MLB/search", httpx.Response(200, json={"results": []}))
    response = _client().get("/api/refresh")
    assert response.status_code == 200
    assert response.json()["source"] == "fallback"
    assert response.json()["count"] == 4


def test_concurrent_first_requests_build_one_service(monkeypatch: pytest.MonkeyPatch) -> None:
    built: list[object] = []
    gate = threading.Barrier(4)

    class _Service:
        def close(self) -> None:
            pass

    def _build(_config):
        time.sleep(0.05)
        svc = _Service()
        built.append(svc)
        return svc

    def _worker(results: list[object]) -> None:
        gate.wait()
        results.append(api._service())

    monkeypatch.setattr(api, "_SERVICE", None)
    monkeypatch.setattr(api, "build_feed_service", _build)
    results: list[object] = []
    threads = [threading.Thread(target=_worker, args=(results,)) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(built) == 1
    assert all(r is built[0] for r in results)
