from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import os
import platform
import threading
import time
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .bootstrap import FeedService, build_feed_service
from .config import FeedConfig, cors_origins_from_env, load_env_file
from .constants import SERVICE_NAME, SERVICE_VERSION
from .fallback import fallback_products
from .formatters import FeedFormatter

_log = logging.getLogger(__name__)

load_env_file()

_SERVICE: FeedService | None = None
_SERVICE_LOCK = threading.Lock()

_CONFIGURED = "configured"
_NOT_CONFIGURED = "not configured"


def _service() -> FeedService:
    """Return the process-wide feed service, building it on first use."""
    global _SERVICE
    if _SERVICE is None:
        with _SERVICE_LOCK:
            if _SERVICE is None:
                _SERVICE = build_feed_service(FeedConfig.from_env())
    return _SERVICE


@asynccontextmanager
async def _lifespan(_app: FastAPI):
    yield
    if _SERVICE is not None:
        _SERVICE.close()


app = FastAPI(title="ml_seller_feed API", version=SERVICE_VERSION, lifespan=_lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(cors_origins_from_env()) or ["*"],
    allow_methods=["GET"],
    allow_headers=["*"],
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _fallback_payload(exc: Exception) -> dict[str, Any]:
    products = fallback_products()
    return {
        "success": True,
        "count": len(products),
        "products": [p.to_dict() for p in products],
        "timestamp": _now().isoformat(),
        "source": "fallback",
        "message": "Serving fallback data because the marketplace API failed",
        "error": str(exc),
    }


def _products_payload(service: FeedService) -> dict[str, Any]:
    result, source = service.cache.get_or_fetch()
    body = FeedFormatter().format(
        result.products,
        generated_at=_now(),
        source=source,
        seller_id=service.session.seller_id,
        cache_expires_at=service.cache.expires_at(),
        degraded=result.is_degraded,
    )
    if result.error is not None:
        body["error"] = result.error
    return body


def _status(value: str | None) -> str:
    return _CONFIGURED if value else _NOT_CONFIGURED


def _ml_diagnostics(service: FeedService) -> dict[str, Any]:
    session = service.session
    return {
        "client_id": _status(service.config.client_id),
        "client_secret": _status(service.config.client_secret),
        "seller_id": session.seller_id or _NOT_CONFIGURED,
        "user_id": session.user_id or "not discovered",
        "has_token": bool(session.access_token),
        "token_expires": session.token_expires_iso(),
    }


def _system_diagnostics(service: FeedService) -> dict[str, Any]:
    return {
        "python_version": platform.python_version(),
        "platform": platform.platform(),
        "pid": os.getpid(),
        "uptime_seconds": round(time.time() - service.started_at, 3),
    }


@app.get("/api/products")
def products() -> dict[str, Any]:
    try:
        return _products_payload(_service())
    except Exception as exc:
        _log.exception("Unexpected failure in /api/products")
        return _fallback_payload(exc)


@app.get("/api/health")
def health() -> dict[str, Any]:
    service = _service()
    return {
        "success": True,
        "service": SERVICE_NAME,
        "status": "online",
        "timestamp": _now().isoformat(),
        "environment": service.config.environment,
        "version": SERVICE_VERSION,
        "diagnostics": {
            "ml_config": _ml_diagnostics(service),
            "cache": {"stats": service.cache.stats().to_dict(), "keys": service.cache.keys()},
            "system": _system_diagnostics(service),
        },
        "endpoints": {
            "products": "/api/products",
            "health": "/api/health",
            "config": "/api/config",
            "refresh": "/api/refresh",
        },
    }


@app.get("/api/config")
def config() -> dict[str, Any]:
    service = _service()
    session = service.session
    return {
        "success": True,
        "config": {
            "client_id": _status(service.config.client_id),
            "client_secret": _status(service.config.client_secret),
            "seller_id": session.seller_id or _NOT_CONFIGURED,
            "user_id": session.user_id or "not discovered",
            "token_status": "active" if session.access_token else "inactive",
            "cache_enabled": True,
            "cache_ttl": f"{int(service.cache.ttl_seconds // 60)} minutes",
        },
        "instructions": {
            "seller_id": "Set ML_SELLER_ID in the .env file to skip seller discovery",
            "test_api": "GET /api/products to test the marketplace connection",
            "health_check": "GET /api/health for full diagnostics",
        },
    }


@app.get("/api/refresh", response_model=None)
def refresh() -> dict[str, Any] | JSONResponse:
    try:
        result = _service().cache.refresh()
    except Exception as exc:
        _log.exception("Cache refresh failed")
        return JSONResponse(status_code=500, content={"success": False, "error": str(exc)})
    if result.error is not None:
        return JSONResponse(status_code=500, content={"success": False, "error": result.error})
    return {
        "success": True,
        "message": "Cache refreshed",
        "count": len(result.products),
        "timestamp": _now().isoformat(),
        "source": "fallback" if result.is_degraded else "api",
    }
