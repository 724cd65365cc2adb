"""Environment-driven configuration for ml_seller_feed.

Every setting is read from an environment variable, optionally seeded from a
``.env`` file in the working directory.  Variables already present in the
environment always win over the file.
"""

from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path
from typing import Callable, Mapping, TypeVar

from .constants import (
    DEFAULT_API_BASE_URL, DEFAULT_CACHE_TTL_SECONDS, DEFAULT_CATEGORY,
    DEFAULT_SEARCH_LIMIT, DEFAULT_SITE_ID, DEFAULT_TIMEOUT_SECONDS,
)
from .models import Credentials

# Environment variable names, declared once
ENV_CLIENT_ID     = "ML_CLIENT_ID"
ENV_CLIENT_SECRET = "ML_CLIENT_SECRET"
ENV_SELLER_ID     = "ML_SELLER_ID"
ENV_SITE_ID       = "ML_SITE_ID"
ENV_CATEGORY      = "ML_CATEGORY"
ENV_SEARCH_LIMIT  = "ML_SEARCH_LIMIT"
ENV_CACHE_TTL     = "ML_CACHE_TTL_SECONDS"
ENV_API_BASE_URL  = "ML_API_BASE_URL"
ENV_TIMEOUT       = "ML_TIMEOUT_SECONDS"
ENV_CORS_ORIGINS  = "ML_FEED_CORS_ORIGINS"
ENV_APP_ENV       = "APP_ENV"

_T = TypeVar("_T")


def load_env_file(path: str = ".env") -> None:
    """Copy ``KEY=value`` lines from *path* into ``os.environ`` if unset."""
    env_path = Path(path)
    if not env_path.exists() or not env_path.is_file():
        return
    for raw_line in env_path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip()
        if len(cleaned) >= 2 and cleaned[0] == cleaned[-1] and cleaned[0] in {"\"", "'"}:
            cleaned = cleaned[1:-1]
        os.environ[key] = cleaned


def _parse_env_var(env: Mapping[str, str], key: str, default: _T, cast: Callable[[str], _T]) -> _T:
    """Return env var *key* cast with *cast*; raise ValueError on cast failure."""
    raw = env.get(key, str(default))
    try:
        return cast(raw)
    except ValueError as exc:
        raise ValueError(f"Invalid {key}: {raw}") from exc


def _optional(env: Mapping[str, str], key: str) -> str | None:
    value = (env.get(key) or "").strip()
    return value or None


def cors_origins_from_env(env: Mapping[str, str] | None = None) -> tuple[str, ...]:
    """Return the allowed CORS origins; independent of the numeric settings."""
    e = os.environ if env is None else env
    return tuple(o.strip() for o in e.get(ENV_CORS_ORIGINS, "*").split(",") if o.strip())


@dataclass(frozen=True, slots=True)
class FeedConfig:
    """Complete configuration of one feed service.

    ``category`` is ``None`` when the search must not be category-scoped;
    ``seller_id`` is ``None`` when the seller must be discovered from the
    token's account.
    """

    client_id: str = ""
    client_secret: str = ""
    seller_id: str | None = None
    site_id: str = DEFAULT_SITE_ID
    category: str | None = DEFAULT_CATEGORY
    search_limit: int = DEFAULT_SEARCH_LIMIT
    cache_ttl_seconds: int = DEFAULT_CACHE_TTL_SECONDS
    api_base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    cors_origins: tuple[str, ...] = ("*",)
    environment: str = "development"

    @property
    def credentials(self) -> Credentials:
        return Credentials(client_id=self.client_id, client_secret=self.client_secret)

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "FeedConfig":
        """Build a FeedConfig from env vars; raise ValueError on invalid input."""
        e = os.environ if env is None else env
        return cls(
            client_id=(e.get(ENV_CLIENT_ID) or "").strip(),
            client_secret=(e.get(ENV_CLIENT_SECRET) or "").strip(),
            seller_id=_optional(e, ENV_SELLER_ID),
            site_id=(e.get(ENV_SITE_ID) or DEFAULT_SITE_ID).strip().upper(),
            category=e.get(ENV_CATEGORY, DEFAULT_CATEGORY).strip() or None,
            search_limit=max(_parse_env_var(e, ENV_SEARCH_LIMIT, DEFAULT_SEARCH_LIMIT, int), 1),
            cache_ttl_seconds=max(_parse_env_var(e, ENV_CACHE_TTL, DEFAULT_CACHE_TTL_SECONDS, int), 1),
            api_base_url=(e.get(ENV_API_BASE_URL) or DEFAULT_API_BASE_URL).strip(),
            timeout_seconds=max(_parse_env_var(e, ENV_TIMEOUT, DEFAULT_TIMEOUT_SECONDS, float), 0.1),
            cors_origins=cors_origins_from_env(e),
            environment=(e.get(ENV_APP_ENV) or "development").strip(),
        )
