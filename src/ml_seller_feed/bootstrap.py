"""Composition root for ml_seller_feed.

``build_feed_service`` is the one place where the session, the marketplace
client and the feed components are constructed and wired together.  Nothing
else in the package creates a ``Session``.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
import time

import httpx

from .api_client import APIConfig, MercadoLivreAPI
from .cache import ResponseCache
from .config import FeedConfig
from .fetcher import ProductFetcher, RetryPolicy, SearchSettings
from .models import Session
from .protocols import Clock, MarketplaceClient
from .seller import SellerResolver
from .token_manager import TokenManager

_log = logging.getLogger(__name__)

_MISSING_CREDENTIALS_MSG = (
    "ml_seller_feed: ML_CLIENT_ID / ML_CLIENT_SECRET are missing. "
    "Every fetch will serve the fallback catalog until they are set."
)


@dataclass(slots=True)
class FeedService:
    """Everything one running feed needs, owned by the composition root."""

    config: FeedConfig
    session: Session
    client: MarketplaceClient
    tokens: TokenManager
    resolver: SellerResolver
    fetcher: ProductFetcher
    cache: ResponseCache
    started_at: float

    def close(self) -> None:
        self.client.close()


def build_client(config: FeedConfig, transport: httpx.BaseTransport | None = None) -> MercadoLivreAPI:
    api_config = APIConfig(base_url=config.api_base_url, timeout_seconds=config.timeout_seconds)
    return MercadoLivreAPI(config=api_config, transport=transport)


def build_feed_service(
    config: FeedConfig,
    *,
    client: MarketplaceClient | None = None,
    transport: httpx.BaseTransport | None = None,
    clock: Clock = time.time,
) -> FeedService:
    """Wire a ``FeedService`` from *config*.

    Pass *client* to substitute the marketplace client entirely, or
    *transport* to keep the real client over a fake HTTP transport.
    """
    if not config.credentials.is_complete:
        _log.warning(_MISSING_CREDENTIALS_MSG)
    session = Session(seller_id=config.seller_id)
    api = client or build_client(config, transport)
    tokens = TokenManager(client=api, credentials=config.credentials, session=session, clock=clock)
    resolver = SellerResolver(client=api, tokens=tokens, session=session)
    search = SearchSettings(site_id=config.site_id, limit=config.search_limit, category=config.category)
    fetcher = ProductFetcher(
        client=api, tokens=tokens, resolver=resolver, session=session,
        search=search, retry_policy=RetryPolicy(max_attempts=2),
    )
    cache = ResponseCache(fetcher, ttl_seconds=config.cache_ttl_seconds, clock=clock)
    return FeedService(
        config=config, session=session, client=api, tokens=tokens,
        resolver=resolver, fetcher=fetcher, cache=cache, started_at=clock(),
    )
