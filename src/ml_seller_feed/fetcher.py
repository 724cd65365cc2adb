"""Live product fetch with bounded retry and fallback.

``ProductFetcher.fetch`` runs the token -> seller -> search -> format
pipeline and always answers with a ``FetchResult``:

* live results are returned as ``FetchResult.live``;
* an empty search, or any ``MLFeedError`` along the way, yields
  ``FetchResult.degraded`` carrying the fallback catalog;
* an auth-class search failure (HTTP 401/403) clears the held token and
  re-runs the whole pipeline, at most ``RetryPolicy.max_attempts`` times.
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any

from .api_client import SearchQuery
from .constants import DEFAULT_CATEGORY, DEFAULT_SEARCH_LIMIT, DEFAULT_SEARCH_SORT, DEFAULT_SEARCH_STATUS, DEFAULT_SITE_ID
from .exceptions import MLFeedError, ResolutionError, UpstreamError
from .fallback import fallback_products
from .formatters import product_from_item
from .models import FetchResult, Product, Session
from .protocols import MarketplaceClient
from .seller import SellerResolver
from .token_manager import TokenManager

_log = logging.getLogger(__name__)

EMPTY_RESULT_REASON = "no active listings found"


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded retry for rejected bearer tokens.

    ``max_attempts`` counts the first attempt, so the default of 2 allows a
    single retry.
    """

    max_attempts: int = 2

    def should_retry(self, exc: Exception, attempt: int) -> bool:
        """Return ``True`` if *exc* on *attempt* warrants another attempt."""
        if attempt >= self.max_attempts:
            return False
        return isinstance(exc, UpstreamError) and exc.is_auth_failure


@dataclass(frozen=True, slots=True)
class SearchSettings:
    """Seller-independent parameters of the listing search."""

    site_id: str = DEFAULT_SITE_ID
    limit: int = DEFAULT_SEARCH_LIMIT
    sort: str = DEFAULT_SEARCH_SORT
    status: str = DEFAULT_SEARCH_STATUS
    category: str | None = DEFAULT_CATEGORY

    def query_for(self, seller_id: str) -> SearchQuery:
        return SearchQuery(
            site_id=self.site_id, seller_id=seller_id, limit=self.limit,
            sort=self.sort, status=self.status, category=self.category or None,
        )


class ProductFetcher:
    """Use-case facade: fetch the seller's listings as storefront products.

    Invariant: ``fetch`` never raises domain exceptions (``AuthError``,
    ``ResolutionError``, ``UpstreamError``); they are captured as a degraded
    ``FetchResult`` whose products are the fallback catalog.
    """

    def __init__(
        self,
        *,
        client: MarketplaceClient,
        tokens: TokenManager,
        resolver: SellerResolver,
        session: Session,
        search: SearchSettings | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self._client = client
        self._tokens = tokens
        self._resolver = resolver
        self._session = session
        self._search = search or SearchSettings()
        self._retry = retry_policy or RetryPolicy()

    def fetch(self) -> FetchResult:
        """Return live products, or the fallback catalog on failure / no results."""
        for attempt in range(1, max(self._retry.max_attempts, 1) + 1):
            try:
                products = self._fetch_live()
            except MLFeedError as exc:
                if self._retry.should_retry(exc, attempt):
                    _log.warning("Marketplace rejected the token (%s); renewing and retrying", exc)
                    self._session.clear_token()
                    continue
                return self._degraded(exc, attempt)
            if not products:
                _log.warning("No products found; serving fallback catalog")
                return FetchResult.degraded(fallback_products(), EMPTY_RESULT_REASON, attempts=attempt)
            return FetchResult.live(products, attempts=attempt)
        raise AssertionError("retry loop exited without a result")

    def _fetch_live(self) -> list[Product]:
        token = self._tokens.get_token()
        seller_id = self._seller_id()
        _log.info("Searching products of seller %s", seller_id)
        results = self._client.search(token, self._search.query_for(seller_id))
        _log.info("%d products found", len(results))
        return self._to_products(results)

    def _seller_id(self) -> str:
        if self._session.seller_id is None:
            self._resolver.resolve()
        if self._session.seller_id is None:
            raise ResolutionError("seller id is not configured; set ML_SELLER_ID")
        return self._session.seller_id

    @staticmethod
    def _to_products(results: list[dict[str, Any]]) -> list[Product]:
        products: list[Product] = []
        for position, item in enumerate(results, start=1):
            try:
                products.append(product_from_item(item, position))
            except (ValueError, ArithmeticError) as exc:
                _log.warning("Skipping malformed search result at position %d: %s", position, exc)
        return products

    @staticmethod
    def _degraded(exc: MLFeedError, attempt: int) -> FetchResult:
        _log.warning("Product fetch failed after %d attempt(s): %s; serving fallback catalog", attempt, exc)
        return FetchResult.degraded(fallback_products(), str(exc), error=str(exc), attempts=attempt)
