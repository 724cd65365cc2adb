"""Core domain models for ml_seller_feed.

``Product`` and ``FetchResult`` are immutable frozen dataclasses: once a feed
has been fetched and cached it is shared by every request and must not
change under a reader's feet.  ``Session`` is the one deliberately mutable
object; it is created empty by the composition root and handed to the
components that own its fields.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable
import json


@dataclass(frozen=True, slots=True)
class Credentials:
    """OAuth client credentials for the marketplace application."""

    client_id: str
    client_secret: str = field(repr=False)

    @property
    def is_complete(self) -> bool:
        return bool(self.client_id.strip() and self.client_secret.strip())


@dataclass(slots=True)
class Session:
    """Process-wide marketplace session state.

    ``access_token``/``expires_at`` are written only by ``TokenManager``
    (and cleared by the fetcher's retry policy).  ``user_id``/``seller_id``
    are written by ``SellerResolver``.  ``expires_at`` is a POSIX timestamp.
    """

    access_token: str | None = None
    expires_at: float | None = None
    user_id: str | None = None
    seller_id: str | None = None
    nickname: str | None = None

    def has_valid_token(self, now: float) -> bool:
        """Return ``True`` if a token is held and has not yet expired at *now*."""
        if not self.access_token or self.expires_at is None:
            return False
        return now < self.expires_at

    def clear_token(self) -> None:
        self.access_token = None
        self.expires_at = None

    def token_expires_iso(self) -> str | None:
        if self.expires_at is None:
            return None
        return datetime.fromtimestamp(self.expires_at, tz=timezone.utc).isoformat()


@dataclass(frozen=True, slots=True)
class SellerIdentity:
    """Outcome of one ``SellerResolver.resolve()`` call."""

    user_id: str
    seller_id: str | None
    nickname: str | None = None


@dataclass(frozen=True, slots=True)
class Product:
    """A single normalized listing, ready for the storefront.

    Prices are pre-formatted display strings.  ``position`` is the 1-based
    rank of the listing in the search response.

    Invariant: ``id`` and ``title`` are non-empty.
    """

    id: str
    title: str
    description: str
    image_url: str
    price: str
    permalink: str
    condition: str
    position: int
    old_price: str | None = None
    discount_label: str | None = None
    available_quantity: int = 0
    sold_quantity: int = 0
    free_shipping: bool = False
    accepts_payment_platform: bool = False
    category_label: str = "Produto"

    def __post_init__(self) -> None:
        if not self.id or not self.title or not self.title.strip():
            raise ValueError("Product.id and Product.title must be non-empty strings")

    def to_dict(self) -> dict[str, Any]:
        """Render the frontend wire shape (legacy camelCase keys preserved)."""
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "image": self.image_url,
            "price": self.price,
            "oldPrice": self.old_price,
            "discount": self.discount_label,
            "link": self.permalink,
            "condition": self.condition,
            "available_quantity": self.available_quantity,
            "sold_quantity": self.sold_quantity,
            "free_shipping": self.free_shipping,
            "accepts_mercadopago": self.accepts_payment_platform,
            "category": self.category_label,
            "position": self.position,
        }


@dataclass(frozen=True, slots=True)
class FetchResult:
    """The outcome of a single ``ProductFetcher.fetch()`` call.

    A result is either *live* (``degraded_reason is None``) or *degraded*:
    the products are the fallback catalog and ``degraded_reason`` says why.
    ``error`` is set only when the degradation was caused by a failure, not
    by an empty but otherwise healthy search.

    ``attempts`` is the number of fetch attempts the retry policy used.
    """

    products: tuple[Product, ...]
    fetched_at: datetime
    degraded_reason: str | None = None
    error: str | None = None
    attempts: int = 1

    @property
    def is_degraded(self) -> bool:
        return self.degraded_reason is not None

    @classmethod
    def live(cls, products: Iterable[Product], *, attempts: int = 1) -> "FetchResult":
        return cls(
            products=tuple(products),
            fetched_at=datetime.now(timezone.utc),
            attempts=attempts,
        )

    @classmethod
    def degraded(
        cls,
        products: Iterable[Product],
        reason: str,
        *,
        error: str | None = None,
        attempts: int = 1,
    ) -> "FetchResult":
        return cls(
            products=tuple(products),
            fetched_at=datetime.now(timezone.utc),
            degraded_reason=reason,
            error=error,
            attempts=attempts,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "fetched_at": self.fetched_at.isoformat(),
            "degraded": self.is_degraded,
            "degraded_reason": self.degraded_reason,
            "error": self.error,
            "attempts": self.attempts,
            "products": [p.to_dict() for p in self.products],
        }

    def to_pretty_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, sort_keys=True, ensure_ascii=False)
