"""Presentation formatters for ml_seller_feed outputs.

The module-level functions are pure: they turn raw marketplace fields into
storefront display values and never touch the network.  ``FeedFormatter``
renders the ``/api/products`` JSON envelope.
"""

from __future__ import annotations

from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any
from urllib.parse import quote

from .constants import DEFAULT_DESCRIPTION_LENGTH
from .models import Product

MISSING_DESCRIPTION = "Descrição não disponível"
PLACEHOLDER_IMAGE_URL = "https://via.placeholder.com/300x300/2a2a2a/4a90e2?text={text}"
_PLACEHOLDER_TITLE_LENGTH = 20
# Same unreserved set as JavaScript's encodeURIComponent
_URI_COMPONENT_SAFE = "-_.!~*'()"


def truncate(text: str | None, max_len: int = DEFAULT_DESCRIPTION_LENGTH) -> str:
    """Return *text* cut to *max_len* characters plus ``"..."`` when longer."""
    if not text:
        return MISSING_DESCRIPTION
    if len(text) <= max_len:
        return text
    return text[:max_len] + "..."


def _to_decimal(amount: Any) -> Decimal | None:
    if amount is None or isinstance(amount, bool):
        return None
    try:
        value = Decimal(str(amount))
    except InvalidOperation:
        return None
    return value if value.is_finite() else None


def format_price(amount: Any) -> str:
    """Render *amount* as Brazilian Real, e.g. ``89.9`` -> ``"R$ 89,90"``."""
    value = _to_decimal(amount)
    if not value:
        return "R$ 0,00"
    rounded = value.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    us_style = f"{rounded:,.2f}"
    return "R$ " + us_style.replace(",", "_").replace(".", ",").replace("_", ".")


def discount_label(current: Any, original: Any) -> str | None:
    """Return ``"<N>% OFF"`` for a price drop from *original* to *current*."""
    now = _to_decimal(current) or Decimal(0)
    before = _to_decimal(original)
    if not before or before <= now:
        return None
    percent = (before - now) / before * 100
    return f"{percent.quantize(Decimal(1), rounding=ROUND_HALF_UP)}% OFF"


def _first_picture_url(item: dict[str, Any]) -> str | None:
    pictures = item.get("pictures")
    if not isinstance(pictures, list) or not pictures:
        return None
    first = pictures[0]
    if not isinstance(first, dict):
        return None
    return first.get("url") or None


def select_image(item: dict[str, Any]) -> str:
    """Pick the best image URL for a raw search result.

    Preference order: the first entry of ``pictures``; the ``thumbnail``
    upgraded to the full-size variant over HTTPS; a placeholder carrying the
    start of the title.
    """
    picture = _first_picture_url(item)
    if picture:
        return picture
    thumbnail = item.get("thumbnail")
    if thumbnail:
        return str(thumbnail).replace("I.jpg", "F.jpg").replace("http://", "https://")
    title = str(item.get("title") or "")[:_PLACEHOLDER_TITLE_LENGTH]
    return PLACEHOLDER_IMAGE_URL.format(text=quote(title, safe=_URI_COMPONENT_SAFE))


def condition_label(raw: Any) -> str:
    return "Novo" if raw == "new" else "Usado"


def category_label(category_id: Any) -> str:
    return "Tecnologia" if category_id else "Produto"


def _as_int(raw: Any) -> int:
    try:
        return int(raw or 0)
    except (TypeError, ValueError, OverflowError):
        return 0


def product_from_item(item: dict[str, Any], position: int) -> Product:
    """Build a ``Product`` from one raw ``/sites/{site}/search`` result."""
    shipping = item.get("shipping") if isinstance(item.get("shipping"), dict) else {}
    original = item.get("original_price")
    title = str(item.get("title") or "")
    return Product(
        id=str(item.get("id") or ""),
        title=title,
        description=truncate(title),
        image_url=select_image(item),
        price=format_price(item.get("price")),
        old_price=format_price(original) if original else None,
        discount_label=discount_label(item.get("price"), original),
        permalink=str(item.get("permalink") or ""),
        condition=condition_label(item.get("condition")),
        available_quantity=_as_int(item.get("available_quantity")),
        sold_quantity=_as_int(item.get("sold_quantity")),
        free_shipping=bool(shipping.get("free_shipping", False)),
        accepts_payment_platform=bool(item.get("accepts_mercadopago", False)),
        category_label=category_label(item.get("category_id")),
        position=position,
    )


class FeedFormatter:
    """Build the storefront ``/api/products`` envelope."""

    def format(
        self,
        products: tuple[Product, ...] | list[Product],
        *,
        generated_at: datetime,
        source: str,
        seller_id: str | None,
        cache_expires_at: datetime | None = None,
        degraded: bool = False,
    ) -> dict[str, Any]:
        return {
            "success": True,
            "count": len(products),
            "products": [product.to_dict() for product in products],
            "timestamp": generated_at.isoformat(),
            "source": source,
            "seller_id": seller_id,
            "cache_info": self._cache_info(source, cache_expires_at, degraded),
        }

    @staticmethod
    def _cache_info(source: str, expires_at: datetime | None, degraded: bool) -> dict[str, Any]:
        return {
            "cached": source == "cache",
            "ttl": expires_at.isoformat() if expires_at else None,
            "degraded": degraded,
        }
