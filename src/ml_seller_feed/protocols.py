from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .api_client import SearchQuery
    from .models import Credentials, FetchResult

# Wall-clock source, POSIX seconds.  Injected so tests can move time.
Clock = Callable[[], float]


@runtime_checkable
class MarketplaceClient(Protocol):
    """Abstraction for the marketplace endpoints the feed depends on."""

    def request_token(self, credentials: Credentials) -> dict[str, Any]:
        ...

    def get_current_user(self, token: str) -> dict[str, Any]:
        ...

    def get_user(self, token: str, user_id: str) -> dict[str, Any]:
        ...

    def search(self, token: str, query: SearchQuery) -> list[dict[str, Any]]:
        ...

    def close(self) -> None:
        ...


@runtime_checkable
class FeedSource(Protocol):
    """Anything that can produce a ``FetchResult``; wrapped by ``ResponseCache``."""

    def fetch(self) -> FetchResult:
        ...
