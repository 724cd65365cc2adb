"""Exception hierarchy for ml_seller_feed.

All exceptions raised by this library are subclasses of ``MLFeedError`` so
callers can catch the entire family with a single ``except`` clause when
need be.

Hierarchy::

    MLFeedError
    ├── AuthError        – token request rejected or failed at the network level
    ├── ResolutionError  – the seller identity could not be determined
    └── UpstreamError    – any other marketplace request failure or malformed body
"""


class MLFeedError(Exception):
    """Base exception for all ml_seller_feed errors."""


class AuthError(MLFeedError):
    """Raised when the marketplace rejects the client credentials.

    Also raised when the token endpoint cannot be reached at all, since the
    caller cannot distinguish the two for recovery purposes.

    Attributes:
        status_code: Upstream HTTP status, or ``None`` for network failures.
        body: Upstream response text (truncated) for diagnostics.
    """

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResolutionError(MLFeedError):
    """Raised when ``/users/me`` fails or no seller id can be derived."""


class UpstreamError(MLFeedError):
    """Raised when a marketplace data request fails or returns malformed data.

    ``is_auth_failure`` is ``True`` for HTTP 401/403: the bearer token was
    rejected and a fresh one may succeed.
    """

    def __init__(self, message: str, *, status_code: int | None = None, body: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def is_auth_failure(self) -> bool:
        return self.status_code in (401, 403)
