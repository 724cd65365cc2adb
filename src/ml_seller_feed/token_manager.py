from __future__ import annotations

import logging
import time

from .exceptions import AuthError
from .models import Credentials, Session
from .protocols import Clock, MarketplaceClient

_log = logging.getLogger(__name__)


class TokenManager:
    """Obtain and cache the application's OAuth bearer token.

    The token and its expiry live on the injected ``Session``; this class is
    their only writer.  ``get_token`` returns the held token while
    ``expires_at`` is in the future and performs exactly one token request
    otherwise.
    """

    def __init__(
        self,
        *,
        client: MarketplaceClient,
        credentials: Credentials,
        session: Session,
        clock: Clock = time.time,
    ) -> None:
        self._client = client
        self._credentials = credentials
        self._session = session
        self._clock = clock

    def get_token(self) -> str:
        """Return a valid bearer token, refreshing it when absent or expired.

        Raises ``AuthError`` when credentials are missing or rejected.
        """
        if self._session.has_valid_token(self._clock()):
            return self._session.access_token  # type: ignore[return-value]
        return self._refresh()

    def _refresh(self) -> str:
        if not self._credentials.is_complete:
            raise AuthError("client credentials are not configured")
        _log.info("Requesting marketplace access token")
        requested_at = self._clock()
        payload = self._client.request_token(self._credentials)
        token = str(payload["access_token"])
        self._session.access_token = token
        self._session.expires_at = requested_at + self._lifetime(payload)
        _log.info("Access token acquired; expires at %s", self._session.token_expires_iso())
        return token

    @staticmethod
    def _lifetime(payload: dict) -> float:
        try:
            return max(float(payload.get("expires_in") or 0), 0.0)
        except (TypeError, ValueError):
            return 0.0
