from __future__ import annotations

import logging

from .exceptions import MLFeedError, ResolutionError, UpstreamError
from .models import SellerIdentity, Session
from .protocols import MarketplaceClient
from .token_manager import TokenManager

_log = logging.getLogger(__name__)


class SellerResolver:
    """Discover the user id and seller id of the authenticated account.

    ``/users/me`` must succeed, otherwise ``resolve`` raises
    ``ResolutionError``.  The follow-up profile lookup is best-effort: a
    profile carrying ``seller_reputation`` confirms the seller, and a failed
    lookup *assumes* the account is a seller (``seller_id = user_id``).  A
    profile that loads without the marker leaves ``seller_id`` unset.
    """

    def __init__(self, *, client: MarketplaceClient, tokens: TokenManager, session: Session) -> None:
        self._client = client
        self._tokens = tokens
        self._session = session

    def resolve(self) -> SellerIdentity:
        """Resolve and persist the identity on the session; safe to repeat."""
        token = self._tokens.get_token()
        me = self._current_user(token)
        user_id = str(me["id"])
        self._session.user_id = user_id
        self._session.nickname = me.get("nickname") or self._session.nickname
        _log.info("User id discovered: %s", user_id)
        if self._session.seller_id is None:
            self._session.seller_id = self._seller_id_for(token, user_id)
        return SellerIdentity(
            user_id=user_id,
            seller_id=self._session.seller_id,
            nickname=self._session.nickname,
        )

    def _current_user(self, token: str) -> dict:
        try:
            me = self._client.get_current_user(token)
        except UpstreamError as exc:
            raise ResolutionError(f"could not look up the authenticated user: {exc}") from exc
        if not me.get("id"):
            raise ResolutionError("authenticated user response carries no id")
        return me

    def _seller_id_for(self, token: str, user_id: str) -> str | None:
        try:
            profile = self._client.get_user(token, user_id)
        except MLFeedError as exc:
            _log.warning("Seller profile lookup failed (%s); assuming user %s is the seller", exc, user_id)
            return user_id
        reputation = profile.get("seller_reputation")
        if not reputation:
            _log.warning("User %s has no seller reputation; seller id left unset", user_id)
            return None
        status = reputation.get("power_seller_status") if isinstance(reputation, dict) else None
        _log.info("Seller id configured: %s (status: %s)", user_id, status or "active")
        return user_id
