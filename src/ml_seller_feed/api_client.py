"""Mercado Livre REST API client.

Four endpoints are consumed: the OAuth token endpoint (client-credentials
grant), ``/users/me``, ``/users/{id}`` and the site-scoped ``/search``.
Every transport or HTTP failure is mapped onto the package exception
taxonomy here, so the layers above never see an ``httpx`` exception:

* token endpoint failures raise ``AuthError``;
* every other failure raises ``UpstreamError`` carrying the HTTP status, so
  callers can tell an expired bearer token (401/403) from an outage.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import httpx

from .constants import DEFAULT_API_BASE_URL, DEFAULT_TIMEOUT_SECONDS
from .exceptions import AuthError, UpstreamError
from .models import Credentials

_BODY_SNIPPET_LENGTH = 500


@dataclass(frozen=True, slots=True)
class APIConfig:
    """Immutable API client configuration."""

    base_url: str = DEFAULT_API_BASE_URL
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS


@dataclass(frozen=True, slots=True)
class SearchQuery:
    """Parameters of one seller-scoped search request."""

    site_id: str
    seller_id: str
    limit: int
    sort: str
    status: str
    category: str | None = None

    def params(self) -> dict[str, str | int]:
        out: dict[str, str | int] = {
            "seller_id": self.seller_id,
            "limit": int(self.limit),
            "sort": self.sort,
            "status": self.status,
        }
        if self.category:
            out["category"] = self.category
        return out


def _snippet(response: httpx.Response) -> str:
    return response.text[:_BODY_SNIPPET_LENGTH]


class MercadoLivreAPI:
    """Low-level synchronous client for the Mercado Livre REST API.

    The client owns one ``httpx.Client``; call ``close()`` when done.  Pass a
    ``transport`` (e.g. ``httpx.MockTransport``) to run without a network.
    """

    def __init__(
        self,
        *,
        config: APIConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config or APIConfig()
        self._client = httpx.Client(
            base_url=self._config.base_url.rstrip("/"),
            timeout=self._config.timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    @staticmethod
    def _headers(token: str | None = None) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Issue one request; raise ``UpstreamError`` on transport failure."""
        try:
            return self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise UpstreamError(f"{method} {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise UpstreamError(f"{method} {path} failed: {exc}") from exc

    def _get_json(self, path: str, *, token: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET *path* with a bearer token; return the parsed JSON object."""
        response = self._send("GET", path, headers=self._headers(token), params=params)
        if response.status_code >= 400:
            raise UpstreamError(
                f"GET {path} failed (status={response.status_code})",
                status_code=response.status_code,
                body=_snippet(response),
            )
        return self._parse_json(response, path)

    @staticmethod
    def _parse_json(response: httpx.Response, path: str) -> dict[str, Any]:
        """Unpack a JSON object from *response* or raise ``UpstreamError``."""
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(f"{path} returned non-JSON response", status_code=response.status_code) from exc
        if not isinstance(data, dict):
            raise UpstreamError(f"{path} returned unexpected JSON shape", status_code=response.status_code)
        return data

    def request_token(self, credentials: Credentials) -> dict[str, Any]:
        """Run the client-credentials grant; return the token payload.

        Raises ``AuthError`` on rejection, transport failure, or a response
        without an ``access_token``.
        """
        form = {
            "grant_type": "client_credentials",
            "client_id": credentials.client_id,
            "client_secret": credentials.client_secret,
        }
        try:
            response = self._send("POST", "/oauth/token", headers=self._headers(), data=form)
        except UpstreamError as exc:
            raise AuthError(f"token request failed: {exc}") from exc
        if response.status_code >= 400:
            raise AuthError(
                f"token request rejected (status={response.status_code})",
                status_code=response.status_code,
                body=_snippet(response),
            )
        return self._token_payload(response)

    def _token_payload(self, response: httpx.Response) -> dict[str, Any]:
        try:
            payload = self._parse_json(response, "/oauth/token")
        except UpstreamError as exc:
            raise AuthError(str(exc), status_code=response.status_code, body=_snippet(response)) from exc
        if not payload.get("access_token"):
            raise AuthError("token response carries no access_token", status_code=response.status_code)
        return payload

    def get_current_user(self, token: str) -> dict[str, Any]:
        """Return the account that owns *token* (``/users/me``)."""
        return self._get_json("/users/me", token=token)

    def get_user(self, token: str, user_id: str) -> dict[str, Any]:
        """Return the public profile of *user_id*."""
        return self._get_json(f"/users/{user_id}", token=token)

    def search(self, token: str, query: SearchQuery) -> list[dict[str, Any]]:
        """Run a seller-scoped search; return the raw ``results`` list."""
        data = self._get_json(f"/sites/{query.site_id}/search", token=token, params=query.params())
        results = data.get("results")
        if not isinstance(results, list):
            raise UpstreamError("search response carries no results list")
        return [item for item in results if isinstance(item, dict)]
