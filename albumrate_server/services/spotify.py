# Copyright (C) 2024 AlbumRate Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Spotify Web API client for album search and details.

Spotify requires an app access token from the client-credentials flow
(https://developer.spotify.com/documentation/web-api/tutorials/client-credentials-flow).
The token is cached on the client instance until it expires; refreshes are
serialised so concurrent requests share a single token exchange.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import httpx

from albumrate_server.config import Settings, settings
from albumrate_server.errors import IntegrationFailure, NotFound

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 20
MAX_SEARCH_LIMIT = 50
MAX_SEARCH_OFFSET = 1000


class CatalogError(IntegrationFailure):
    """Spotify token exchange or API call failed."""


class CatalogNotFound(NotFound):
    """Spotify returned 404 for the requested entry."""


@dataclass
class CachedToken:
    access_token: str
    expires_at: float

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class SpotifyClient:
    """Spotify API client owning its app token cache."""

    def __init__(
        self,
        client_id: str | None,
        client_secret: str | None,
        *,
        api_url: str = "https://api.spotify.com/v1",
        token_url: str = "https://accounts.spotify.com/api/token",
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.client_id = client_id
        self.client_secret = client_secret
        self.api_url = api_url.rstrip("/")
        self.token_url = token_url
        self._clock = clock
        self._token: CachedToken | None = None
        self._token_lock = asyncio.Lock()
        self._http = httpx.AsyncClient(timeout=timeout, transport=transport)

    @classmethod
    def from_settings(cls, s: Settings = settings, **kwargs: Any) -> "SpotifyClient":
        return cls(
            s.spotify_client_id,
            s.spotify_client_secret,
            api_url=s.spotify_api_url,
            token_url=s.spotify_token_url,
            timeout=s.spotify_timeout,
            **kwargs,
        )

    async def aclose(self) -> None:
        await self._http.aclose()

    async def get_access_token(self) -> str:
        """Return a valid app token, exchanging credentials only when none is cached or it expired."""
        token = self._token
        if token and token.is_valid(self._clock()):
            return token.access_token
        async with self._token_lock:
            # Another caller may have refreshed while we waited
            token = self._token
            if token and token.is_valid(self._clock()):
                return token.access_token
            self._token = await self._request_token()
            return self._token.access_token

    def invalidate_token(self, access_token: str) -> None:
        """Drop the cached token if it is still the one that was rejected."""
        if self._token and self._token.access_token == access_token:
            self._token = None

    async def _request_token(self) -> CachedToken:
        if not self.client_id or not self.client_secret:
            raise CatalogError("Spotify client credentials are not configured")
        try:
            r = await self._http.post(
                self.token_url,
                data={"grant_type": "client_credentials"},
                auth=(self.client_id, self.client_secret),
            )
            r.raise_for_status()
            data = r.json()
            access_token = data["access_token"]
            expires_in = float(data["expires_in"])
        except (httpx.HTTPError, ValueError, KeyError, TypeError) as e:
            logger.error("Error getting Spotify access token: %s", e)
            raise CatalogError("Error getting Spotify access token", detail=str(e)) from e
        logger.info("Obtained Spotify access token (expires in %ss)", int(expires_in))
        return CachedToken(access_token, self._clock() + expires_in)

    async def _send(self, path: str, token: str, params: dict[str, Any] | None) -> httpx.Response:
        return await self._http.get(
            f"{self.api_url}{path}",
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """GET an API path with the app token. A 401 refreshes the token and retries once."""
        token = await self.get_access_token()
        try:
            r = await self._send(path, token, params)
            if r.status_code == 401:
                logger.warning("Spotify rejected cached access token; refreshing")
                self.invalidate_token(token)
                token = await self.get_access_token()
                r = await self._send(path, token, params)
            if r.status_code == 404:
                raise CatalogNotFound("Album not found")
            r.raise_for_status()
            return r.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Spotify GET %s failed: %s", path, e)
            raise CatalogError(detail=str(e)) from e

    async def search_albums(
        self, query: str, limit: int = DEFAULT_SEARCH_LIMIT, offset: int = 0
    ) -> dict[str, Any]:
        """Search albums. Returns Spotify's `albums` paging object."""
        data = await self._get(
            "/search",
            {"q": query, "type": "album", "limit": limit, "offset": offset},
        )
        return data.get("albums") or {}

    async def get_album(self, album_id: str) -> dict[str, Any]:
        """Full album object. Raises CatalogNotFound for unknown ids."""
        return await self._get(f"/albums/{album_id}")
