"""Spotify streaming-catalog provider.

Authenticates with the client-credentials flow and searches the catalog by
artist name.  The access token lives in a one-slot ``cachetools.TTLCache``
that expires a minute before Spotify's own expiry, and search hits are
kept in a second TTL cache so repeated enrichment of the same name within
the hour costs no request.
"""

from __future__ import annotations

import asyncio

import httpx
import structlog
from cachetools import TTLCache

from collabgraph.config.settings import Settings
from collabgraph.interfaces.streaming_catalog_provider import (
    CatalogArtist,
    CatalogImage,
    IStreamingCatalogProvider,
)
from collabgraph.utils.errors import EnrichmentError

logger = structlog.get_logger(logger_name=__name__)

_TOKEN_URL = "https://accounts.spotify.com/api/token"
_SEARCH_URL = "https://api.spotify.com/v1/search"
_TOKEN_EXPIRY_BUFFER = 60  # seconds
_TOKEN_KEY = "access_token"


class SpotifyCatalogProvider(IStreamingCatalogProvider):
    """Artist search against the Spotify Web API."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        settings: Settings,
        search_cache_size: int = 1000,
        search_cache_ttl: int = 3600,
    ) -> None:
        self._http = http_client
        self._client_id = settings.spotify_client_id
        self._client_secret = settings.spotify_client_secret
        self._timeout = settings.http_timeout_seconds
        self._token_cache: TTLCache[str, str] = TTLCache(maxsize=1, ttl=3600)
        self._search_cache: TTLCache[str, CatalogArtist | None] = TTLCache(
            maxsize=search_cache_size, ttl=search_cache_ttl
        )
        self._token_lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # IStreamingCatalogProvider implementation
    # ------------------------------------------------------------------

    async def search_artist(self, name: str) -> CatalogArtist | None:
        key = name.casefold()
        if key in self._search_cache:
            return self._search_cache[key]

        token = await self._get_token()
        try:
            response = await self._http.get(
                _SEARCH_URL,
                params={"q": name, "type": "artist", "limit": 1},
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
            response.raise_for_status()
            items = response.json().get("artists", {}).get("items", [])
        except (httpx.HTTPError, ValueError) as exc:
            raise EnrichmentError(
                message=f"Spotify search failed for '{name}': {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        artist = _to_catalog_artist(items[0]) if items else None
        self._search_cache[key] = artist
        return artist

    def get_provider_name(self) -> str:
        return "spotify"

    def is_available(self) -> bool:
        return bool(self._client_id and self._client_secret)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    async def _get_token(self) -> str:
        async with self._token_lock:
            cached = self._token_cache.get(_TOKEN_KEY)
            if cached:
                return cached
            try:
                response = await self._http.post(
                    _TOKEN_URL,
                    data={"grant_type": "client_credentials"},
                    auth=(self._client_id, self._client_secret),
                    timeout=self._timeout,
                )
                response.raise_for_status()
                body = response.json()
                token = body["access_token"]
                expires_in = int(body.get("expires_in", 3600))
            except (httpx.HTTPError, ValueError, KeyError) as exc:
                raise EnrichmentError(
                    message=f"Spotify authentication failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc

            ttl = max(expires_in - _TOKEN_EXPIRY_BUFFER, 1)
            self._token_cache = TTLCache(maxsize=1, ttl=ttl)
            self._token_cache[_TOKEN_KEY] = token
            logger.debug("spotify_token_refreshed", expires_in=expires_in)
            return token


def _to_catalog_artist(item: dict) -> CatalogArtist:
    images = [
        CatalogImage(url=img["url"], width=img.get("width"), height=img.get("height"))
        for img in item.get("images", [])
        if img.get("url")
    ]
    return CatalogArtist(id=item["id"], name=item.get("name", ""), images=images)

