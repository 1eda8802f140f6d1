"""Module 4 — Catalog API client (search, recommendations, playback)"""
import asyncio
import logging
from typing import Optional

import httpx

from .config import (
    CATALOG_API_URL,
    CATALOG_MARKET,
    CATALOG_TIMEOUT,
    CATALOG_RETRIES,
    CATALOG_BACKOFF,
    SEARCH_LIMIT,
    RECOMMENDATION_LIMIT,
    MIN_SEARCH_DURATION_MS,
)
from .errors import AuthExpired, CatalogError
from .models import Track

logger = logging.getLogger(__name__)

_RETRYABLE = {429, 500, 502, 503, 504}


class CatalogClient:
    """Thin async wrapper over the streaming catalog's Web API.

    401 → AuthExpired (never retried). 429/5xx and transport errors are
    retried with exponential backoff, then surface as CatalogError.
    """

    def __init__(
        self,
        token: str,
        base_url: str = CATALOG_API_URL,
        market: str = CATALOG_MARKET,
        client: Optional[httpx.AsyncClient] = None,
        retries: int = CATALOG_RETRIES,
        backoff: float = CATALOG_BACKOFF,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.market = market
        self.retries = retries
        self.backoff = backoff
        self._client = client or httpx.AsyncClient(timeout=CATALOG_TIMEOUT)
        self._owns_client = client is None

    async def aclose(self):
        if self._owns_client:
            await self._client.aclose()

    def set_token(self, token: str):
        self.token = token

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = {"Authorization": f"Bearer {self.token}"}
        url = f"{self.base_url}{path}"
        last_error = ""
        for attempt in range(self.retries + 1):
            try:
                r = await self._client.request(method, url, headers=headers, **kwargs)
            except httpx.TimeoutException:
                last_error = f"Catalog timed out after {CATALOG_TIMEOUT}s"
            except httpx.HTTPError as e:
                last_error = f"Catalog HTTP error: {e}"
            else:
                if r.status_code == 401:
                    raise AuthExpired("Catalog token expired")
                if r.status_code < 400:
                    return r
                last_error = f"Catalog HTTP {r.status_code}: {r.text[:200]}"
                if r.status_code not in _RETRYABLE:
                    raise CatalogError(last_error, status=r.status_code)
            if attempt < self.retries:
                delay = self.backoff * (2 ** attempt)
                logger.debug("Retrying %s %s in %.2fs (%s)", method, path, delay, last_error)
                await asyncio.sleep(delay)
        raise CatalogError(last_error)

    @staticmethod
    def _json(r: httpx.Response) -> dict:
        try:
            body = r.json()
        except ValueError:
            raise CatalogError("Catalog returned invalid JSON", status=r.status_code)
        if not isinstance(body, dict):
            raise CatalogError("Catalog returned unexpected JSON", status=r.status_code)
        return body

    # ── Search ────────────────────────────────────────────────────────────────

    async def search(self, query: str, limit: int = SEARCH_LIMIT, offset: int = 0) -> list[Track]:
        r = await self._request(
            "GET",
            "/search",
            params={"q": query, "type": "track", "limit": limit, "offset": offset, "market": self.market},
        )
        items = (self._json(r).get("tracks") or {}).get("items") or []
        return [
            Track.from_api(item)
            for item in items
            if item and item.get("uri") and item.get("name")
            and (item.get("duration_ms") or 0) > MIN_SEARCH_DURATION_MS
        ]

    async def search_many(self, queries: list[str], limit: int = SEARCH_LIMIT) -> list[Track]:
        """Run queries concurrently; merge in query order, first occurrence wins."""
        results = await asyncio.gather(
            *(self.search(q, limit=limit) for q in queries),
            return_exceptions=True,
        )
        merged: list[Track] = []
        seen: set[str] = set()
        errors = []
        for query, result in zip(queries, results):
            if isinstance(result, AuthExpired):
                raise result
            if isinstance(result, BaseException):
                logger.warning("Search %r failed: %s", query, result)
                errors.append(result)
                continue
            for track in result:
                if track.id not in seen:
                    seen.add(track.id)
                    merged.append(track)
        if errors and len(errors) == len(queries):
            raise CatalogError(f"All {len(queries)} searches failed: {errors[0]}")
        return merged

    # ── Recommendations ───────────────────────────────────────────────────────

    async def recommendations(
        self,
        seed_tracks: Optional[list[str]] = None,
        seed_artists: Optional[list[str]] = None,
        seed_genres: Optional[list[str]] = None,
        target_energy: Optional[float] = None,
        target_valence: Optional[float] = None,
        min_popularity: Optional[int] = None,
        limit: int = RECOMMENDATION_LIMIT,
    ) -> list[Track]:
        params: dict = {"limit": limit, "market": self.market}
        if seed_tracks:
            params["seed_tracks"] = ",".join(seed_tracks)
        if seed_artists:
            params["seed_artists"] = ",".join(seed_artists)
        if seed_genres:
            params["seed_genres"] = ",".join(seed_genres)
        if target_energy is not None:
            params["target_energy"] = round(target_energy, 2)
        if target_valence is not None:
            params["target_valence"] = round(target_valence, 2)
        if min_popularity is not None:
            params["min_popularity"] = min_popularity
        r = await self._request("GET", "/recommendations", params=params)
        return [Track.from_api(t) for t in self._json(r).get("tracks") or [] if t and t.get("uri")]

    async def audio_features(self, track_ids: list[str]) -> dict[str, float]:
        """Returns {track_id: energy}. Tracks without features are omitted."""
        if not track_ids:
            return {}
        r = await self._request("GET", "/audio-features", params={"ids": ",".join(track_ids[:100])})
        out = {}
        for feat in self._json(r).get("audio_features") or []:
            if feat and feat.get("id") and feat.get("energy") is not None:
                out[feat["id"]] = float(feat["energy"])
        return out

    # ── Playback ──────────────────────────────────────────────────────────────

    async def play(self, uri: str, device_id: Optional[str] = None) -> bool:
        params = {"device_id": device_id} if device_id else None
        r = await self._request("PUT", "/me/player/play", params=params, json={"uris": [uri]})
        return r.status_code in (200, 202, 204)
