"""Module 6 — Candidate fetcher (cold-start search, warm recommendations)"""
import logging
import math
import random
from datetime import datetime
from typing import Optional

from .config import POPULARITY_FLOOR_MARGIN
from .errors import AuthExpired, CatalogError, format_error
from .models import Track
from .request_parser import DJRequest
from .rotation import SelectionState
from .stations import StationProfile

logger = logging.getLogger(__name__)

# Multi-word terms containing one of these are genres, not artist names
_GENRE_WORDS = ("hits", "muziek", "pop", "rock", "jazz", "house", "hip hop", "chill")

MAX_SEEDS = 5


def looks_like_artist(term: str) -> bool:
    if " " not in term:
        return term[:1].isupper()
    lower = term.lower()
    return not any(w in lower for w in _GENRE_WORDS)


def slot_year_window(station: StationProfile, slot: str, year: Optional[int] = None) -> tuple[int, int]:
    """Release-year window for a rotation slot, clamped into the station's range."""
    cy = year or datetime.now().year
    lo, hi = {
        "C": (cy - 2, cy),
        "R": (cy - 8, cy - 2),
        "G": (station.year_range[0], cy - 8),
    }[slot]
    lo = max(lo, station.year_range[0])
    hi = min(hi, station.year_range[1])
    if lo > hi:
        return station.year_range
    return lo, hi


def build_search_queries(
    station: StationProfile,
    slot: str,
    request: Optional[DJRequest] = None,
    rng: Optional[random.Random] = None,
    year: Optional[int] = None,
) -> list[str]:
    rng = rng or random
    if request and request.artist_search:
        return [f"artist:{request.artist_search}", request.artist_search]

    genre_only = bool(request and request.genre_boost)
    terms = list(request.genre_boost) if genre_only else list(station.search_terms)
    rng.shuffle(terms)

    if request and request.year_range:
        lo, hi = request.year_range
    else:
        lo, hi = slot_year_window(station, slot, year)

    queries = []
    for term in terms[:3]:
        if not genre_only and looks_like_artist(term):
            q = f"artist:{term}"
            if request and request.year_range:
                q += f" year:{lo}-{hi}"
            queries.append(q)
        else:
            queries.append(f"genre:{term} year:{lo}-{hi}")
    return queries


def mood_target(now: Optional[datetime] = None) -> dict:
    """Time-of-day energy/valence curve."""
    now = now or datetime.now()
    hour = now.hour
    h = hour + now.minute / 60

    if 6 <= hour < 12:
        t = (h - 6) / 6
        return {"energy": 0.45 + t * 0.30, "valence": 0.50 + t * 0.20}
    if 12 <= hour < 18:
        peak = math.sin((h - 12) / 6 * math.pi)     # peaks at 15:00
        return {"energy": 0.65 + peak * 0.10, "valence": 0.65 + peak * 0.10}
    if 18 <= hour < 23:
        t = (h - 18) / 5
        return {"energy": 0.65 - t * 0.25, "valence": 0.60 - t * 0.15}
    return {"energy": 0.35, "valence": 0.40}


def _clamp(x: float) -> float:
    return max(0.0, min(1.0, x))


class CandidateFetcher:
    def __init__(self, catalog, rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.rng = rng or random.Random()

    async def fetch(
        self,
        station: StationProfile,
        state: SelectionState,
        request: Optional[DJRequest] = None,
        now: Optional[datetime] = None,
    ) -> list[Track]:
        """Fresh candidates for the station. AuthExpired always propagates."""
        now = now or datetime.now()
        search_only = bool(request and (request.artist_search or request.genre_boost or request.year_range))

        tracks: list[Track] = []
        if state.has_history and not search_only:
            try:
                tracks = await self._recommend(station, state, request, now)
            except AuthExpired:
                raise
            except CatalogError as e:
                logger.warning("Recommendations failed, falling back to search: %s", e)
            if not tracks:
                logger.debug("No recommendations for %s, using search", station.id)

        if not tracks:
            tracks = await self._search(station, state, request, now)

        if request and request.energy_range and tracks:
            tracks = await self._filter_energy(tracks, request.energy_range)
        return tracks

    # ── Modes ─────────────────────────────────────────────────────────────────

    async def _search(self, station, state, request, now) -> list[Track]:
        queries = build_search_queries(station, state.slot, request, self.rng, now.year)
        try:
            results = await self.catalog.search_many(queries)
        except AuthExpired:
            raise
        except CatalogError as e:
            format_error("catalog_fetch", params={"station": station.id, "queries": queries}, raw=str(e))
            return []

        if request and request.discovery:
            return results
        floor = max(0, station.popularity_range[0] - POPULARITY_FLOOR_MARGIN)
        return [t for t in results if t.effective_popularity >= floor]

    async def _recommend(self, station, state, request, now) -> list[Track]:
        target = mood_target(now)
        ramp = min(state.tracks_selected, 20) / 20 * 0.1
        energy = target["energy"] + ramp
        if request and request.energy_range:
            energy = sum(request.energy_range) / 2

        seed_tracks = state.play_history[-2:][::-1]
        seed_artists = [] if seed_tracks else state.recent_artist_ids[-2:][::-1]
        room = MAX_SEEDS - len(seed_tracks) - len(seed_artists)
        seed_genres = list(station.seed_genres[:room])

        min_pop = None
        if not (request and request.discovery):
            min_pop = max(0, station.popularity_range[0] - POPULARITY_FLOOR_MARGIN)

        return await self.catalog.recommendations(
            seed_tracks=seed_tracks,
            seed_artists=seed_artists,
            seed_genres=seed_genres,
            target_energy=_clamp(energy),
            target_valence=_clamp(target["valence"] + ramp),
            min_popularity=min_pop,
        )

    async def _filter_energy(self, tracks: list[Track], energy_range: tuple[float, float]) -> list[Track]:
        try:
            features = await self.catalog.audio_features([t.id for t in tracks])
        except AuthExpired:
            raise
        except CatalogError as e:
            logger.warning("Audio features unavailable, keeping unfiltered candidates: %s", e)
            return tracks

        lo, hi = energy_range
        kept = []
        for t in tracks:
            if t.id in features:
                t.energy = features[t.id]
                if not lo <= t.energy <= hi:
                    continue
            kept.append(t)
        if not kept:
            logger.info("Energy filter %.1f–%.1f removed every candidate, ignoring it", lo, hi)
            return tracks
        return kept
