"""Module 7 — Track selector (rotation clock, scoring, eligibility)"""
import logging
import random
from datetime import datetime
from typing import Optional

from .config import POOL_REFILL_THRESHOLD, MIN_TRACK_MS, MAX_TRACK_MS
from .errors import NoEligibleCandidate
from .fetcher import CandidateFetcher
from .models import Track
from .request_parser import DJRequest
from .rotation import SelectionState
from .stations import StationProfile
from .taste import TasteProfile

logger = logging.getLogger(__name__)

JITTER = 0.1


def score_breakdown(
    track: Track,
    station: StationProfile,
    state: SelectionState,
    taste: TasteProfile,
    rng: Optional[random.Random] = None,
    year: Optional[int] = None,
) -> dict:
    """Individual score terms for one track. Sum of values is the score."""
    rng = rng or random
    pop = track.effective_popularity
    cy = year or datetime.now().year
    age = cy - track.release_year(cy)
    slot = state.slot

    slot_bonus = 0.0
    if slot == "C" and age <= 2 and pop >= 60:
        slot_bonus = 0.3
    elif slot == "R" and 2 < age <= 8 and pop >= 40:
        slot_bonus = 0.25
    elif slot == "G" and age > 8:
        slot_bonus = 0.2

    repeat_penalty = 0.0
    for artist in track.artists:
        plays = state.artist_play_counts.get(artist.id, 0)
        if plays:
            repeat_penalty -= min(0.4, plays * 0.1)

    lo, hi = station.popularity_range
    return {
        "popularity": pop / 100,
        "slot": slot_bonus,
        "liked": 0.2 if taste.is_liked(track) else 0.0,
        "skipped": -0.3 if taste.is_skipped(track) else 0.0,
        "repeat": repeat_penalty,
        "band": 0.1 if lo <= pop <= hi else 0.0,
        "jitter": (rng.random() - 0.5) * 2 * JITTER,
    }


class TrackSelector:
    """Owns one session's SelectionState and picks the next track from it."""

    def __init__(
        self,
        fetcher: CandidateFetcher,
        taste: TasteProfile,
        state: Optional[SelectionState] = None,
        rng: Optional[random.Random] = None,
    ):
        self.fetcher = fetcher
        self.taste = taste
        self.state = state or SelectionState()
        self.rng = rng or random.Random()

    def reset(self):
        self.state = SelectionState()

    def score(self, tracks: list[Track], station: StationProfile, now: Optional[datetime] = None) -> list[Track]:
        """Highest score first; equal scores keep input order."""
        year = (now or datetime.now()).year
        scored = [
            (sum(score_breakdown(t, station, self.state, self.taste, self.rng, year).values()), i, t)
            for i, t in enumerate(tracks)
        ]
        scored.sort(key=lambda s: (-s[0], s[1]))
        return [t for _, _, t in scored]

    def is_eligible(self, track: Track, request: Optional[DJRequest] = None, now: Optional[datetime] = None) -> bool:
        s = self.state
        if track.id in s.played_ids:
            return False
        if any(a.id in s.recent_artist_ids for a in track.artists):
            return False
        if not MIN_TRACK_MS <= track.duration_ms <= MAX_TRACK_MS:
            return False
        if request and request.year_range:
            year = track.release_year((now or datetime.now()).year)
            if not request.year_range[0] <= year <= request.year_range[1]:
                return False
        if request and request.artist_search:
            wanted = request.artist_search.lower()
            if not any(wanted in a.name.lower() for a in track.artists):
                return False
        return True

    async def select_next(
        self,
        station: StationProfile,
        request: Optional[DJRequest] = None,
        now: Optional[datetime] = None,
    ) -> Track:
        """Pick, record and return the next track. Raises NoEligibleCandidate."""
        s = self.state
        if s.last_fetch_station != station.id:
            s.candidate_pool = []
            s.last_fetch_station = station.id

        if len(s.candidate_pool) < POOL_REFILL_THRESHOLD:
            await self._refill(station, request, now)

        eligible = [t for t in s.candidate_pool if self.is_eligible(t, request, now)]
        if eligible:
            return self._pick(self.score(eligible, station, now)[0], request)

        relaxed = [t for t in s.candidate_pool if t.id not in s.played_ids]
        if relaxed:
            logger.debug("Relaxed selection on %s (%d candidates)", station.id, len(relaxed))
            return self._pick(self.score(relaxed, station, now)[0], request)

        logger.info("Candidate pool exhausted on %s, refetching", station.id)
        s.candidate_pool = []
        fresh = await self.fetcher.fetch(station, s, request, now)
        for track in fresh:
            if track.id not in s.played_ids:
                return self._pick(track, request)
        raise NoEligibleCandidate(f"No playable tracks for station {station.id}")

    async def _refill(self, station, request, now):
        s = self.state
        known = {t.id for t in s.candidate_pool} | s.played_ids
        for track in await self.fetcher.fetch(station, s, request, now):
            if track.id not in known:
                known.add(track.id)
                s.candidate_pool.append(track)

    def _pick(self, track: Track, request: Optional[DJRequest]) -> Track:
        self.state.record(track)
        if request:
            request.consume()
        return track
