"""Module 8 — Announcement scheduler (when the DJ talks, and about what)"""
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .config import MAX_RECENT_SEGMENTS
from .stations import StationProfile, time_of_day

logger = logging.getLogger(__name__)

SEGMENT_TYPES = (
    "intro", "between", "weather", "weather_full", "news", "news_full",
    "time", "station_id", "fun_fact", "song_intro", "jingle", "outro",
)


def songs_until_announcement(
    station: StationProfile,
    frequency: str = "normal",
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> int:
    """Fresh countdown: chatty DJs talk every 2–3 songs, quiet ones every 5–8."""
    rng = rng or random
    talk = station.dj.talkativeness
    base_min = round(2 + (1 - talk) * 4)
    base_max = round(4 + (1 - talk) * 5)

    modifier = {"morning": -1, "night": 2}.get(time_of_day(now), 0)
    lo = max(2, base_min + modifier)
    hi = max(lo + 1, base_max + modifier)
    count = rng.randint(lo, hi)

    if frequency == "low":
        return count + 2
    if frequency == "high":
        return max(1, count - 1)
    return count


@dataclass
class AnnouncementState:
    songs_until_announcement: int = 0
    songs_since_announcement: int = 0
    recent_segments: list[str] = field(default_factory=list)


class AnnouncementScheduler:
    def __init__(
        self,
        station: StationProfile,
        frequency: str = "normal",
        rng: Optional[random.Random] = None,
    ):
        self.station = station
        self.frequency = frequency
        self.rng = rng or random.Random()
        self.state = AnnouncementState()
        self.reset_countdown()

    def reset(self, station: Optional[StationProfile] = None):
        """Station change: forget recent segments, start a fresh countdown."""
        if station:
            self.station = station
        self.state = AnnouncementState()
        self.reset_countdown()

    def reset_countdown(self, now: Optional[datetime] = None):
        self.state.songs_until_announcement = songs_until_announcement(
            self.station, self.frequency, now, self.rng
        )
        self.state.songs_since_announcement = 0

    def on_track(self) -> bool:
        """Called once per track turn. True = time for a DJ break."""
        if self.state.songs_until_announcement <= 0:
            return True
        self.state.songs_until_announcement -= 1
        self.state.songs_since_announcement += 1
        return False

    def _remember(self, segment: str):
        self.state.recent_segments.append(segment)
        del self.state.recent_segments[:-MAX_RECENT_SEGMENTS]

    def candidates(self, has_weather: bool, has_news: bool, now: Optional[datetime] = None) -> list[tuple[str, float]]:
        w = self.station.segment_weights
        tod = time_of_day(now)
        morning = 1.5 if tod == "morning" else 1.0
        night = 0.5 if tod == "night" else 1.0
        recent = self.state.recent_segments
        since = self.state.songs_since_announcement

        out = []
        if has_weather and "weather_full" not in recent and since >= 5:
            out.append(("weather_full", w.weather * morning * 1.2))
        if has_weather and "weather" not in recent:
            out.append(("weather", w.weather * morning))
        if has_news and "news_full" not in recent and since >= 6:
            out.append(("news_full", w.news * morning * 1.2))
        if has_news and "news" not in recent:
            out.append(("news", w.news * morning))
        if "fun_fact" not in recent:
            out.append(("fun_fact", w.fun_fact * night))
        if "station_id" not in recent:
            out.append(("station_id", w.station_id))
        out.append(("song_intro", w.song_intro))
        if "jingle" not in recent:
            out.append(("jingle", w.jingle))
        out.append(("time", w.time))
        out.append(("between", 0.1))
        return out

    def pick_segment(self, has_weather: bool = False, has_news: bool = False, now: Optional[datetime] = None) -> str:
        candidates = self.candidates(has_weather, has_news, now)
        roll = self.rng.random() * sum(weight for _, weight in candidates)
        choice = "between"
        for segment, weight in candidates:
            roll -= weight
            if roll <= 0:
                choice = segment
                break
        self._remember(choice)
        logger.debug("Segment picked: %s (recent=%s)", choice, self.state.recent_segments)
        return choice

    def should_prepend_jingle(self, segment: str) -> bool:
        if segment in ("station_id", "jingle"):
            return False
        chance = 0.45 if self.station.dj.tone == "energetic" else 0.25
        return self.rng.random() < chance

    def after_announcement(self, now: Optional[datetime] = None):
        self.reset_countdown(now)
