"""Module 3 — Taste Profile + listener preferences"""
import logging
import time
from dataclasses import dataclass, field, asdict
from typing import Optional

from .config import MAX_TASTE_ARTISTS
from .models import Track
from .storage import KeyValueStore

logger = logging.getLogger(__name__)

TASTE_KEY = "taste"
PREFERENCES_KEY = "preferences"

DJ_FREQUENCIES = ("low", "normal", "high")


@dataclass
class TasteProfile:
    liked_artist_ids: list[str] = field(default_factory=list)
    skipped_artist_ids: list[str] = field(default_factory=list)
    last_updated: float = 0.0

    def is_liked(self, track: Track) -> bool:
        return any(a.id in self.liked_artist_ids for a in track.artists)

    def is_skipped(self, track: Track) -> bool:
        return any(a.id in self.skipped_artist_ids for a in track.artists)


def _push_capped(items: list[str], value: str, cap: int = MAX_TASTE_ARTISTS):
    if value in items:
        return
    items.append(value)
    del items[:-cap]


class TasteStore:
    """Liked/skipped artists, persisted after every change."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self.profile = self.load()

    def load(self) -> TasteProfile:
        raw = self.store.load(TASTE_KEY)
        if not isinstance(raw, dict):
            return TasteProfile()
        try:
            return TasteProfile(
                liked_artist_ids=[str(a) for a in raw.get("liked_artist_ids", [])],
                skipped_artist_ids=[str(a) for a in raw.get("skipped_artist_ids", [])],
                last_updated=float(raw.get("last_updated", 0)),
            )
        except (TypeError, ValueError):
            logger.warning("Malformed taste profile, starting fresh")
            return TasteProfile()

    def save(self):
        self.store.save(TASTE_KEY, asdict(self.profile))

    def record_feedback(self, action: str, track: Track):
        """action: 'like' | 'skip'"""
        if action not in ("like", "skip"):
            raise ValueError(f"Unknown feedback action: {action}")
        p = self.profile
        for artist in track.artists:
            if not artist.id:
                continue
            if action == "like":
                _push_capped(p.liked_artist_ids, artist.id)
                if artist.id in p.skipped_artist_ids:
                    p.skipped_artist_ids.remove(artist.id)
            else:
                _push_capped(p.skipped_artist_ids, artist.id)
        p.last_updated = time.time()
        self.save()

    def reset(self):
        """Wipe taste profile completely, in place so live selectors see it."""
        p = self.profile
        p.liked_artist_ids.clear()
        p.skipped_artist_ids.clear()
        p.last_updated = time.time()
        self.save()


@dataclass
class Preferences:
    dj_voice: Optional[str] = None
    dj_frequency: str = "normal"
    crossfade_seconds: int = 0
    user_name: Optional[str] = None


class PreferenceStore:
    def __init__(self, store: KeyValueStore):
        self.store = store

    def load(self) -> Preferences:
        raw = self.store.load(PREFERENCES_KEY)
        if not isinstance(raw, dict):
            return Preferences()
        freq = raw.get("dj_frequency", "normal")
        return Preferences(
            dj_voice=raw.get("dj_voice") or None,
            dj_frequency=freq if freq in DJ_FREQUENCIES else "normal",
            crossfade_seconds=int(raw.get("crossfade_seconds", 0) or 0),
            user_name=raw.get("user_name") or None,
        )

    def save(self, prefs: Preferences):
        self.store.save(PREFERENCES_KEY, asdict(prefs))
