"""Rotation clock + per-session selection state."""
from dataclasses import dataclass, field
from typing import Optional

from .config import MAX_RECENT_ARTISTS
from .models import Track

# C = current (≤2y), R = recurrent (2–8y), G = gold (8y+)
ROTATION_CLOCK = ("C", "C", "R", "G", "C", "R", "C", "G", "C", "C", "R", "G")


@dataclass
class SelectionState:
    played_ids: set[str] = field(default_factory=set)
    play_history: list[str] = field(default_factory=list)
    recent_artist_ids: list[str] = field(default_factory=list)
    artist_play_counts: dict[str, int] = field(default_factory=dict)
    rotation_position: int = 0
    candidate_pool: list[Track] = field(default_factory=list)
    last_fetch_station: Optional[str] = None
    tracks_selected: int = 0

    @property
    def slot(self) -> str:
        return ROTATION_CLOCK[self.rotation_position % len(ROTATION_CLOCK)]

    @property
    def has_history(self) -> bool:
        return bool(self.play_history or self.recent_artist_ids)

    def record(self, track: Track):
        """Bookkeeping for a chosen track: played set, cooldown ring, counts, clock."""
        self.played_ids.add(track.id)
        self.play_history.append(track.id)
        for artist in track.artists:
            self.recent_artist_ids.append(artist.id)
            del self.recent_artist_ids[:-MAX_RECENT_ARTISTS]
            self.artist_play_counts[artist.id] = self.artist_play_counts.get(artist.id, 0) + 1
        self.rotation_position = (self.rotation_position + 1) % len(ROTATION_CLOCK)
        self.candidate_pool = [t for t in self.candidate_pool if t.id != track.id]
        self.tracks_selected += 1

    def clear_pool(self):
        self.candidate_pool = []
        self.last_fetch_station = None

    def stats(self) -> dict:
        return {
            "played_count": len(self.played_ids),
            "recent_artists": len(self.recent_artist_ids),
            "candidate_pool_size": len(self.candidate_pool),
            "rotation_position": self.rotation_position,
            "rotation_slot": self.slot,
        }
