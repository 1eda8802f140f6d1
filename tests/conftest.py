"""Shared fixtures and test doubles."""
import random

import pytest

from dialfm.models import Artist, Track
from dialfm.storage import MemoryStore
from dialfm.synthesis import SynthesisResult, cache_key, sanitize, validate


@pytest.fixture(autouse=True)
def isolated_error_log(tmp_path, monkeypatch):
    """format_error appends to errors.log; keep that out of the source tree."""
    monkeypatch.setattr("dialfm.errors.OUTPUT_DIR", tmp_path)
    monkeypatch.setattr("dialfm.errors.ERRORS_LOG", tmp_path / "errors.log")
    return tmp_path / "errors.log"


def make_track(
    track_id: str,
    artist_id: str = None,
    year: int = 2023,
    popularity=70,
    duration_ms: int = 200_000,
    artist_name: str = None,
    name: str = None,
) -> Track:
    artist_id = artist_id or f"artist-{track_id}"
    return Track(
        id=track_id,
        name=name or f"Song {track_id}",
        artists=[Artist(artist_id, artist_name or f"Artist {artist_id}")],
        album_name="Album",
        release_date=f"{year}-01-01",
        duration_ms=duration_ms,
        uri=f"spotify:track:{track_id}",
        popularity=popularity,
    )


class FixedRandom(random.Random):
    """random() always 0.5: zero jitter, no optional script lines."""

    def random(self):
        return 0.5


class FakeCatalog:
    def __init__(
        self,
        tracks=None,
        recommended=None,
        features=None,
        search_error=None,
        recommend_error=None,
        features_error=None,
    ):
        self.tracks = list(tracks or [])
        self.recommended = recommended
        self.features = features or {}
        self.search_error = search_error
        self.recommend_error = recommend_error
        self.features_error = features_error
        self.searches = []
        self.recommend_calls = []
        self.played = []
        self.token = None
        self.closed = False

    async def search_many(self, queries, limit=10):
        self.searches.append(list(queries))
        if self.search_error:
            raise self.search_error
        return list(self.tracks)

    async def recommendations(self, **kwargs):
        self.recommend_calls.append(kwargs)
        if self.recommend_error:
            raise self.recommend_error
        return list(self.tracks if self.recommended is None else self.recommended)

    async def audio_features(self, track_ids):
        if self.features_error:
            raise self.features_error
        return {i: e for i, e in self.features.items() if i in track_ids}

    async def play(self, uri, device_id=None):
        self.played.append((uri, device_id))
        return True

    def set_token(self, token):
        self.token = token

    async def aclose(self):
        self.closed = True


class FakeSynthesizer:
    """Validates like the real service, returns canned audio or raises `error`."""

    def __init__(self, error=None, audio=b"ID3fake-audio"):
        self.error = error
        self.audio = audio
        self.calls = []
        self._seen = set()

    async def synthesize(self, text, voice=None, rate=None, pitch=None):
        clean = validate(sanitize(text))
        self.calls.append((clean, voice, rate, pitch))
        if self.error:
            raise self.error
        key = cache_key(clean, voice or "", rate or "", pitch or "")
        hit = key in self._seen
        self._seen.add(key)
        return SynthesisResult(self.audio, hit, key)

    def status(self):
        return {"cache_entries": len(self._seen), "circuit_open": False, "workers_spawned": len(self.calls)}


class FakeChannel:
    def __init__(self):
        self.events = []

    async def broadcast(self, event, data):
        self.events.append((event, data))

    def types(self):
        return [e for e, _ in self.events]

    def of(self, event):
        return [d for e, d in self.events if e == event]


@pytest.fixture
def fixed_rng():
    return FixedRandom(0)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def channel():
    return FakeChannel()
