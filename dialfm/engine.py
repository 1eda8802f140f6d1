"""Radio session engine — one listener's station, driven by events.

Receives commands via methods, broadcasts state via a SessionChannel.
All public coroutines run under one lock, so a session behaves as a single
actor. Station changes bump a generation counter; work started under an
older generation finishes but its result is dropped.
"""
import asyncio
import base64
import logging
import random
from datetime import datetime
from typing import Optional

from .errors import (
    CatalogError,
    InvalidInput,
    NoEligibleCandidate,
    SynthesisError,
    format_error,
)
from .fetcher import CandidateFetcher
from .models import NewsArticle, Track, WeatherSnapshot
from .request_parser import DJRequest, parse_request
from .scheduler import AnnouncementScheduler
from .scripts import ScriptContext, generate_segments, request_acknowledgement
from .selector import TrackSelector
from .stations import StationProfile, current_show, get_station
from .storage import KeyValueStore
from .synthesis import SpeechSynthesizer, sanitize
from .taste import PreferenceStore, TasteStore

logger = logging.getLogger(__name__)


class RadioSession:
    def __init__(
        self,
        channel,
        catalog,
        synthesizer: SpeechSynthesizer,
        store: KeyValueStore,
        station_id: Optional[str] = None,
        device_id: Optional[str] = None,
        rng: Optional[random.Random] = None,
    ):
        """channel: SessionChannel (or anything with async broadcast(event, data))."""
        self.channel = channel
        self.catalog = catalog
        self.synthesizer = synthesizer
        self.device_id = device_id
        self.rng = rng or random.Random()

        self.taste = TasteStore(store)
        self.preferences = PreferenceStore(store).load()
        self.station: StationProfile = get_station(station_id)
        self.selector = TrackSelector(CandidateFetcher(catalog, self.rng), self.taste.profile, rng=self.rng)
        self.scheduler = AnnouncementScheduler(self.station, self.preferences.dj_frequency, self.rng)

        self.request: Optional[DJRequest] = None
        self.current: Optional[Track] = None
        self.previous: Optional[Track] = None
        self.weather: Optional[WeatherSnapshot] = None
        self.news: list[NewsArticle] = []

        self._lock = asyncio.Lock()
        self._generation = 0
        self.started = False

    # ── Public API (called from WebSocket handlers) ──────────────────────────

    async def start(self) -> Optional[Track]:
        """First track of the session, introduced by the DJ."""
        async with self._lock:
            self.started = True
            return await self._play_next(segment="intro")

    async def advance(self) -> Optional[Track]:
        """Current track finished — maybe talk, then play the next one."""
        async with self._lock:
            return await self._play_next()

    async def skip(self) -> Optional[Track]:
        async with self._lock:
            if self.current:
                self.taste.record_feedback("skip", self.current)
            return await self._play_next()

    async def like(self):
        async with self._lock:
            if not self.current:
                return
            self.taste.record_feedback("like", self.current)
            await self.channel.broadcast("liked", {"track": self.current.to_dict()})

    async def submit_request(self, text: str) -> Optional[DJRequest]:
        """Parse a listener request; on success the DJ confirms it and the
        next track already honours it."""
        async with self._lock:
            request = parse_request(text)
            if not request:
                await self.channel.broadcast("request_rejected", {"text": text})
                return None
            self.request = request
            self.selector.state.candidate_pool = []
            await self.channel.broadcast("request_accepted", request.to_dict())
            await self._speak("request_ack", request_acknowledgement(self.station.id, request.label, self.rng))
            await self._play_next()
            return request

    async def clear_request(self):
        async with self._lock:
            self._clear_request()

    async def switch_station(self, station_id: str) -> Optional[Track]:
        self._generation += 1      # invalidate in-flight work before waiting for the lock
        async with self._lock:
            self.station = get_station(station_id)
            self.selector.reset()
            self.scheduler.reset(self.station)
            self.request = None
            self.previous = self.current = None
            await self.channel.broadcast("station", self.station.to_dict())
            return await self._play_next(segment="intro")

    async def update_context(self, weather: Optional[dict] = None, news: Optional[list] = None):
        if weather is not None:
            self.weather = WeatherSnapshot.from_dict(weather) if isinstance(weather, dict) and weather else None
        if isinstance(news, list):
            self.news = [NewsArticle.from_dict(a) for a in news if isinstance(a, dict) and a.get("title")]

    def set_token(self, token: str):
        self.catalog.set_token(token)

    def get_snapshot(self) -> dict:
        return {
            "station": self.station.to_dict(),
            "show": current_show(self.station).name,
            "now_playing": self.current.to_dict() if self.current else None,
            "request": self.request.to_dict() if self.request else None,
            "songs_until_announcement": self.scheduler.state.songs_until_announcement,
            "selection": self.selector.state.stats(),
        }

    # ── Internals ────────────────────────────────────────────────────────────

    def _clear_request(self):
        if self.request:
            self.request = None
            self.selector.state.candidate_pool = []

    async def _play_next(self, segment: Optional[str] = None) -> Optional[Track]:
        gen = self._generation
        station = self.station
        now = datetime.now()

        try:
            track = await self.selector.select_next(station, self.request, now)
        except NoEligibleCandidate as e:
            format_error("track_select", params={"station": station.id}, raw=str(e))
            await self.channel.broadcast("nothing_to_play", {"station": station.id})
            return None
        if gen != self._generation:
            return None

        if self.request and self.request.remaining_tracks <= 0:
            label = self.request.label
            self.request = None
            await self.channel.broadcast("request_expired", {"label": label})

        if segment is None and self.scheduler.on_track():
            segment = self.scheduler.pick_segment(self.weather is not None, bool(self.news), now)
        if segment:
            ctx = ScriptContext(
                previous_track=self.current,
                next_track=track,
                weather=self.weather,
                news=self.news,
                user_name=self.preferences.user_name,
            )
            jingle = self.scheduler.should_prepend_jingle(segment)
            for seg_type, script in generate_segments(station.id, segment, ctx, jingle, self.rng, now):
                await self._speak(seg_type, script)
                if gen != self._generation:
                    return None
            self.scheduler.after_announcement(now)

        self.previous, self.current = self.current, track
        await self._start_playback(track)
        await self.channel.broadcast("now_playing", {
            "track": track.to_dict(),
            "station": station.id,
            "slot": self.selector.state.slot,
            "request": self.request.to_dict() if self.request else None,
        })
        return track

    async def _start_playback(self, track: Track):
        if not self.device_id:
            return
        try:
            await self.catalog.play(track.uri, self.device_id)
        except CatalogError as e:
            format_error("playback", params={"uri": track.uri, "device": self.device_id}, raw=str(e))

    async def _speak(self, segment: str, script: str) -> bool:
        """Synthesize and publish one spoken segment. Failures are logged and skipped."""
        dj = self.station.dj
        voice = self.preferences.dj_voice or dj.voice
        try:
            result = await self.synthesizer.synthesize(script, voice, dj.rate, dj.pitch)
        except (SynthesisError, InvalidInput) as e:
            format_error("speech", script[:200], {"segment": segment, "voice": voice}, str(e))
            return False
        await self.channel.broadcast("speech", {
            "segment": segment,
            "text": sanitize(script),
            "audio": base64.b64encode(result.audio).decode("ascii"),
            "cache": "HIT" if result.cache_hit else "MISS",
        })
        return True
