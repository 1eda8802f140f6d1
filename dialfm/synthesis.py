"""Module 10 — Speech synthesis service

sanitize → cache → isolated worker process → validate.
The worker is any command that accepts {text, voice, outputPath, rate, pitch}
as JSON (stdin, or an args-file path as the last argument), writes an audio
file to outputPath and prints "OK".
"""
import asyncio
import hashlib
import json
import logging
import os
import re
import tempfile
import time
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .config import (
    DEFAULT_VOICE,
    DEFAULT_RATE,
    DEFAULT_PITCH,
    TTS_MAX_CHARS,
    TTS_CACHE_TTL,
    TTS_WORKER_TIMEOUT,
    TTS_WORKER_POOL_SIZE,
    TTS_WORKER_CMD,
    TTS_ARGS_VIA_FILE,
    CIRCUIT_FAILURE_THRESHOLD,
    CIRCUIT_FAILURE_WINDOW,
    CIRCUIT_COOLDOWN,
)
from .errors import (
    InvalidInput,
    SynthesisFailure,
    SynthesisTimeout,
    SynthesisUnavailable,
)

logger = logging.getLogger(__name__)

# ── Sanitization ──────────────────────────────────────────────────────────────

_CONTROL = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")
_BREAK = re.compile(r"\s*<break[^>]*/?>\s*", re.IGNORECASE)
_TAG = re.compile(r"<[^>]+>")
_LONG_WS = re.compile(r"\s{3,}")
_SPACES = re.compile(r"[ \t]{2,}")
_COMMA_RUN = re.compile(r"\s*,(?:\s*,)+\s*")
_COMMA_AFTER_STOP = re.compile(r"([.!?])(?:\s*,)+\s*")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([,.!?])")
_EDGES = re.compile(r"^[\s,]+|[\s,]+$")


def sanitize(text: str) -> str:
    """Plain speakable text from marked-up script text. Idempotent."""
    t = _CONTROL.sub("", text or "")
    t = _BREAK.sub(", ", t)
    t = _TAG.sub(" ", t)
    t = _LONG_WS.sub(" ", t)
    t = _SPACES.sub(" ", t)
    t = _COMMA_RUN.sub(", ", t)
    t = _COMMA_AFTER_STOP.sub(r"\1 ", t)
    t = _SPACE_BEFORE_PUNCT.sub(r"\1", t)
    return _EDGES.sub("", t)


def validate(clean: str) -> str:
    if not clean:
        raise InvalidInput("Text is empty after sanitization")
    if len(clean) > TTS_MAX_CHARS:
        raise InvalidInput(f"Text too long (max {TTS_MAX_CHARS} chars)")
    return clean


def cache_key(text: str, voice: str, rate: str, pitch: str) -> str:
    return hashlib.sha256(f"{voice}:{rate}:{pitch}:{text}".encode("utf-8")).hexdigest()


# ── Cache ─────────────────────────────────────────────────────────────────────


class AudioCache:
    """TTL-only in-memory cache. Expired entries are swept on every lookup."""

    def __init__(self, ttl: float = TTS_CACHE_TTL, clock=time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[str, tuple[bytes, float]] = {}

    def __len__(self):
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries

    def sweep(self):
        now = self.clock()
        expired = [k for k, (_, ts) in self._entries.items() if now - ts > self.ttl]
        for k in expired:
            del self._entries[k]

    def get(self, key: str) -> Optional[bytes]:
        self.sweep()
        entry = self._entries.get(key)
        return entry[0] if entry else None

    def put(self, key: str, audio: bytes):
        self._entries[key] = (audio, self.clock())


# ── Circuit breaker ───────────────────────────────────────────────────────────


class CircuitBreaker:
    def __init__(
        self,
        threshold: int = CIRCUIT_FAILURE_THRESHOLD,
        window: float = CIRCUIT_FAILURE_WINDOW,
        cooldown: float = CIRCUIT_COOLDOWN,
        clock=time.monotonic,
    ):
        self.threshold = threshold
        self.window = window
        self.cooldown = cooldown
        self.clock = clock
        self.failures = 0
        self.last_failure = 0.0
        self.opened_at: Optional[float] = None

    @property
    def is_open(self) -> bool:
        if self.opened_at is None:
            return False
        if self.clock() - self.opened_at > self.cooldown:
            # Half-open: let the next call through
            self.opened_at = None
            self.failures = 0
            logger.info("TTS circuit breaker closed (cooldown expired)")
            return False
        return True

    @property
    def retry_after(self) -> int:
        if self.opened_at is None:
            return 0
        return max(1, int(self.cooldown - (self.clock() - self.opened_at) + 0.999))

    def record_failure(self):
        now = self.clock()
        if now - self.last_failure > self.window:
            self.failures = 0
        self.failures += 1
        self.last_failure = now
        if self.failures >= self.threshold and self.opened_at is None:
            self.opened_at = now
            logger.warning("TTS circuit breaker opened after %d failures", self.failures)

    def record_success(self):
        self.failures = 0
        self.opened_at = None


# ── Worker pool ───────────────────────────────────────────────────────────────


class WorkerPool:
    """Bounded concurrency for synthesis subprocesses. No global lock:
    up to `size` workers run at once, the rest wait on the semaphore."""

    def __init__(
        self,
        command: Optional[list[str]] = None,
        size: int = TTS_WORKER_POOL_SIZE,
        timeout: float = TTS_WORKER_TIMEOUT,
        args_via_file: bool = TTS_ARGS_VIA_FILE,
    ):
        self.command = list(command or TTS_WORKER_CMD)
        self.timeout = timeout
        self.args_via_file = args_via_file
        self._slots = asyncio.Semaphore(size)
        self.spawned = 0

    async def run(self, args: dict):
        async with self._slots:
            await self._run(args)

    async def _run(self, args: dict):
        payload = json.dumps(args).encode("utf-8")
        cmd = list(self.command)
        args_file: Optional[Path] = None
        if self.args_via_file:
            fd, name = tempfile.mkstemp(prefix="tts-args-", suffix=".json")
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            args_file = Path(name)
            cmd.append(name)

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdin=asyncio.subprocess.DEVNULL if args_file else asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            self.spawned += 1
            try:
                stdout, stderr = await asyncio.wait_for(
                    proc.communicate(None if args_file else payload),
                    timeout=self.timeout,
                )
            except asyncio.TimeoutError:
                await _kill(proc)
                raise SynthesisTimeout(f"TTS worker timed out after {self.timeout:g}s")
            except asyncio.CancelledError:
                await _kill(proc)
                raise
        except OSError as e:
            raise SynthesisFailure(f"Could not start TTS worker: {e}")
        finally:
            if args_file:
                args_file.unlink(missing_ok=True)

        out = stdout.decode("utf-8", "replace").strip()
        err = stderr.decode("utf-8", "replace").strip()
        if proc.returncode != 0:
            raise SynthesisFailure(f"TTS worker exited {proc.returncode}: {err[:300]}")
        if out.splitlines()[-1:] != ["OK"]:
            raise SynthesisFailure(f"TTS worker unexpected output: {out[:200]!r} stderr: {err[:200]}")


async def _kill(proc):
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()


# ── Service ───────────────────────────────────────────────────────────────────


@dataclass
class SynthesisResult:
    audio: bytes
    cache_hit: bool
    key: str


class SpeechSynthesizer:
    def __init__(
        self,
        pool: Optional[WorkerPool] = None,
        cache: Optional[AudioCache] = None,
        breaker: Optional[CircuitBreaker] = None,
        tmp_dir: Optional[Path] = None,
        retries: int = 1,
    ):
        self.pool = pool or WorkerPool()
        self.cache = cache or AudioCache()
        self.breaker = breaker or CircuitBreaker()
        self.tmp_dir = Path(tmp_dir or tempfile.gettempdir())
        self.retries = retries

    async def synthesize(
        self,
        text: str,
        voice: Optional[str] = None,
        rate: Optional[str] = None,
        pitch: Optional[str] = None,
    ) -> SynthesisResult:
        clean = validate(sanitize(text))
        voice = voice or DEFAULT_VOICE
        rate = rate or DEFAULT_RATE
        pitch = pitch or DEFAULT_PITCH
        key = cache_key(clean, voice, rate, pitch)

        cached = self.cache.get(key)
        if cached is not None:
            return SynthesisResult(cached, True, key)

        if self.breaker.is_open:
            raise SynthesisUnavailable(self.breaker.retry_after)

        try:
            audio = await self._render_with_retry(clean, voice, rate, pitch, key)
        except (SynthesisTimeout, SynthesisFailure):
            self.breaker.record_failure()
            raise
        self.breaker.record_success()
        self.cache.put(key, audio)
        return SynthesisResult(audio, False, key)

    async def _render_with_retry(self, text, voice, rate, pitch, key) -> bytes:
        attempt = 0
        while True:
            try:
                return await self._render(text, voice, rate, pitch, key)
            except SynthesisFailure as e:
                if attempt >= self.retries:
                    raise
                attempt += 1
                logger.warning("TTS attempt %d failed, retrying: %s", attempt, e)

    async def _render(self, text, voice, rate, pitch, key) -> bytes:
        self.tmp_dir.mkdir(parents=True, exist_ok=True)
        out_path = self.tmp_dir / f"tts-{key[:16]}-{uuid.uuid4().hex[:8]}.mp3"
        try:
            await self.pool.run({
                "text": text,
                "voice": voice,
                "outputPath": str(out_path),
                "rate": rate,
                "pitch": pitch,
            })
            if not out_path.exists():
                raise SynthesisFailure("TTS worker produced no audio file")
            audio = out_path.read_bytes()
        finally:
            out_path.unlink(missing_ok=True)
        if not audio:
            raise SynthesisFailure("Empty audio output")
        return audio

    def status(self) -> dict:
        return {
            "cache_entries": len(self.cache),
            "circuit_open": self.breaker.is_open,
            "workers_spawned": self.pool.spawned,
        }


# Static voice catalog served by GET /api/tts
VOICES = [
    {
        "ShortName": "nl-NL-FennaNeural",
        "Gender": "Female",
        "Locale": "nl-NL",
        "FriendlyName": "Microsoft Fenna Online (Natural) - Dutch (Netherlands)",
    },
    {
        "ShortName": "nl-NL-ColetteNeural",
        "Gender": "Female",
        "Locale": "nl-NL",
        "FriendlyName": "Microsoft Colette Online (Natural) - Dutch (Netherlands)",
    },
    {
        "ShortName": "nl-NL-MaartenNeural",
        "Gender": "Male",
        "Locale": "nl-NL",
        "FriendlyName": "Microsoft Maarten Online (Natural) - Dutch (Netherlands)",
    },
    {
        "ShortName": "nl-BE-ArnaudNeural",
        "Gender": "Male",
        "Locale": "nl-BE",
        "FriendlyName": "Microsoft Arnaud Online (Natural) - Dutch (Belgium)",
    },
    {
        "ShortName": "nl-BE-DenaNeural",
        "Gender": "Female",
        "Locale": "nl-BE",
        "FriendlyName": "Microsoft Dena Online (Natural) - Dutch (Belgium)",
    },
]
