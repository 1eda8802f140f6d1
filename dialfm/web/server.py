"""Starlette app — speech synthesis endpoint, station info, WebSocket sessions."""
import asyncio
import contextlib
import json
import logging
import re
import uuid
from typing import Optional

from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route, WebSocketRoute
from starlette.websockets import WebSocket, WebSocketDisconnect

from ..catalog import CatalogClient
from ..config import APP_VERSION, DATA_DIR
from ..engine import RadioSession
from ..errors import (
    AuthExpired,
    InvalidInput,
    RateLimited,
    SynthesisError,
    SynthesisUnavailable,
    format_error,
)
from ..ratelimit import SlidingWindowLimiter
from ..stations import STATIONS
from ..storage import JsonFileStore
from ..synthesis import VOICES, SpeechSynthesizer
from .state import SessionChannel

logger = logging.getLogger(__name__)

_AUDIO_HEADERS = {"Content-Type": "audio/mpeg", "Cache-Control": "public, max-age=1800"}
_JSON_CONTROL = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


# ── Health ───────────────────────────────────────────────────────────────────

async def health(request: Request):
    synth: SpeechSynthesizer = request.app.state.synthesizer
    return JSONResponse({
        "status": "ok",
        "version": APP_VERSION,
        "sessions": len(request.app.state.sessions),
        "tts": synth.status(),
    })


async def list_stations(request: Request):
    return JSONResponse({"stations": [s.to_dict() for s in STATIONS]})


# ── Speech synthesis ─────────────────────────────────────────────────────────

def _client_id(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "127.0.0.1"


async def _read_body(request: Request) -> Optional[dict]:
    """JSON body, retried once with stray control characters stripped."""
    raw = (await request.body()).decode("utf-8", "replace")
    try:
        body = json.loads(raw)
    except json.JSONDecodeError:
        try:
            body = json.loads(_JSON_CONTROL.sub("", raw))
        except json.JSONDecodeError:
            return None
    return body if isinstance(body, dict) else None


async def tts_synthesize(request: Request):
    try:
        limit = request.app.state.limiter.hit(f"tts:{_client_id(request)}")
    except RateLimited as e:
        return JSONResponse(
            {"error": "Too many requests", "retry_after": e.retry_after},
            status_code=429,
            headers={"Retry-After": str(e.retry_after)},
        )

    body = await _read_body(request)
    if body is None:
        return JSONResponse({"error": "Invalid JSON in request body"}, status_code=400)

    text = body.get("text")
    if not text or not isinstance(text, str):
        return JSONResponse({"error": "Text is required"}, status_code=400)

    synth: SpeechSynthesizer = request.app.state.synthesizer
    try:
        result = await synth.synthesize(
            text,
            voice=body.get("voice") or None,
            rate=body.get("rate") or None,
            pitch=body.get("pitch") or None,
        )
    except InvalidInput as e:
        return JSONResponse({"error": str(e)}, status_code=400)
    except SynthesisUnavailable as e:
        return JSONResponse(
            {"error": "TTS_CIRCUIT_OPEN", "message": "TTS service temporarily unavailable. Retrying shortly."},
            status_code=503,
            headers={"Retry-After": str(e.retry_after)},
        )
    except SynthesisError as e:
        format_error("tts_endpoint", text[:200], {"voice": body.get("voice")}, str(e))
        return JSONResponse(
            {"error": "TTS_SYNTHESIS_FAILED", "message": "Text-to-speech synthesis failed", "details": str(e)},
            status_code=500,
        )

    headers = dict(_AUDIO_HEADERS, **limit.headers())
    headers["X-Cache"] = "HIT" if result.cache_hit else "MISS"
    return Response(result.audio, headers=headers, media_type="audio/mpeg")


async def tts_voices(request: Request):
    return JSONResponse(VOICES)


# ── WebSocket ────────────────────────────────────────────────────────────────

async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    client_id = str(uuid.uuid4())
    channel = SessionChannel()
    queue = channel.subscribe(client_id)
    app = websocket.app
    logger.info("WS connected: %s", client_id)

    holder: dict = {"session": None}

    # Two tasks: one reads from client, one writes from queue
    async def _reader():
        try:
            while True:
                data = await websocket.receive_json()
                await _handle_ws_message(app, channel, holder, data)
        except WebSocketDisconnect:
            pass
        except Exception as e:
            logger.error("WS reader error: %s", e)

    async def _writer():
        try:
            while True:
                event, data = await queue.get()
                await websocket.send_json({"type": event, "data": data})
        except Exception:
            logger.debug("WS writer stopped for %s", client_id)

    reader_task = asyncio.create_task(_reader())
    writer_task = asyncio.create_task(_writer())

    try:
        done, pending = await asyncio.wait(
            [reader_task, writer_task],
            return_when=asyncio.FIRST_COMPLETED,
        )
        for task in pending:
            task.cancel()
    finally:
        channel.unsubscribe(client_id)
        session: Optional[RadioSession] = holder["session"]
        if session:
            app.state.sessions.discard(session)
            await session.catalog.aclose()
        logger.info("WS disconnected: %s", client_id)


def _field(data: dict, key: str) -> str:
    """String field from a client message; anything else reads as empty."""
    value = data.get(key)
    return value.strip() if isinstance(value, str) else ""


def _store_for(user: str) -> JsonFileStore:
    slug = re.sub(r"[^a-z0-9_-]+", "-", (user or "default").lower()).strip("-") or "default"
    return JsonFileStore(DATA_DIR / slug)


async def _handle_ws_message(app, channel: SessionChannel, holder: dict, data: dict):
    """Route incoming WebSocket messages to session methods."""
    if not isinstance(data, dict):
        await channel.broadcast("error", {"message": "Expected a JSON object"})
        return
    msg_type = data.get("type", "")
    session: Optional[RadioSession] = holder["session"]

    try:
        if msg_type == "start":
            if session is None:
                catalog = app.state.catalog_factory(_field(data, "token"))
                session = RadioSession(
                    channel,
                    catalog,
                    app.state.synthesizer,
                    app.state.store_factory(_field(data, "user")),
                    station_id=_field(data, "station") or None,
                    device_id=_field(data, "device_id") or None,
                )
                holder["session"] = session
                app.state.sessions.add(session)
            await channel.broadcast("sync", session.get_snapshot())
            await session.start()
            return

        if session is None:
            await channel.broadcast("error", {"message": "Send 'start' first"})
            return

        if msg_type == "track_ended":
            await session.advance()

        elif msg_type == "skip":
            await session.skip()

        elif msg_type == "like":
            await session.like()

        elif msg_type == "request":
            text = _field(data, "text")
            if text:
                await session.submit_request(text)

        elif msg_type == "clear_request":
            await session.clear_request()

        elif msg_type == "switch_station":
            station = _field(data, "station")
            if station:
                await session.switch_station(station)

        elif msg_type == "context":
            await session.update_context(weather=data.get("weather"), news=data.get("news"))

        elif msg_type == "token":
            token = _field(data, "token")
            if token:
                session.set_token(token)

        elif msg_type == "sync":
            await channel.broadcast("sync", session.get_snapshot())

        else:
            logger.warning("Unknown WS message type: %s", msg_type)

    except AuthExpired:
        await channel.broadcast("auth_expired", {})


# ── App factory ──────────────────────────────────────────────────────────────

def create_app(
    synthesizer: Optional[SpeechSynthesizer] = None,
    catalog_factory=None,
    store_factory=None,
    limiter: Optional[SlidingWindowLimiter] = None,
) -> Starlette:
    synthesizer = synthesizer or SpeechSynthesizer()

    @contextlib.asynccontextmanager
    async def lifespan(app):
        logger.info("dialfm %s ready", APP_VERSION)
        yield
        for session in list(app.state.sessions):
            await session.catalog.aclose()
        app.state.sessions.clear()
        logger.info("dialfm stopped")

    routes = [
        Route("/api/health", health),
        Route("/api/stations", list_stations),
        Route("/api/tts", tts_synthesize, methods=["POST"]),
        Route("/api/tts", tts_voices, methods=["GET"]),
        WebSocketRoute("/ws", websocket_endpoint),
    ]

    app = Starlette(routes=routes, lifespan=lifespan)
    app.state.synthesizer = synthesizer
    app.state.limiter = limiter or SlidingWindowLimiter()
    app.state.catalog_factory = catalog_factory or CatalogClient
    app.state.store_factory = store_factory or _store_for
    app.state.sessions = set()
    return app
