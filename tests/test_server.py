"""HTTP and WebSocket surface."""
import pytest
from starlette.testclient import TestClient

from conftest import FakeCatalog, FakeSynthesizer, make_track
from dialfm.errors import SynthesisFailure, SynthesisUnavailable
from dialfm.ratelimit import SlidingWindowLimiter
from dialfm.storage import MemoryStore
from dialfm.web.server import create_app


def _client(synth=None, limit=100, tracks=None):
    catalogs = []

    def catalog_factory(token):
        catalog = FakeCatalog(tracks=tracks if tracks is not None else [make_track(f"t{i}") for i in range(8)])
        catalog.set_token(token)
        catalogs.append(catalog)
        return catalog

    app = create_app(
        synthesizer=synth or FakeSynthesizer(),
        catalog_factory=catalog_factory,
        store_factory=lambda user: MemoryStore(),
        limiter=SlidingWindowLimiter(limit=limit, window=60),
    )
    return TestClient(app), catalogs


class TestInfo:
    def test_health(self):
        client, _ = _client()
        with client:
            body = client.get("/api/health").json()
        assert body["status"] == "ok"
        assert body["sessions"] == 0
        assert "circuit_open" in body["tts"]

    def test_stations(self):
        client, _ = _client()
        with client:
            stations = client.get("/api/stations").json()["stations"]
        assert len(stations) == 10
        assert stations[0]["id"] == "pop"
        assert set(stations[0]["shows"]) == {"morning", "afternoon", "evening", "night"}

    def test_voices(self):
        client, _ = _client()
        with client:
            voices = client.get("/api/tts").json()
        assert "nl-NL-FennaNeural" in [v["ShortName"] for v in voices]


class TestSynthesisEndpoint:
    def test_returns_audio(self):
        client, _ = _client()
        with client:
            first = client.post("/api/tts", json={"text": "Hallo daar", "voice": "nl-NL-MaartenNeural"})
            second = client.post("/api/tts", json={"text": "Hallo daar", "voice": "nl-NL-MaartenNeural"})
        assert first.status_code == 200
        assert first.headers["content-type"] == "audio/mpeg"
        assert first.content == b"ID3fake-audio"
        assert first.headers["X-Cache"] == "MISS"
        assert second.headers["X-Cache"] == "HIT"
        assert first.headers["X-RateLimit-Limit"] == "100"

    def test_control_characters_in_body_tolerated(self):
        client, _ = _client()
        with client:
            r = client.post("/api/tts", content=b'{"text": "Hallo\x01 daar"}', headers={"content-type": "application/json"})
        assert r.status_code == 200

    @pytest.mark.parametrize("body,message", [
        (b"{not json", "Invalid JSON in request body"),
        (b'["Hallo"]', "Invalid JSON in request body"),
        (b"{}", "Text is required"),
        (b'{"text": 42}', "Text is required"),
        (b'{"text": "<break time=\\"1s\\"/>"}', "Text is empty after sanitization"),
    ])
    def test_bad_requests(self, body, message):
        client, _ = _client()
        with client:
            r = client.post("/api/tts", content=body, headers={"content-type": "application/json"})
        assert r.status_code == 400
        assert r.json()["error"] == message

    def test_too_long(self):
        client, _ = _client()
        with client:
            r = client.post("/api/tts", json={"text": "a" * 2001})
        assert r.status_code == 400
        assert "too long" in r.json()["error"]

    def test_rate_limited(self):
        client, _ = _client(limit=2)
        with client:
            codes = [client.post("/api/tts", json={"text": "Hoi"}).status_code for _ in range(3)]
            last = client.post("/api/tts", json={"text": "Hoi"})
        assert codes == [200, 200, 429]
        assert int(last.headers["Retry-After"]) > 0

    def test_circuit_open(self):
        client, _ = _client(synth=FakeSynthesizer(error=SynthesisUnavailable(12)))
        with client:
            r = client.post("/api/tts", json={"text": "Hoi"})
        assert r.status_code == 503
        assert r.headers["Retry-After"] == "12"
        assert r.json()["error"] == "TTS_CIRCUIT_OPEN"

    def test_synthesis_failure(self):
        client, _ = _client(synth=FakeSynthesizer(error=SynthesisFailure("worker exited 1")))
        with client:
            r = client.post("/api/tts", json={"text": "Hoi"})
        assert r.status_code == 500
        body = r.json()
        assert body["error"] == "TTS_SYNTHESIS_FAILED"
        assert "worker exited 1" in body["details"]


def _receive_until(ws, event, limit=20):
    seen = []
    for _ in range(limit):
        msg = ws.receive_json()
        seen.append(msg)
        if msg["type"] == event:
            return msg, seen
    raise AssertionError(f"No {event!r} in {[m['type'] for m in seen]}")


class TestWebSocket:
    def test_commands_need_a_session(self):
        client, _ = _client()
        with client, client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "skip"})
            assert ws.receive_json() == {"type": "error", "data": {"message": "Send 'start' first"}}

    def test_start_plays_with_intro(self):
        client, catalogs = _client()
        with client, client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "start", "token": "tok", "station": "rock"})
            sync, _ = _receive_until(ws, "sync")
            assert sync["data"]["station"]["id"] == "rock"
            playing, seen = _receive_until(ws, "now_playing")
            assert playing["data"]["station"] == "rock"
            speech = [m for m in seen if m["type"] == "speech"]
            assert speech and speech[-1]["data"]["segment"] == "intro"
            assert speech[-1]["data"]["audio"]
        assert catalogs[0].token == "tok"
        assert catalogs[0].closed, "Catalog client is closed when the socket goes away"

    def test_request_round_trip(self):
        tracks = [make_track(f"t{i}", year=1985 if i % 2 else 2023) for i in range(12)]
        client, _ = _client(tracks=tracks)
        with client, client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "start", "token": "tok"})
            _receive_until(ws, "now_playing")
            ws.send_json({"type": "request", "text": "jaren 80"})
            accepted, _ = _receive_until(ws, "request_accepted")
            assert accepted["data"]["year_range"] == [1980, 1989]
            playing, _ = _receive_until(ws, "now_playing")
            assert playing["data"]["track"]["release_date"].startswith("1985")

    def test_unparseable_request(self):
        client, _ = _client()
        with client, client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "start", "token": "tok"})
            _receive_until(ws, "now_playing")
            ws.send_json({"type": "request", "text": "blablabla"})
            rejected, _ = _receive_until(ws, "request_rejected")
            assert rejected["data"]["text"] == "blablabla"

    def test_malformed_messages_keep_the_session_alive(self):
        client, _ = _client()
        with client, client.websocket_connect("/ws") as ws:
            ws.send_json({"type": "start", "token": "tok"})
            _receive_until(ws, "now_playing")
            ws.send_json({"type": "request", "text": None})
            ws.send_json({"type": "switch_station", "station": 7})
            ws.send_json({"type": "token", "token": ["tok"]})
            ws.send_json({"type": "context", "weather": "sunny", "news": [1, "x", {"title": "Nieuws"}]})
            ws.send_json(["not", "an", "object"])
            error, _ = _receive_until(ws, "error")
            assert error["data"]["message"] == "Expected a JSON object"
            ws.send_json({"type": "sync"})
            sync, _ = _receive_until(ws, "sync")
            assert sync["data"]["station"]["id"] == "pop"
