"""Module 1 — Config & Constants"""
import os
import shlex
import sys
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (one level up from dialfm/)
_ROOT = Path(__file__).parent.parent
load_dotenv(_ROOT / ".env")

# ─── Paths ────────────────────────────────────────────────────────────────────
ROOT_DIR = _ROOT
DATA_DIR = ROOT_DIR / os.getenv("DATA_DIR", "data")
OUTPUT_DIR = ROOT_DIR / os.getenv("OUTPUT_DIR", "output")
ERRORS_LOG = OUTPUT_DIR / "errors.log"

# ─── Catalog API ──────────────────────────────────────────────────────────────
CATALOG_API_URL = os.getenv("CATALOG_API_URL", "https://api.spotify.com/v1").rstrip("/")
CATALOG_MARKET = os.getenv("CATALOG_MARKET", "NL")
CATALOG_TIMEOUT = float(os.getenv("CATALOG_TIMEOUT", "10"))
CATALOG_RETRIES = int(os.getenv("CATALOG_RETRIES", "2"))
CATALOG_BACKOFF = float(os.getenv("CATALOG_BACKOFF", "0.5"))   # seconds, doubles per retry
SEARCH_LIMIT = 10
RECOMMENDATION_LIMIT = 30

# ─── Track selection ──────────────────────────────────────────────────────────
POOL_REFILL_THRESHOLD = 5       # refill when fewer candidates than this
MAX_RECENT_ARTISTS = 6          # artist cooldown ring
MIN_TRACK_MS = 60_000
MAX_TRACK_MS = 600_000
MIN_SEARCH_DURATION_MS = 30_000  # search results shorter than this are dropped
POPULARITY_FLOOR_MARGIN = 15
REQUEST_EXPIRY_TRACKS = 5

# Taste profile history limits
MAX_TASTE_ARTISTS = 80

# ─── Announcements ────────────────────────────────────────────────────────────
MAX_RECENT_SEGMENTS = 6

# ─── Speech synthesis ─────────────────────────────────────────────────────────
DEFAULT_VOICE = os.getenv("DEFAULT_VOICE", "nl-NL-FennaNeural")
DEFAULT_RATE = "default"
DEFAULT_PITCH = "default"
TTS_MAX_CHARS = 2000
TTS_CACHE_TTL = int(os.getenv("TTS_CACHE_TTL", "1800"))          # 30 min
TTS_WORKER_TIMEOUT = float(os.getenv("TTS_WORKER_TIMEOUT", "20"))
TTS_WORKER_POOL_SIZE = int(os.getenv("TTS_WORKER_POOL_SIZE", "4"))
TTS_ARGS_VIA_FILE = os.getenv("TTS_ARGS_VIA_FILE", "0").strip() in ("1", "true", "yes")
# Worker command, e.g. "node scripts/tts-worker.js". Empty means the bundled Python worker
_worker_cmd = os.getenv("TTS_WORKER_CMD", "").strip()
TTS_WORKER_CMD = shlex.split(_worker_cmd) if _worker_cmd else [sys.executable, "-m", "dialfm.tts_worker"]

# Circuit breaker: open after N failures inside the window, stay open for cooldown
CIRCUIT_FAILURE_THRESHOLD = 3
CIRCUIT_FAILURE_WINDOW = 300
CIRCUIT_COOLDOWN = 30

# Rate limiting per client (requests per window, seconds)
TTS_RATE_LIMIT = int(os.getenv("TTS_RATE_LIMIT", "20"))
TTS_RATE_WINDOW = int(os.getenv("TTS_RATE_WINDOW", "60"))

APP_VERSION = "0.3.0"

# ─── Web server ──────────────────────────────────────────────────────────────
WEB_HOST = os.getenv("WEB_HOST", "127.0.0.1")
WEB_PORT = int(os.getenv("WEB_PORT", "8888"))

# ─── Dev mode ─────────────────────────────────────────────────────────────────
DEV_MODE = os.getenv("DEV_MODE", "1").strip() in ("1", "true", "yes")
