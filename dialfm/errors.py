"""Error taxonomy + structured error logging (JSON lines to errors.log)."""
import json
import logging
import sys
from datetime import datetime
from typing import Optional

from .config import ERRORS_LOG, OUTPUT_DIR, DEV_MODE

logger = logging.getLogger(__name__)

_FRIENDLY_MESSAGES = {
    "catalog_fetch": "Couldn't reach the music catalog, trying another way...",
    "track_select": "Nothing left to play on this station right now.",
    "speech": "The DJ lost their voice for a moment, music keeps playing.",
    "playback": "Couldn't start the track on your device.",
    "tts_endpoint": "Speech synthesis failed.",
}


class RadioError(Exception):
    """Base class for everything the radio engine raises on purpose."""


class AuthExpired(RadioError):
    """Catalog credentials rejected (HTTP 401). Never absorbed by fallbacks."""


class CatalogError(RadioError):
    """Non-auth catalog failure after retries."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.status = status


class NoEligibleCandidate(RadioError):
    """Pool, relaxed filter and refetch all came up empty."""


class InvalidInput(RadioError):
    pass


class RateLimited(RadioError):
    def __init__(self, retry_after: int):
        super().__init__(f"Too many requests, retry after {retry_after}s")
        self.retry_after = retry_after


class SynthesisError(RadioError):
    pass


class SynthesisTimeout(SynthesisError):
    pass


class SynthesisFailure(SynthesisError):
    pass


class SynthesisUnavailable(SynthesisError):
    """Circuit breaker is open."""

    def __init__(self, retry_after: int):
        super().__init__("Speech synthesis temporarily unavailable")
        self.retry_after = retry_after


def format_error(
    stage: str,
    user_msg: str = "",
    params: Optional[dict] = None,
    raw: str = "",
) -> str:
    entry = {
        "timestamp": datetime.now().isoformat(),
        "stage": stage,
        "input": user_msg,
        "params": params,
        "error": raw,
        "python": sys.version.split()[0],
    }

    _append_to_log(entry)
    logger.error("Error at %s: %s", stage, raw)

    if DEV_MODE:
        return json.dumps(entry, indent=2)
    return _FRIENDLY_MESSAGES.get(stage, f"Something went wrong ({stage}).")


def _append_to_log(entry: dict):
    try:
        OUTPUT_DIR.mkdir(parents=True, exist_ok=True)
        with open(ERRORS_LOG, "a") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError:
        logger.warning("Could not write to %s", ERRORS_LOG)
