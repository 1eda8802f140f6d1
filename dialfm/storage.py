"""Key-value persistence — one JSON file per key, or in-memory for tests."""
import json
import logging
from pathlib import Path
from typing import Any, Optional

from .config import DATA_DIR

logger = logging.getLogger(__name__)


class KeyValueStore:
    """Minimal persistence interface: load(key) / save(key, value)."""

    def load(self, key: str) -> Optional[Any]:
        raise NotImplementedError

    def save(self, key: str, value: Any):
        raise NotImplementedError


class JsonFileStore(KeyValueStore):
    def __init__(self, directory: Path = DATA_DIR):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            return json.loads(path.read_text())
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Ignoring unreadable %s: %s", path, e)
            return None

    def save(self, key: str, value: Any):
        """Atomic write — write to tmp then replace."""
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(json.dumps(value, indent=2))
        tmp.replace(path)


class MemoryStore(KeyValueStore):
    def __init__(self):
        self.data: dict[str, str] = {}

    def load(self, key: str) -> Optional[Any]:
        raw = self.data.get(key)
        return json.loads(raw) if raw is not None else None

    def save(self, key: str, value: Any):
        # Serialize so callers can't mutate what's stored
        self.data[key] = json.dumps(value)
