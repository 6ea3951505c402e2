"""
Key-value state storage.

Holds the small amount of client state the assistant keeps between
views (resume sections, profile, tracked applications, last interview
results). Values are stored as JSON text under string keys, last write
wins, no schema versioning.
"""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from jobcoach.core.config import get_settings

logger = logging.getLogger(__name__)


@runtime_checkable
class KeyValueStore(Protocol):
    """Protocol for key-value state backends."""

    def get(self, key: str) -> Optional[str]: ...
    def set(self, key: str, value: str) -> None: ...
    def has(self, key: str) -> bool: ...
    def delete(self, key: str) -> None: ...


class InMemoryKeyValueStore:
    """Process-local store. Used by tests and short-lived sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def has(self, key: str) -> bool:
        return key in self._data

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self):
        return list(self._data.keys())


class JsonFileKeyValueStore(InMemoryKeyValueStore):
    """
    Store backed by a single JSON file.

    The whole file is rewritten on every set/delete. A missing or corrupt
    file starts the store empty.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path or get_settings().state_store_path)
        super().__init__(self._load())

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable state file {self.path}: {e}")
            return {}
        if not isinstance(data, dict):
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2)
        tmp_path.replace(self.path)

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self._flush()

    def delete(self, key: str) -> None:
        super().delete(key)
        self._flush()


def read_json(store: KeyValueStore, key: str) -> Optional[Any]:
    """Decode a stored JSON value; unreadable values read as absent."""
    raw = store.get(key)
    if not raw:
        return None
    try:
        return json.loads(raw)
    except (TypeError, json.JSONDecodeError):
        logger.warning(f"Stored value for '{key}' is not valid JSON, ignoring")
        return None


def write_json(store: KeyValueStore, key: str, value: Any) -> None:
    """Encode and store a JSON value."""
    store.set(key, json.dumps(value))
