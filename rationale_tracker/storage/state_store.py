"""Key-value stores holding the serialized cockpit snapshot."""

import logging
import threading
from pathlib import Path
from typing import Dict, Optional

from ..utils.errors import PersistenceError

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    Minimal string store: get/set/remove by key.

    Implementations raise PersistenceError on I/O failure so the session
    can degrade to memory-only operation.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def remove(self, key: str) -> None:
        raise NotImplementedError


class MemoryStore(KeyValueStore):
    """Process-local store; contents are lost on restart."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class JsonFileStore(KeyValueStore):
    """
    Local file store, one JSON file per key.

    Writes go to a temporary sibling file first and are then moved into
    place, so a crash mid-write never leaves a truncated snapshot.
    """

    def __init__(self, state_dir: str = "data/state"):
        """
        Initialize JsonFileStore.

        Args:
            state_dir: Directory holding one <key>.json file per key
        """
        self.state_dir = Path(state_dir)
        self._lock = threading.Lock()
        logger.info(f"Initialized JsonFileStore: state_dir={self.state_dir}")

    def _path(self, key: str) -> Path:
        return self.state_dir / f"{key}.json"

    def get(self, key: str) -> Optional[str]:
        """
        Read the value stored under ``key``.

        Returns:
            Stored string, or None if nothing is stored

        Raises:
            PersistenceError: If the file exists but cannot be read
        """
        path = self._path(key)
        with self._lock:
            if not path.exists():
                return None
            try:
                content = path.read_text(encoding="utf-8")
            except OSError as e:
                logger.error(f"Failed to read {path}: {str(e)}")
                raise PersistenceError.store_unavailable(key, e, operation="read") from e

        logger.debug(f"Loaded {key} from {path} ({len(content)} characters)")
        return content

    def set(self, key: str, value: str) -> None:
        """
        Store ``value`` under ``key``.

        Raises:
            PersistenceError: If the file cannot be written
        """
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        with self._lock:
            try:
                self.state_dir.mkdir(parents=True, exist_ok=True)
                tmp_path.write_text(value, encoding="utf-8")
                tmp_path.replace(path)
            except OSError as e:
                logger.error(f"Failed to write {path}: {str(e)}")
                raise PersistenceError.write_failed(key, e) from e

        logger.debug(f"Saved {key} to {path} ({len(value)} characters)")

    def remove(self, key: str) -> None:
        """
        Delete the value stored under ``key``; missing keys are ignored.

        Raises:
            PersistenceError: If the file exists but cannot be deleted
        """
        path = self._path(key)
        with self._lock:
            try:
                path.unlink()
            except FileNotFoundError:
                return
            except OSError as e:
                logger.error(f"Failed to remove {path}: {str(e)}")
                raise PersistenceError.store_unavailable(key, e, operation="remove") from e

        logger.info(f"Removed stored {key}")


def create_store(backend: str = "file", state_dir: str = "data/state") -> KeyValueStore:
    """
    Build the configured store.

    Args:
        backend: "file" or "memory"
        state_dir: Directory for the file backend

    Raises:
        ValueError: If the backend name is unknown
    """
    if backend == "file":
        return JsonFileStore(state_dir)
    if backend == "memory":
        return MemoryStore()
    raise ValueError(f"Unknown storage backend: {backend}")
