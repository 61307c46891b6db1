"""
Storage module for the SafeSpeed system.

This module contains the KeyValueStore class, a small JSON-file backed
key-value store. It never raises on I/O or serialization problems: failures
are logged and reported as None (for reads) or False (for writes), so a
broken data file degrades the dashboard instead of crashing it.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Callable, Optional, Union

logger = logging.getLogger(__name__)


class StorageKeys:
    """Keys under which the dashboard stores its records."""

    SAFE_SPEED_CONFIG = "SAFE_SPEED_CONFIG"
    SAFE_SPEED_HISTORY = "SAFE_SPEED_HISTORY"
    SAFE_SPEED_USERS = "SAFE_SPEED_USERS"


class KeyValueStore:
    """
    JSON-file key-value store.

    All keys share one JSON object on disk. Values must be JSON-serializable.
    Each write re-reads the file, applies the change and rewrites it through a
    temporary file, under a lock shared by every call on this instance.
    """

    def __init__(self, path: Union[str, Path]) -> None:
        """
        Initialize the store.

        Args:
            path: Location of the JSON file. The file and its parent directory
                  are created on the first successful write.
        """
        self.path = Path(path)
        self._lock = threading.Lock()

    def _read_all(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object in {self.path}")
        return data

    def _write_all(self, data: dict[str, Any]) -> None:
        serialized = json.dumps(data, indent=2)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            f.write(serialized)
        tmp_path.replace(self.path)

    def get(self, key: str) -> Optional[Any]:
        """
        Retrieves and parses the value stored under key.

        Args:
            key: The storage key to retrieve

        Returns:
            The stored value, or None if the key doesn't exist or the file
            cannot be read
        """
        with self._lock:
            try:
                return self._read_all().get(key)
            except (OSError, ValueError) as e:
                logger.warning("Failed to get item from store with key %r: %s", key, e)
                return None

    def set(self, key: str, value: Any) -> bool:
        """
        Stores a JSON-serializable value under key.

        Args:
            key: The storage key to set
            value: The value to store

        Returns:
            True if successful, False otherwise
        """
        with self._lock:
            try:
                data = self._read_all()
                data[key] = value
                self._write_all(data)
                return True
            except (OSError, TypeError, ValueError) as e:
                logger.warning("Failed to set item in store with key %r: %s", key, e)
                return False

    def update(self, key: str, fn: Callable[[Any], Any], default: Any = None) -> bool:
        """
        Replaces the value under key with fn(current value) in one locked cycle.

        No other call on this store can run between the read and the write,
        so concurrent updates of the same key are never lost.

        Args:
            key: The storage key to update
            fn: Receives the current value (or default) and returns the new one
            default: Value passed to fn when the key is missing

        Returns:
            True if successful, False otherwise
        """
        with self._lock:
            try:
                data = self._read_all()
                data[key] = fn(data.get(key, default))
                self._write_all(data)
                return True
            except (OSError, TypeError, ValueError) as e:
                logger.warning("Failed to update item in store with key %r: %s", key, e)
                return False

    def remove(self, key: str) -> bool:
        """
        Removes key from the store. Removing a missing key succeeds.

        Returns:
            True if successful, False otherwise
        """
        with self._lock:
            try:
                data = self._read_all()
                if key in data:
                    del data[key]
                    self._write_all(data)
                return True
            except (OSError, ValueError) as e:
                logger.warning("Failed to remove item from store with key %r: %s", key, e)
                return False
