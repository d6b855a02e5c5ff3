from __future__ import annotations

from abc import ABC, abstractmethod
from threading import RLock
from typing import Dict, Optional

from .settings import Settings


# PUBLIC_INTERFACE
class KeyValueBackend(ABC):
    """String-keyed, string-valued persistence used by the local store."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored value for key, or None if absent."""

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store value under key, overwriting any prior value."""

    @abstractmethod
    def delete(self, key: str) -> bool:
        """Remove key. Return True if it existed."""


class InMemoryBackend(KeyValueBackend):
    """
    Thread-safe in-memory backend suitable for testing and default runtime.
    """

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._lock = RLock()
        self._values: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._values[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._values.pop(key, None) is not None


# PUBLIC_INTERFACE
def get_backend(settings: Settings) -> KeyValueBackend:
    """
    Factory returning the configured backend.
    - memory: InMemoryBackend
    - sqlite: SQLiteBackend stored at settings.sqlite_db_path
    """
    if settings.persistence_backend == "sqlite":
        from .db import SQLiteBackend

        return SQLiteBackend(settings.sqlite_db_path)
    return InMemoryBackend()
