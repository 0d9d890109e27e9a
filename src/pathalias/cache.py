"""In-process cache backend."""

from __future__ import annotations

import threading
from typing import Any

from pathalias.contracts import CacheBackend


class MemoryCacheBackend(CacheBackend):
    """Thread-safe dict-backed cache for a single process."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Any | None:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, data: Any) -> None:
        with self._lock:
            self._data[key] = data
