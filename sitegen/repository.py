"""
In-process repository.
======================
Replaces ad hoc module-level dictionaries. One instance per process,
injected into the components that need storage; tests call clear().
"""
import threading
from typing import Any, Dict, List

from .interfaces import IRepository


class InMemoryRepository(IRepository):
    """Thread-safe dict-backed store. Generators write to it from worker threads."""

    def __init__(self):
        self._data: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            return self._data.get(key, default)

    def put(self, key: str, value: Any):
        with self._lock:
            self._data[key] = value

    def delete(self, key: str) -> bool:
        with self._lock:
            return self._data.pop(key, None) is not None

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return sorted(k for k in self._data if k.startswith(prefix))

    def clear(self):
        with self._lock:
            self._data.clear()

    def __len__(self):
        with self._lock:
            return len(self._data)
