"""Process-lifetime memo caches owned by a resolution context."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Hashable, Optional, Tuple, TypeVar

from ..models import PackageDescriptor

T = TypeVar("T")

_MISSING = object()


class MemoCache(Generic[T]):
    """Key/value store without expiry and with at most one in-flight compute per key.

    Concurrent callers asking for a key that is being computed block on the
    same per-key lock and receive the stored result instead of computing it
    again.
    """

    def __init__(self, name: str):
        self.name = name
        self._values: Dict[Hashable, T] = {}
        self._locks: Dict[Hashable, threading.Lock] = {}
        self._guard = threading.Lock()
        self._hits = 0
        self._misses = 0

    def _lock_for(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def __contains__(self, key: Hashable) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._values)

    def get(self, key: Hashable, default: Optional[T] = None) -> Optional[T]:
        value = self._values.get(key, _MISSING)
        if value is _MISSING:
            self._misses += 1
            return default
        self._hits += 1
        return value  # type: ignore[return-value]

    def set(self, key: Hashable, value: T) -> None:
        self._values[key] = value

    def get_or_compute(
        self,
        key: Hashable,
        compute: Callable[[], T],
        *,
        store_if: Callable[[T], bool] = lambda _value: True,
    ) -> T:
        """Return the cached value for ``key`` or compute it under the key lock.

        Args:
            key: Cache key.
            compute: Zero-argument producer, called at most once per stored key.
            store_if: Predicate deciding whether a computed value is kept.
        """
        value = self._values.get(key, _MISSING)
        if value is not _MISSING:
            self._hits += 1
            return value  # type: ignore[return-value]
        lock = self._lock_for(key)
        try:
            with lock:
                value = self._values.get(key, _MISSING)
                if value is not _MISSING:
                    self._hits += 1
                    return value  # type: ignore[return-value]
                self._misses += 1
                computed = compute()
                if store_if(computed):
                    self._values[key] = computed
                return computed
        finally:
            self._release_lock(key, lock)

    def _release_lock(self, key: Hashable, lock: threading.Lock) -> None:
        # Stored keys take the lock-free path; misses are recomputed under a fresh lock.
        with self._guard:
            if self._locks.get(key) is lock:
                del self._locks[key]

    def clear(self) -> None:
        with self._guard:
            self._values.clear()
            self._locks.clear()

    def stats(self) -> Dict[str, Any]:
        """Get cache statistics."""
        return {"name": self.name, "entries": len(self._values), "hits": self._hits, "misses": self._misses}


@dataclass
class ResolutionContext:
    """Caches and cancellation shared by every resolution run of one engine.

    ``version_cache``:      (name, version_range) -> resolved version
    ``descriptor_cache``:   (name, version) -> PackageDescriptor
    ``license_file_cache``: (id, version) -> license file text, None when the
                            single download attempt failed
    """
    version_cache: MemoCache[Optional[str]] = field(default_factory=lambda: MemoCache("versions"))
    descriptor_cache: MemoCache[PackageDescriptor] = field(default_factory=lambda: MemoCache("descriptors"))
    license_file_cache: MemoCache[Optional[str]] = field(default_factory=lambda: MemoCache("license_files"))
    cancel_event: threading.Event = field(default_factory=threading.Event)

    @property
    def cancelled(self) -> bool:
        return self.cancel_event.is_set()

    def cancel(self) -> None:
        self.cancel_event.set()

    def stats(self) -> Dict[str, Dict[str, Any]]:
        return {
            cache.name: cache.stats()
            for cache in (self.version_cache, self.descriptor_cache, self.license_file_cache)
        }


def version_key(name: str, version_range: str) -> Tuple[str, str]:
    return name.lower(), version_range.strip()


def descriptor_key(name: str, version: str) -> Tuple[str, str]:
    return name.lower(), version.lower()
