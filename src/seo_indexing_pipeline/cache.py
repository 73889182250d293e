"""
In-memory result cache with per-entry TTL and tag invalidation.

Injected into the components that want it (health audits, API responses)
instead of living as module state. A shared backend such as Redis can be
swapped in by implementing the same get/set/invalidate methods.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional


@dataclass
class _Entry:
    value: Any
    expires: float
    tags: tuple[str, ...] = field(default_factory=tuple)


class TTLCache:
    """Thread-safe key/value cache whose entries expire after a TTL."""

    def __init__(self, default_ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        """
        Args:
            default_ttl: Lifetime of entries set without an explicit ttl, in seconds.
            clock: Monotonic time source.
        """
        if default_ttl <= 0:
            raise ValueError(f"default_ttl must be > 0, got {default_ttl}")
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() > entry.expires:
                del self._entries[key]
                return None
            return entry.value

    def set(self, key: str, value: Any, ttl: Optional[float] = None, tags: tuple[str, ...] = ()) -> None:
        """Store a value for ttl seconds (default_ttl when omitted)."""
        lifetime = self.default_ttl if ttl is None else ttl
        with self._lock:
            self._entries[key] = _Entry(value=value, expires=self._clock() + lifetime, tags=tuple(tags))

    def invalidate(self, key: str) -> None:
        """Drop one key."""
        with self._lock:
            self._entries.pop(key, None)

    def invalidate_by_tag(self, tag: str) -> int:
        """Drop every entry carrying tag. Returns the number dropped."""
        with self._lock:
            keys = [k for k, e in self._entries.items() if tag in e.tags]
            for key in keys:
                del self._entries[key]
            return len(keys)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
