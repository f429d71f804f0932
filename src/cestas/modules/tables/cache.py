"""
Cestas Tables - Cache Manager.

Short-lived cache in front of the remote reads of one card.

There is a single ``last_update`` stamp shared by every slot: writing any
slot restarts the freshness window of all of them, and ``invalidate`` makes
every slot read as absent while keeping the stale values in memory.
"""

import time
from collections.abc import Callable
from typing import Any

SLOTS = ("produtos", "card_info", "frete")


def _now_ms() -> float:
    return time.monotonic() * 1000


class CacheManager:
    """Per-card cache with slots ``produtos``, ``card_info`` and ``frete``."""

    def __init__(self, ttl_ms: int = 60_000, clock: Callable[[], float] = _now_ms):
        self.ttl_ms = ttl_ms
        self._clock = clock
        self._slots: dict[str, Any] = dict.fromkeys(SLOTS)
        self.last_update: float | None = None

    def set(self, key: str, value: Any) -> None:
        if key not in self._slots:
            raise KeyError(f"Unknown cache slot: {key}")
        self._slots[key] = value
        self.last_update = self._clock()

    def get(self, key: str) -> Any:
        """Return the slot value while the shared stamp is fresh, else None."""
        if not self.is_valid():
            return None
        return self._slots.get(key)

    def is_valid(self) -> bool:
        if self.last_update is None:
            return False
        return (self._clock() - self.last_update) < self.ttl_ms

    def clear(self) -> None:
        self._slots = dict.fromkeys(SLOTS)
        self.last_update = None

    def invalidate(self) -> None:
        self.last_update = None
