"""Memoization hook for analytics results.

The analytics functions are pure and never cache on their own. Callers that
recompute on every refresh (dashboards, the reporting service) can wrap them
with a MetricsCache keyed on a cheap fingerprint of the trade collection.
"""

import time
from collections import OrderedDict
from datetime import datetime
from typing import Any, Callable, Hashable, Sequence, TypeVar

from tradejournal.libraries.performance.models import TradeRecord

T = TypeVar("T")

Fingerprint = tuple[int, datetime | None, datetime | None]


def trade_fingerprint(trades: Sequence[TradeRecord]) -> Fingerprint:
    """
    Cheap identity of a trade collection: (count, earliest, latest timestamp).

    Order-insensitive. Edits that keep the count and time span unchanged are
    not detected; the TTL bounds how long such a stale result survives.
    """
    if not trades:
        return (0, None, None)
    timestamps = [t.timestamp for t in trades]
    return (len(trades), min(timestamps), max(timestamps))


class MetricsCache:
    """
    Time-bounded cache of computed results.

    Entries expire ``ttl_seconds`` after they were stored; once more than
    ``max_entries`` are held the oldest is evicted.

    Example:
        >>> cache = MetricsCache(ttl_seconds=300)
        >>> metrics = cache.get_or_compute(
        ...     "metrics", trades, lambda: calculate_metrics(trades, balance), balance
        ... )
    """

    def __init__(
        self,
        ttl_seconds: float = 300.0,
        max_entries: int = 100,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        if max_entries <= 0:
            raise ValueError(f"max_entries must be positive, got {max_entries}")

        self._ttl = ttl_seconds
        self._max_entries = max_entries
        self._clock = clock
        self._entries: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def make_key(self, name: str, trades: Sequence[TradeRecord], *params: Hashable) -> Hashable:
        """Cache key for computation ``name`` over ``trades`` with ``params``."""
        return (name, trade_fingerprint(trades), params)

    def get(self, key: Hashable) -> Any | None:
        """Stored value for ``key``, or None if missing or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return None

        stored_at, value = entry
        if self._clock() - stored_at >= self._ttl:
            del self._entries[key]
            return None
        return value

    def set(self, key: Hashable, value: Any) -> None:
        """Store ``value`` under ``key``, evicting the oldest entry if full."""
        self._entries.pop(key, None)
        self._entries[key] = (self._clock(), value)
        while len(self._entries) > self._max_entries:
            self._entries.popitem(last=False)

    def get_or_compute(
        self,
        name: str,
        trades: Sequence[TradeRecord],
        compute: Callable[[], T],
        *params: Hashable,
    ) -> T:
        """
        Return the cached result or compute and store it.

        Args:
            name: Computation name, part of the key
            trades: Trade collection the result was derived from
            compute: Zero-argument callable producing the result
            *params: Extra hashable inputs (starting balance, window...)
        """
        key = self.make_key(name, trades, *params)
        cached = self.get(key)
        if cached is not None:
            self.hits += 1
            return cached  # type: ignore[no-any-return]

        self.misses += 1
        value = compute()
        self.set(key, value)
        return value

    def clear(self) -> None:
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)
