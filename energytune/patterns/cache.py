"""
Result cache for pattern runs, keyed by (start_date, end_date, metric_type).

Three rules keep it correct while the UI fires overlapping requests:
  1. COALESCING: concurrent requests for the same key share one in-flight
     computation (its own asyncio.Task); the pipeline runs once and a
     cancelled caller leaves it running for the others.
  2. GENERATION CHECK: invalidate() (new entry saved, entry edited) bumps an
     epoch. A computation that started before the bump still answers its own
     callers but is never written into the cache.
  3. CURRENT-KEY CHECK: only the most recently requested range per metric type
     is "current". A result for a range the user already navigated away from
     is returned to its callers but not stored.

Entries are LRU-evicted beyond max_entries. Single event loop only: no
threads, timers or retries.
"""

import asyncio
import inspect
import logging
from collections import OrderedDict
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, Union

from energytune.schemas.base import CacheKey, MetricType

logger = logging.getLogger(__name__)

Compute = Callable[[], Union[Any, Awaitable[Any]]]


class PatternResultCache:
    """In-memory LRU of finished runs plus the futures of running ones."""

    def __init__(self, max_entries: int = 32):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: "OrderedDict[CacheKey, Any]" = OrderedDict()
        self._in_flight: Dict[CacheKey, asyncio.Future] = {}
        self._current: Dict[MetricType, CacheKey] = {}
        self._epoch = 0
        self.hits = 0
        self.misses = 0
        self.coalesced = 0
        self.discarded = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._entries

    @property
    def epoch(self) -> int:
        return self._epoch

    def current_key(self, metric_type: MetricType) -> Optional[CacheKey]:
        return self._current.get(metric_type)

    def get(self, key: CacheKey) -> Optional[Any]:
        """Cached value for key (refreshing its LRU position), else None."""
        if key not in self._entries:
            return None
        self._entries.move_to_end(key)
        return self._entries[key]

    def invalidate(self) -> None:
        """Drop every cached result and orphan computations already running."""
        self._epoch += 1
        dropped = len(self._entries)
        self._entries.clear()
        # Running computations finish for their own callers; new callers start fresh
        self._in_flight.clear()
        logger.debug(f"Cache invalidated (epoch {self._epoch}, dropped {dropped})")

    def _store(self, key: CacheKey, value: Any) -> None:
        self._entries[key] = value
        self._entries.move_to_end(key)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug(f"Cache evicted {evicted}")

    async def get_or_compute(self, key: CacheKey, compute: Compute) -> Tuple[Any, bool]:
        """
        Return (value, from_cache) for key, running compute() at most once for
        all callers that arrive while it is in flight.

        compute may be a plain callable or return an awaitable. It runs in its
        own task, so cancelling one caller never cancels the computation other
        callers are waiting on. Its exception propagates to every caller
        sharing the computation; nothing is cached.
        """
        self._current[key.metric_type] = key

        if key in self._entries:
            self.hits += 1
            return self.get(key), True

        task = self._in_flight.get(key)
        if task is not None:
            self.coalesced += 1
            logger.debug(f"Cache join in-flight {key}")
        else:
            self.misses += 1
            task = asyncio.ensure_future(self._run(key, compute, self._epoch))
            task.add_done_callback(_retrieve_exception)
            self._in_flight[key] = task

        return await asyncio.shield(task), False

    async def _run(self, key: CacheKey, compute: Compute, epoch: int) -> Any:
        try:
            result = compute()
            if inspect.isawaitable(result):
                result = await result
        finally:
            if self._in_flight.get(key) is asyncio.current_task():
                del self._in_flight[key]

        if epoch != self._epoch:
            self.discarded += 1
            logger.debug(f"Cache skip {key}: invalidated while computing")
        elif self._current.get(key.metric_type) != key:
            self.discarded += 1
            logger.debug(f"Cache skip {key}: range no longer current")
        else:
            self._store(key, result)
        return result

    def stats(self) -> Dict[str, int]:
        return {
            "entries": len(self._entries),
            "in_flight": len(self._in_flight),
            "hits": self.hits,
            "misses": self.misses,
            "coalesced": self.coalesced,
            "discarded": self.discarded,
            "epoch": self._epoch,
        }


def _retrieve_exception(task: asyncio.Future) -> None:
    # Every caller may have been cancelled; mark a failure as seen
    if not task.cancelled():
        task.exception()
