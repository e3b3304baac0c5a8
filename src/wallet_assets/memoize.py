"""In-process memoization for async operations with single-flight and TTL support."""

import asyncio
import inspect
import logging
import math
import time
from collections.abc import Awaitable, Callable, Hashable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class CacheEntry(Generic[T]):
    """One memoized flight for a single argument signature.

    Attributes:
        key: Normalized argument signature
        task: Pending or settled computation shared by all callers
        expires_at: Clock reading after which the entry is stale. ``None`` while
            the task is still running, ``math.inf`` when the result never expires.
    """

    key: Hashable
    task: "asyncio.Task[T]"
    expires_at: float | None = None

    def is_live(self, now: float) -> bool:
        if self.expires_at is None:
            return True
        return now < self.expires_at


@dataclass
class CacheMetrics:
    """Memoization performance metrics."""

    total_entries: int
    total_hits: int
    total_misses: int
    total_joins: int  # Calls that attached to a still-running flight
    hit_rate: float  # Percentage of calls served without a new flight
    expired_entries: int  # Settled entries past their TTL, pending purge


def _freeze(value: Any) -> Hashable:
    """Turn an argument into a hashable value that compares by content."""
    if isinstance(value, dict):
        return tuple(sorted((k, _freeze(v)) for k, v in value.items()))
    if isinstance(value, list | tuple):
        return tuple(_freeze(item) for item in value)
    if isinstance(value, set | frozenset):
        return frozenset(_freeze(item) for item in value)
    return value


class MemoizedCall(Generic[T]):
    """Async callable that shares in-flight work and reuses results until they expire.

    Equal argument lists (after defaults are applied) map to one entry. While the
    entry's task is running every caller awaits the same task; once it succeeds the
    result is served until ``ttl_seconds`` elapse. A failed task is evicted so the
    next call starts a new flight.
    """

    def __init__(
        self,
        operation: Callable[..., Awaitable[T]],
        ttl_seconds: float | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
        name: str | None = None,
    ):
        """Initialize memoized call.

        Args:
            operation: Async callable to memoize
            ttl_seconds: Lifetime of a settled result, ``None`` to keep it forever
            clock: Monotonic clock used for expiry bookkeeping
            name: Label used in log messages and metrics
        """
        if ttl_seconds is not None and ttl_seconds < 0:
            raise ValueError(f"ttl_seconds must be non-negative, got {ttl_seconds}")

        self.operation = operation
        self.ttl_seconds = ttl_seconds
        self.name = name or getattr(operation, "__qualname__", repr(operation))
        self._clock = clock
        self._signature = inspect.signature(operation)
        self._entries: dict[Hashable, CacheEntry[T]] = {}
        self._total_hits = 0
        self._total_misses = 0
        self._total_joins = 0

    def make_key(self, *args: Any, **kwargs: Any) -> Hashable:
        """Build the cache key for a call, applying the operation's defaults."""
        bound = self._signature.bind(*args, **kwargs)
        bound.apply_defaults()
        return tuple((name, _freeze(value)) for name, value in bound.arguments.items())

    async def __call__(self, *args: Any, **kwargs: Any) -> T:
        key = self.make_key(*args, **kwargs)
        now = self._clock()

        entry = self._entries.get(key)
        if entry is not None and entry.task.done() and entry.expires_at is None:
            # Settled but the done callback has not run yet
            self._settle(entry, entry.task)
            entry = self._entries.get(key)

        if entry is not None and entry.is_live(now):
            if entry.task.done():
                self._total_hits += 1
                logger.debug(f"{self.name}: cache hit for {key}")
            else:
                self._total_joins += 1
                logger.debug(f"{self.name}: joined in-flight call for {key}")
        else:
            if entry is not None:
                logger.debug(f"{self.name}: entry expired for {key}")
            self._total_misses += 1
            entry = self._start(key, args, kwargs)

        # Shield so a cancelled caller does not cancel the shared flight
        return await asyncio.shield(entry.task)

    def _start(self, key: Hashable, args: tuple, kwargs: dict) -> CacheEntry[T]:
        task = asyncio.ensure_future(self.operation(*args, **kwargs))
        entry: CacheEntry[T] = CacheEntry(key=key, task=task)
        self._entries[key] = entry
        task.add_done_callback(lambda done: self._settle(entry, done))
        return entry

    def _settle(self, entry: CacheEntry[T], task: "asyncio.Task[T]") -> None:
        if entry.expires_at is not None:
            return

        failed = task.cancelled() or task.exception() is not None
        if failed:
            if self._entries.get(entry.key) is entry:
                del self._entries[entry.key]
            entry.expires_at = -math.inf
            reason = "cancelled" if task.cancelled() else repr(task.exception())
            logger.debug(f"{self.name}: evicted failed call for {entry.key}: {reason}")
            return

        if self.ttl_seconds is None:
            entry.expires_at = math.inf
        else:
            entry.expires_at = self._clock() + self.ttl_seconds

    def invalidate(self, *args: Any, **kwargs: Any) -> bool:
        """Drop the entry for one argument signature.

        Returns:
            True if an entry was removed
        """
        removed = self._entries.pop(self.make_key(*args, **kwargs), None) is not None
        if removed:
            logger.debug(f"{self.name}: invalidated entry for {args} {kwargs}")
        return removed

    def invalidate_all(self) -> int:
        """Drop every entry (forced refresh).

        Returns:
            Number of entries removed
        """
        count = len(self._entries)
        self._entries.clear()
        if count:
            logger.info(f"{self.name}: invalidated all {count} cache entries")
        return count

    def purge_expired(self) -> int:
        """Remove settled entries whose TTL has elapsed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_live(now)]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug(f"{self.name}: purged {len(expired)} expired entries")
        return len(expired)

    def get_metrics(self) -> CacheMetrics:
        now = self._clock()
        expired = sum(1 for entry in self._entries.values() if not entry.is_live(now))
        total_requests = self._total_hits + self._total_misses + self._total_joins
        served = self._total_hits + self._total_joins
        return CacheMetrics(
            total_entries=len(self._entries) - expired,
            total_hits=self._total_hits,
            total_misses=self._total_misses,
            total_joins=self._total_joins,
            hit_rate=(served / total_requests * 100.0) if total_requests > 0 else 0.0,
            expired_entries=expired,
        )

    def reset_metrics(self) -> None:
        self._total_hits = 0
        self._total_misses = 0
        self._total_joins = 0


def memoize(
    operation: Callable[..., Awaitable[T]],
    ttl_seconds: float | None = None,
    *,
    clock: Callable[[], float] = time.monotonic,
    name: str | None = None,
) -> MemoizedCall[T]:
    """Wrap an async operation so equal calls share one flight and one result.

    Args:
        operation: Async callable to wrap (bound methods give per-instance caches)
        ttl_seconds: Seconds a settled result stays fresh; ``None`` means forever
        clock: Monotonic clock, injectable for tests
        name: Label for logs and metrics

    Returns:
        MemoizedCall with the same call contract as ``operation``
    """
    return MemoizedCall(operation, ttl_seconds, clock=clock, name=name)
