"""Stale-while-revalidate query cache with retries and interval polling.

Each query is identified by a hashable key. Data younger than the query's
stale_time is served as-is. Older data is still served immediately while a
refetch runs in the background, as long as the entry has been used within
gc_time. Entries idle for longer than gc_time are dropped on the next access.
"""

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable

logger = logging.getLogger(__name__)

QueryKey = tuple[Hashable, ...]
QueryFn = Callable[[], Awaitable[Any]]


@dataclass(frozen=True)
class QueryOptions:
    stale_time: float
    gc_time: float
    refetch_interval: float | None = None  # None disables polling
    retry: int = 3  # attempts after the first one
    retry_base_delay: float = 1.0
    retry_max_delay: float = 30.0

    def retry_delay(self, attempt: int) -> float:
        """Exponential backoff: base * 2**attempt, capped at retry_max_delay."""
        return min(self.retry_base_delay * 2 ** attempt, self.retry_max_delay)


@dataclass
class QueryResult:
    data: Any = None
    is_loading: bool = False
    is_error: bool = False
    error: BaseException | None = None
    updated_at: float | None = None
    is_stale: bool = False


@dataclass
class _QueryEntry:
    options: QueryOptions
    data: Any = None
    has_data: bool = False
    error: BaseException | None = None
    updated_at: float | None = None
    last_used_at: float = 0.0
    task: asyncio.Task | None = None
    fetch_count: int = 0

    @property
    def is_fetching(self) -> bool:
        return self.task is not None and not self.task.done()


@dataclass
class _Watcher:
    key: QueryKey
    task: asyncio.Task


class QueryClient:
    """Process-wide query cache shared by all resource hooks.

    Usage:
        client = QueryClient()
        result = await client.fetch_query(("topic-velocity", 12), fetch_fn, options)
        client.watch(("topic-velocity", 12), fetch_fn, options)  # poll while live
        ...
        await client.stop()
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self._clock = clock
        self._sleep = sleep
        self._entries: dict[QueryKey, _QueryEntry] = {}
        self._watchers: dict[Hashable, _Watcher] = {}

    # ── Reads ────────────────────────────────────────────

    async def fetch_query(self, key: QueryKey, fn: QueryFn, options: QueryOptions) -> QueryResult:
        """Return the query's data, fetching it if nothing usable is cached."""
        now = self._clock()
        self._collect_garbage(now)

        entry = self._entries.get(key)
        if entry is None:
            entry = _QueryEntry(options=options)
            self._entries[key] = entry
        entry.options = options
        entry.last_used_at = now

        if entry.has_data and entry.error is None:
            if self._is_stale(entry, now):
                self._start_fetch(key, entry, fn)
            return self._snapshot(entry)

        await self._await_fetch(key, entry, fn)
        return self._snapshot(entry)

    async def refetch(self, key: QueryKey, fn: QueryFn, options: QueryOptions) -> QueryResult:
        """Fetch regardless of freshness; used by polling loops."""
        entry = self._entries.get(key)
        if entry is None:
            entry = _QueryEntry(options=options)
            self._entries[key] = entry
        entry.options = options
        entry.last_used_at = self._clock()
        await self._await_fetch(key, entry, fn)
        return self._snapshot(entry)

    def get_query_state(self, key: QueryKey) -> QueryResult | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        return self._snapshot(entry)

    def get_query_data(self, key: QueryKey) -> Any:
        entry = self._entries.get(key)
        return entry.data if entry is not None else None

    def fetch_count(self, key: QueryKey) -> int:
        entry = self._entries.get(key)
        return entry.fetch_count if entry is not None else 0

    def __contains__(self, key: QueryKey) -> bool:
        return key in self._entries

    # ── Invalidation ─────────────────────────────────────

    def invalidate(self, prefix: Hashable) -> int:
        """Mark every query whose key starts with prefix as stale."""
        count = 0
        for key, entry in self._entries.items():
            if key and key[0] == prefix:
                entry.updated_at = None
                count += 1
        return count

    def clear(self) -> None:
        for entry in self._entries.values():
            if entry.is_fetching:
                entry.task.cancel()
        self._entries.clear()

    # ── Polling ──────────────────────────────────────────

    def watch(self, key: QueryKey, fn: QueryFn, options: QueryOptions) -> asyncio.Task | None:
        """Keep a query fresh by refetching it every refetch_interval seconds.

        At most one watcher runs per resource (key[0]). Watching a different
        key for the same resource, or a key whose options disable polling,
        stops the previous watcher.
        """
        scope = key[0]
        current = self._watchers.get(scope)
        if current is not None:
            if current.key == key and not current.task.done():
                return current.task
            current.task.cancel()
            del self._watchers[scope]

        if options.refetch_interval is None:
            return None

        task = asyncio.create_task(self._poll(key, fn, options))
        self._watchers[scope] = _Watcher(key=key, task=task)
        logger.debug("Polling %s every %gs", key, options.refetch_interval)
        return task

    def unwatch(self, scope: Hashable) -> None:
        watcher = self._watchers.pop(scope, None)
        if watcher is not None:
            watcher.task.cancel()

    def unwatch_all(self) -> None:
        for watcher in self._watchers.values():
            watcher.task.cancel()
        self._watchers.clear()

    @property
    def active_watchers(self) -> int:
        return sum(1 for w in self._watchers.values() if not w.task.done())

    async def stop(self) -> None:
        """Cancel polling loops and in-flight fetches."""
        tasks = [w.task for w in self._watchers.values()]
        tasks += [e.task for e in self._entries.values() if e.is_fetching]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._watchers.clear()
        logger.info("Query client stopped (%d tasks cancelled)", len(tasks))

    async def _poll(self, key: QueryKey, fn: QueryFn, options: QueryOptions) -> None:
        while True:
            await self._sleep(options.refetch_interval)
            result = await self.refetch(key, fn, options)
            if result.is_error:
                logger.error("Scheduled refetch of %s failed: %s", key, result.error)

    # ── Internals ────────────────────────────────────────

    def _is_stale(self, entry: _QueryEntry, now: float) -> bool:
        if entry.updated_at is None:
            return True
        return now - entry.updated_at >= entry.options.stale_time

    def _collect_garbage(self, now: float) -> None:
        expired = [
            key for key, entry in self._entries.items()
            if not entry.is_fetching and now - entry.last_used_at > entry.options.gc_time
        ]
        for key in expired:
            del self._entries[key]
        if expired:
            logger.debug("Evicted %d idle queries", len(expired))

    def _start_fetch(self, key: QueryKey, entry: _QueryEntry, fn: QueryFn) -> asyncio.Task:
        if not entry.is_fetching:
            entry.task = asyncio.create_task(self._run(key, entry, fn))
        return entry.task

    async def _await_fetch(self, key: QueryKey, entry: _QueryEntry, fn: QueryFn) -> None:
        # Shielded so a cancelled caller does not abort a fetch other callers share.
        await asyncio.shield(self._start_fetch(key, entry, fn))

    async def _run(self, key: QueryKey, entry: _QueryEntry, fn: QueryFn) -> None:
        """Call fn with retries and record the outcome on the entry."""
        options = entry.options
        for attempt in range(options.retry + 1):
            entry.fetch_count += 1
            try:
                data = await fn()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                if attempt < options.retry:
                    delay = options.retry_delay(attempt)
                    logger.warning(
                        "Query %s failed: %s: %s. Retrying in %.1fs (attempt %d/%d)",
                        key, type(e).__name__, e, delay, attempt + 1, options.retry + 1,
                    )
                    await self._sleep(delay)
                    continue
                logger.error("Query %s failed after %d attempts: %s", key, attempt + 1, e)
                entry.error = e
                return

            entry.data = data
            entry.has_data = True
            entry.error = None
            entry.updated_at = self._clock()
            return

    def _snapshot(self, entry: _QueryEntry) -> QueryResult:
        return QueryResult(
            data=entry.data,
            is_loading=entry.is_fetching and not entry.has_data,
            is_error=entry.error is not None,
            error=entry.error,
            updated_at=entry.updated_at,
            is_stale=self._is_stale(entry, self._clock()),
        )
