import asyncio

import pytest

from queries.client import QueryClient, QueryOptions

OPTIONS = QueryOptions(stale_time=60, gc_time=300, retry=3, retry_base_delay=1.0, retry_max_delay=30.0)


class CountingFetcher:
    """Returns an increasing version number; optionally fails the first N calls."""

    def __init__(self, failures: int = 0):
        self.calls = 0
        self.failures = failures

    async def __call__(self):
        self.calls += 1
        if self.calls <= self.failures:
            raise ConnectionError(f"attempt {self.calls} failed")
        return {"version": self.calls}


@pytest.fixture
def client(clock, fake_sleep) -> QueryClient:
    return QueryClient(clock=clock, sleep=fake_sleep)


# ---------------------------------------------------------------------------
# Freshness
# ---------------------------------------------------------------------------


class TestFreshness:
    @pytest.mark.asyncio
    async def test_first_fetch_calls_fn(self, client):
        fetcher = CountingFetcher()
        result = await client.fetch_query(("thing",), fetcher, OPTIONS)

        assert result.data == {"version": 1}
        assert not result.is_loading
        assert not result.is_error
        assert not result.is_stale
        assert fetcher.calls == 1

    @pytest.mark.asyncio
    async def test_fresh_data_is_served_from_cache(self, client, clock):
        fetcher = CountingFetcher()
        await client.fetch_query(("thing",), fetcher, OPTIONS)
        clock.advance(59)
        result = await client.fetch_query(("thing",), fetcher, OPTIONS)

        assert result.data == {"version": 1}
        assert fetcher.calls == 1

    @pytest.mark.asyncio
    async def test_stale_data_is_served_while_revalidating(self, client, clock):
        fetcher = CountingFetcher()
        await client.fetch_query(("thing",), fetcher, OPTIONS)
        clock.advance(61)

        result = await client.fetch_query(("thing",), fetcher, OPTIONS)
        assert result.data == {"version": 1}
        assert result.is_stale

        await asyncio.sleep(0)  # let the background refetch run
        assert fetcher.calls == 2
        assert client.get_query_data(("thing",)) == {"version": 2}

    @pytest.mark.asyncio
    async def test_distinct_keys_do_not_share_data(self, client):
        demo = await client.fetch_query(("thing", False), CountingFetcher(), OPTIONS)
        live_fetcher = CountingFetcher(failures=0)
        live_fetcher.calls = 10
        live = await client.fetch_query(("thing", True), live_fetcher, OPTIONS)

        assert demo.data == {"version": 1}
        assert live.data == {"version": 11}

    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_fetch(self, client):
        gate = asyncio.Event()
        calls = 0

        async def slow():
            nonlocal calls
            calls += 1
            await gate.wait()
            return "done"

        first = asyncio.create_task(client.fetch_query(("slow",), slow, OPTIONS))
        second = asyncio.create_task(client.fetch_query(("slow",), slow, OPTIONS))
        await asyncio.sleep(0)
        assert client.get_query_state(("slow",)).is_loading
        gate.set()

        results = await asyncio.gather(first, second)
        assert [r.data for r in results] == ["done", "done"]
        assert calls == 1


# ---------------------------------------------------------------------------
# Retention
# ---------------------------------------------------------------------------


class TestGarbageCollection:
    @pytest.mark.asyncio
    async def test_idle_entry_is_dropped_after_gc_time(self, client, clock):
        fetcher = CountingFetcher()
        await client.fetch_query(("thing",), fetcher, OPTIONS)
        clock.advance(301)

        result = await client.fetch_query(("thing",), fetcher, OPTIONS)

        # Entry was evicted, so the caller waited for a fresh fetch
        assert result.data == {"version": 2}
        assert not result.is_stale

    @pytest.mark.asyncio
    async def test_gc_only_touches_idle_entries(self, client, clock):
        await client.fetch_query(("old",), CountingFetcher(), OPTIONS)
        clock.advance(200)
        await client.fetch_query(("new",), CountingFetcher(), OPTIONS)
        clock.advance(150)
        await client.fetch_query(("new",), CountingFetcher(), OPTIONS)

        assert ("old",) not in client
        assert ("new",) in client

    @pytest.mark.asyncio
    async def test_invalidate_marks_prefix_stale(self, client):
        await client.fetch_query(("topic-velocity", 12), CountingFetcher(), OPTIONS)
        await client.fetch_query(("sentiment", 12), CountingFetcher(), OPTIONS)

        assert client.invalidate("topic-velocity") == 1
        assert client.get_query_state(("topic-velocity", 12)).is_stale
        assert not client.get_query_state(("sentiment", 12)).is_stale


# ---------------------------------------------------------------------------
# Retries
# ---------------------------------------------------------------------------


class TestRetry:
    def test_retry_delay_is_exponential_and_capped(self):
        options = QueryOptions(stale_time=0, gc_time=0, retry_base_delay=1.0, retry_max_delay=10.0)

        assert [options.retry_delay(i) for i in range(6)] == [1.0, 2.0, 4.0, 8.0, 10.0, 10.0]

    @pytest.mark.asyncio
    async def test_recovers_within_retry_budget(self, client, fake_sleep):
        fetcher = CountingFetcher(failures=2)
        result = await client.fetch_query(("flaky",), fetcher, OPTIONS)

        assert result.data == {"version": 3}
        assert not result.is_error
        assert fake_sleep.delays == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_exhausted_retries_surface_error(self, client, fake_sleep):
        fetcher = CountingFetcher(failures=100)
        result = await client.fetch_query(("down",), fetcher, OPTIONS)

        assert result.is_error
        assert isinstance(result.error, ConnectionError)
        assert result.data is None
        assert fetcher.calls == 4
        assert fake_sleep.delays == [1.0, 2.0, 4.0]

    @pytest.mark.asyncio
    async def test_failed_refetch_keeps_previous_data(self, client, clock):
        calls = 0

        async def fetcher():
            nonlocal calls
            calls += 1
            if calls > 1:
                raise ConnectionError("gone")
            return "first"

        await client.fetch_query(("thing",), fetcher, OPTIONS)
        result = await client.refetch(("thing",), fetcher, OPTIONS)

        assert result.is_error
        assert result.data == "first"


# ---------------------------------------------------------------------------
# Polling
# ---------------------------------------------------------------------------


async def _park(delay):
    await asyncio.Event().wait()


class TestPolling:
    @pytest.fixture
    def client(self, clock) -> QueryClient:
        """Client whose polling loops sleep until cancelled."""
        return QueryClient(clock=clock, sleep=_park)

    @pytest.mark.asyncio
    async def test_no_watcher_without_interval(self, client):
        assert client.watch(("thing",), CountingFetcher(), OPTIONS) is None
        assert client.active_watchers == 0

    @pytest.mark.asyncio
    async def test_watcher_refetches_on_interval(self, clock):
        ticks = asyncio.Queue()

        async def controlled_sleep(delay):
            await ticks.get()

        client = QueryClient(clock=clock, sleep=controlled_sleep)
        options = QueryOptions(stale_time=60, gc_time=300, refetch_interval=60)
        fetcher = CountingFetcher()

        await client.fetch_query(("polled",), fetcher, options)
        client.watch(("polled",), fetcher, options)
        for _ in range(2):
            ticks.put_nowait(None)
            for _ in range(20):
                await asyncio.sleep(0)

        assert fetcher.calls == 3
        await client.stop()
        assert client.active_watchers == 0

    @pytest.mark.asyncio
    async def test_watching_new_key_replaces_resource_watcher(self, client):
        options = QueryOptions(stale_time=60, gc_time=300, refetch_interval=60)
        first = client.watch(("resource", True), CountingFetcher(), options)
        second = client.watch(("resource", False), CountingFetcher(), options)
        await asyncio.sleep(0)

        assert first.cancelled()
        assert not second.done()
        assert client.active_watchers == 1
        await client.stop()

    @pytest.mark.asyncio
    async def test_watching_without_interval_stops_existing_watcher(self, client):
        polling = QueryOptions(stale_time=60, gc_time=300, refetch_interval=60)
        task = client.watch(("resource", True), CountingFetcher(), polling)
        client.watch(("resource", False), CountingFetcher(), OPTIONS)
        await asyncio.sleep(0)

        assert task.cancelled()
        assert client.active_watchers == 0

    @pytest.mark.asyncio
    async def test_same_key_reuses_watcher(self, client):
        options = QueryOptions(stale_time=60, gc_time=300, refetch_interval=60)
        first = client.watch(("resource", True), CountingFetcher(), options)
        again = client.watch(("resource", True), CountingFetcher(), options)

        assert first is again
        await client.stop()
