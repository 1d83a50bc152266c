"""Tests for the keyed query cache."""

import asyncio

import pytest

from parks_incidents.infrastructure.cache import QueryCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class CountingLoader:
    """Loader returning ``value-N`` on the N-th call, optionally waiting on a gate."""

    def __init__(self, gate: asyncio.Event | None = None):
        self.calls = 0
        self.gate = gate

    async def __call__(self):
        self.calls += 1
        call = self.calls
        if self.gate is not None:
            await self.gate.wait()
        return f"value-{call}"


class TestFetch:
    @pytest.mark.asyncio
    async def test_second_read_is_served_from_cache(self):
        cache = QueryCache()
        loader = CountingLoader()

        assert await cache.fetch(("/api/incidents/1",), loader) == "value-1"
        assert await cache.fetch(("/api/incidents/1",), loader) == "value-1"
        assert loader.calls == 1

    @pytest.mark.asyncio
    async def test_concurrent_reads_share_one_load(self):
        cache = QueryCache()
        gate = asyncio.Event()
        loader = CountingLoader(gate)

        first = asyncio.create_task(cache.fetch(("/api/incidents",), loader))
        second = asyncio.create_task(cache.fetch(("/api/incidents",), loader))
        await asyncio.sleep(0)
        gate.set()

        assert await asyncio.gather(first, second) == ["value-1", "value-1"]
        assert loader.calls == 1

    @pytest.mark.asyncio
    async def test_failed_load_stores_nothing(self):
        cache = QueryCache()

        async def failing():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await cache.fetch(("/api/incidents/1",), failing)

        assert cache.peek(("/api/incidents/1",)) is None
        assert await cache.fetch(("/api/incidents/1",), CountingLoader()) == "value-1"

    @pytest.mark.asyncio
    async def test_stale_time_expires_entries(self):
        clock = FakeClock()
        cache = QueryCache(stale_time=30, clock=clock)
        loader = CountingLoader()

        await cache.fetch(("/api/incidents",), loader)
        clock.now = 29
        assert not cache.is_stale(("/api/incidents",))
        clock.now = 31

        assert await cache.fetch(("/api/incidents",), loader) == "value-2"


class TestInvalidate:
    @pytest.mark.asyncio
    async def test_invalidated_entry_is_refetched(self):
        cache = QueryCache()
        loader = CountingLoader()
        await cache.fetch(("/api/incidents/1",), loader)

        cache.invalidate(("/api/incidents/1",))

        assert cache.is_stale(("/api/incidents/1",))
        assert cache.peek(("/api/incidents/1",)) == "value-1"
        assert await cache.fetch(("/api/incidents/1",), loader) == "value-2"

    def test_prefix_matches_every_list_variant(self):
        cache = QueryCache()
        cache.set(("/api/incidents",), [])
        cache.set(("/api/incidents", 3), [])
        cache.set(("/api/incidents/1",), None)

        assert cache.invalidate(("/api/incidents",)) == 2
        assert cache.is_stale(("/api/incidents", 3))
        assert not cache.is_stale(("/api/incidents/1",))

    def test_exact_match(self):
        cache = QueryCache()
        cache.set(("/api/incidents",), [])
        cache.set(("/api/incidents", 3), [])

        assert cache.invalidate(("/api/incidents",), exact=True) == 1
        assert not cache.is_stale(("/api/incidents", 3))

    @pytest.mark.asyncio
    async def test_response_arriving_after_invalidation_stays_stale(self):
        cache = QueryCache()
        gate = asyncio.Event()
        key = ("/api/incidents/1",)

        pending = asyncio.create_task(cache.fetch(key, CountingLoader(gate)))
        await asyncio.sleep(0)
        cache.invalidate(key)
        gate.set()

        assert await pending == "value-1"
        assert cache.peek(key) == "value-1"
        assert cache.is_stale(key)

    def test_clear(self):
        cache = QueryCache()
        cache.set(("/api/incidents",), [])

        cache.clear()

        assert cache.keys() == []

    @pytest.mark.asyncio
    async def test_load_in_flight_during_clear_stays_stale(self):
        cache = QueryCache()
        gate = asyncio.Event()
        key = ("/api/incidents/1",)

        pending = asyncio.create_task(cache.fetch(key, CountingLoader(gate)))
        await asyncio.sleep(0)
        cache.clear()
        gate.set()

        assert await pending == "value-1"
        assert cache.peek(key) == "value-1"
        assert cache.is_stale(key)
