"""Tests for CharacterStateCache — freshness, cooldown, coalescing and queue bound."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from mobbot.character_cache import CharacterStateCache
from tests.conftest import fail, make_state, ok


class FakeClock:
    def __init__(self):
        self.t = 100.0

    def __call__(self):
        return self.t


def _make_cache(api, clock, max_queue_size=5):
    return CharacterStateCache(api, clock=clock, cooldown=2.0, cache_expiry=5.0, max_queue_size=max_queue_size)


def _gated_api(values):
    """API whose character_updates blocks until ``gate`` is set; returns values in order."""
    gate = asyncio.Event()
    results = list(values)

    async def _fetch():
        await gate.wait()
        return results.pop(0)

    api = MagicMock()
    api.character_updates = AsyncMock(side_effect=_fetch)
    return api, gate


async def _settle():
    for _ in range(5):
        await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Freshness
# ---------------------------------------------------------------------------

class TestFreshness:
    @pytest.mark.asyncio
    async def test_first_call_fetches(self):
        clock = FakeClock()
        state = make_state(energy=42)
        api = MagicMock()
        api.character_updates = AsyncMock(return_value=ok(state))
        cache = _make_cache(api, clock)

        assert cache.last_value is None
        result = await cache.get_character_updates()
        assert result is state
        assert cache.last_value is state
        api.character_updates.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_fresh_value_served_without_network(self):
        clock = FakeClock()
        api = MagicMock()
        api.character_updates = AsyncMock(return_value=ok(make_state()))
        cache = _make_cache(api, clock)

        first = await cache.get_character_updates()
        clock.t += 4.9
        second = await cache.get_character_updates()

        assert first is second
        assert api.character_updates.await_count == 1

    @pytest.mark.asyncio
    async def test_expired_value_refetches(self):
        clock = FakeClock()
        api = MagicMock()
        api.character_updates = AsyncMock(side_effect=[ok(make_state(energy=1)), ok(make_state(energy=2))])
        cache = _make_cache(api, clock)

        await cache.get_character_updates()
        clock.t += 5.1
        result = await cache.get_character_updates()

        assert result["resources"]["energy"]["current"] == 2
        assert api.character_updates.await_count == 2


# ---------------------------------------------------------------------------
# Cooldown
# ---------------------------------------------------------------------------

class TestCooldown:
    @pytest.mark.asyncio
    async def test_forced_calls_within_cooldown_hit_network_once(self):
        clock = FakeClock()
        state = make_state()
        api = MagicMock()
        api.character_updates = AsyncMock(return_value=ok(state))
        cache = _make_cache(api, clock)

        await cache.get_character_updates(force=True)
        clock.t += 1.0
        second = await cache.get_character_updates(force=True)

        assert second is state
        assert api.character_updates.await_count == 1

    @pytest.mark.asyncio
    async def test_forced_call_after_cooldown_fetches(self):
        clock = FakeClock()
        api = MagicMock()
        api.character_updates = AsyncMock(return_value=ok(make_state()))
        cache = _make_cache(api, clock)

        await cache.get_character_updates(force=True)
        clock.t += 2.5
        await cache.get_character_updates(force=True)

        assert api.character_updates.await_count == 2

    @pytest.mark.asyncio
    async def test_cache_miss_inside_cooldown_still_fetches(self):
        """A failed first fetch leaves no value; the next call must not return None from cache."""
        clock = FakeClock()
        state = make_state()
        api = MagicMock()
        api.character_updates = AsyncMock(side_effect=[fail(), ok(state)])
        cache = _make_cache(api, clock)

        assert await cache.get_character_updates() is None
        clock.t += 0.5
        assert await cache.get_character_updates() is state
        assert api.character_updates.await_count == 2


# ---------------------------------------------------------------------------
# Failure semantics
# ---------------------------------------------------------------------------

class TestFailure:
    @pytest.mark.asyncio
    async def test_failure_returns_none_but_keeps_previous_value(self):
        clock = FakeClock()
        state = make_state()
        api = MagicMock()
        api.character_updates = AsyncMock(side_effect=[ok(state), fail("HTTP 500")])
        cache = _make_cache(api, clock)

        await cache.get_character_updates()
        clock.t += 6
        assert await cache.get_character_updates() is None
        assert cache.last_value is state

    @pytest.mark.asyncio
    async def test_failed_refresh_delivers_none_to_waiters(self):
        clock = FakeClock()
        api, gate = _gated_api([fail()])
        cache = _make_cache(api, clock)

        tasks = [asyncio.create_task(cache.get_character_updates()) for _ in range(3)]
        await _settle()
        gate.set()
        results = await asyncio.gather(*tasks)

        assert results == [None, None, None]
        assert not cache.in_flight


# ---------------------------------------------------------------------------
# Coalescing
# ---------------------------------------------------------------------------

class TestCoalescing:
    @pytest.mark.asyncio
    async def test_concurrent_callers_share_one_fetch(self):
        clock = FakeClock()
        state = make_state(energy=77)
        api, gate = _gated_api([ok(state)])
        cache = _make_cache(api, clock)

        tasks = [asyncio.create_task(cache.get_character_updates()) for _ in range(4)]
        await _settle()
        assert cache.in_flight
        assert cache.stats()["waiting"] == 3

        gate.set()
        results = await asyncio.gather(*tasks)

        assert api.character_updates.await_count == 1
        assert all(r is state for r in results)
        assert cache.stats()["waiting"] == 0

    @pytest.mark.asyncio
    async def test_waiters_released_in_fifo_order(self):
        clock = FakeClock()
        api, gate = _gated_api([ok(make_state())])
        cache = _make_cache(api, clock)
        order = []

        async def caller(i):
            await cache.get_character_updates()
            order.append(i)

        tasks = [asyncio.create_task(caller(i)) for i in range(4)]
        await _settle()
        gate.set()
        await asyncio.gather(*tasks)

        # Fetcher finishes in the same step that resolves the waiters
        assert order == [0, 1, 2, 3]

    @pytest.mark.asyncio
    async def test_queue_overflow_gets_cached_value_immediately(self):
        clock = FakeClock()
        old = make_state(energy=1)
        new = make_state(energy=2)
        api, gate = _gated_api([ok(old), ok(new)])
        cache = _make_cache(api, clock, max_queue_size=5)

        gate.set()
        await cache.get_character_updates()
        gate.clear()
        clock.t += 10

        fetcher = asyncio.create_task(cache.get_character_updates())
        await _settle()
        waiters = [asyncio.create_task(cache.get_character_updates()) for _ in range(5)]
        await _settle()
        extra = asyncio.create_task(cache.get_character_updates())
        await _settle()

        assert extra.done()
        assert extra.result() is old
        assert cache.stats()["dropped"] == 1

        gate.set()
        results = await asyncio.gather(fetcher, *waiters)
        assert all(r is new for r in results)
        assert api.character_updates.await_count == 2
