"""Character state cache — coalesces concurrent refreshes behind one in-flight fetch."""

import asyncio
import sys
from typing import Callable, Dict, Optional

from mobbot.config import CONFIG
from mobbot.domain.models import CacheEntry, CharacterState, RefreshState


def _log(msg: str):
    print(msg, file=sys.stderr)


class CharacterStateCache:
    """Single owner of the current character state.

    Any number of loop ticks may call ``get_character_updates`` at once. At most
    one network fetch runs at a time; callers arriving while it is in flight are
    parked as FIFO waiters (up to ``max_queue_size``) and all receive the value
    that fetch produced. Fetch starts are spaced at least ``cooldown`` seconds
    apart, and non-forced reads within ``cache_expiry`` never touch the network.
    """

    def __init__(
        self,
        api,
        clock: Callable[[], float],
        cooldown: Optional[float] = None,
        cache_expiry: Optional[float] = None,
        max_queue_size: Optional[int] = None,
    ):
        self._api = api
        self._clock = clock
        self.cooldown = CONFIG["cache_cooldown"] if cooldown is None else cooldown
        self.cache_expiry = CONFIG["cache_expiry"] if cache_expiry is None else cache_expiry
        self.max_queue_size = CONFIG["max_queue_size"] if max_queue_size is None else max_queue_size
        self._entry = CacheEntry()
        self._refresh = RefreshState()
        self._fetch_count = 0
        self._dropped = 0

    @property
    def last_value(self) -> Optional[CharacterState]:
        return self._entry.value

    @property
    def in_flight(self) -> bool:
        return self._refresh.in_flight

    def stats(self) -> Dict[str, int]:
        return {
            "fetches": self._fetch_count,
            "dropped": self._dropped,
            "waiting": len(self._refresh.waiters),
        }

    async def get_character_updates(self, force: bool = False) -> Optional[CharacterState]:
        now = self._clock()
        entry = self._entry
        refresh = self._refresh

        if (
            not force
            and entry.value is not None
            and entry.fetched_at is not None
            and now - entry.fetched_at < self.cache_expiry
        ):
            return entry.value

        if refresh.in_flight:
            if len(refresh.waiters) >= self.max_queue_size:
                self._dropped += 1
                _log("[CharacterCache] queue full - dropping request")
                return entry.value
            waiter = asyncio.get_running_loop().create_future()
            refresh.waiters.append(waiter)
            return await waiter

        if refresh.last_fetch_start is not None and now - refresh.last_fetch_start < self.cooldown:
            if entry.value is not None:
                return entry.value
            # Cache miss inside the cooldown window still fetches

        return await self._fetch(now)

    async def _fetch(self, started: float) -> Optional[CharacterState]:
        refresh = self._refresh
        refresh.in_flight = True
        refresh.last_fetch_start = started
        self._fetch_count += 1
        value: Optional[CharacterState] = None
        try:
            result = await self._api.character_updates()
            if result.success and isinstance(result.data, dict):
                value = result.data
                self._entry = CacheEntry(value=value, fetched_at=self._clock())
            else:
                _log(f"[CharacterCache] update failed: {result.error}")
            return value
        finally:
            refresh.in_flight = False
            while refresh.waiters:
                waiter = refresh.waiters.popleft()
                if not waiter.done():
                    waiter.set_result(value)
