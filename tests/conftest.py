"""Shared fixtures: a deterministic timer service and fake collaborators."""

import itertools
from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, MagicMock

import pytest

from mobbot.domain.models import ApiResult
from mobbot.domain.settings import AgentSettings
from mobbot.ports.dom import DomElement
from mobbot.status import StatusBoard
from mobbot.timers import TimerHandle, invoke


class FakeTimers:
    """Same surface as TimerService, but time only moves when a test calls ``advance``."""

    def __init__(self):
        self._now = 0.0
        self._ids = itertools.count(1)
        self._handles: Dict[int, TimerHandle] = {}
        self._due: Dict[int, float] = {}
        self._callbacks: Dict[int, Any] = {}

    def now(self) -> float:
        return self._now

    def every(self, interval, callback) -> TimerHandle:
        return self._add(TimerHandle(timer_id=next(self._ids), repeating=True, interval=interval), callback)

    def later(self, delay, callback) -> TimerHandle:
        return self._add(TimerHandle(timer_id=next(self._ids), repeating=False, interval=delay), callback)

    def _add(self, handle, callback):
        self._handles[handle.timer_id] = handle
        self._due[handle.timer_id] = self._now + handle.interval
        self._callbacks[handle.timer_id] = callback
        return handle

    def cancel(self, handle: Optional[TimerHandle]):
        if handle is None or handle.cancelled:
            return
        handle.cancelled = True
        self._handles.pop(handle.timer_id, None)

    def cancel_all(self):
        for handle in list(self._handles.values()):
            self.cancel(handle)

    def usage(self) -> Dict[str, int]:
        live = list(self._handles.values())
        return {
            "intervals": sum(1 for h in live if h.repeating),
            "timeouts": sum(1 for h in live if not h.repeating),
        }

    def live(self) -> List[TimerHandle]:
        return list(self._handles.values())

    async def advance(self, seconds: float):
        target = self._now + seconds
        while True:
            due = [h for h in self._handles.values() if self._due[h.timer_id] <= target + 1e-9]
            if not due:
                break
            handle = min(due, key=lambda h: (self._due[h.timer_id], h.timer_id))
            self._now = max(self._now, self._due[handle.timer_id])
            callback = self._callbacks[handle.timer_id]
            if handle.repeating:
                self._due[handle.timer_id] = self._now + handle.interval
            else:
                handle.cancelled = True
                self._handles.pop(handle.timer_id, None)
            await invoke(callback)
        self._now = target


class FakeProbe:
    def __init__(self, elements: Optional[List[DomElement]] = None):
        self.elements = list(elements or [])
        self.clicked: List[DomElement] = []
        self.queries = 0
        self.released = False
        self.click_error: Optional[Exception] = None

    async def query_clickable(self) -> List[DomElement]:
        self.queries += 1
        return list(self.elements)

    async def click(self, element: DomElement) -> None:
        if self.click_error:
            raise self.click_error
        self.clicked.append(element)

    async def release(self) -> None:
        self.released = True


def make_state(
    energy=50, nerve=0, focus=0, wit=0, in_jail=False, crime_timer=True, gta_timer=True
) -> Dict[str, Any]:
    return {
        "resources": {
            "energy": {"current": energy},
            "nerve": {"current": nerve},
            "focus": {"current": focus},
            "wit": {"current": wit},
        },
        "jail": {"isInJail": in_jail},
        "timers": {"crime": crime_timer, "gta": gta_timer},
    }


def ok(data=None) -> ApiResult:
    return ApiResult(success=True, data=data if data is not None else {}, status_code=200)


def fail(error="boom", kind="transport") -> ApiResult:
    return ApiResult(success=False, error=error, kind=kind)


def make_api(state: Optional[Dict[str, Any]] = None) -> MagicMock:
    api = MagicMock()
    api.character_updates = AsyncMock(return_value=ok(state if state is not None else make_state()))
    api.train = AsyncMock(return_value=ok({"energy_cost": 10, "exp_gained": 5}))
    api.commit_crime = AsyncMock(return_value=ok({"reward": 100, "exp_gained": 3}))
    api.commit_gta = AsyncMock(return_value=ok({"reward": 500, "exp_gained": 8}))
    api.start_heist = AsyncMock(return_value=ok({"reward": 2000, "exp_gained": 20}))
    api.close = AsyncMock()
    return api


@pytest.fixture
def timers():
    return FakeTimers()


@pytest.fixture
def board():
    return StatusBoard()


@pytest.fixture
def settings():
    return AgentSettings()


@pytest.fixture
def probe():
    return FakeProbe()
