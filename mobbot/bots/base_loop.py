"""Base automation loop — toggle state, generation token and timer bookkeeping."""

import random
import time
from typing import Any, Callable, Dict, Optional

from mobbot.domain.models import LoopHandle
from mobbot.domain.settings import AgentSettings
from mobbot.status import StatusBoard
from mobbot.timers import TimerService


def randomize(base: float, variance: float, rng: Optional[random.Random] = None) -> float:
    """``base`` perturbed uniformly within ``±variance``."""
    r = rng or random
    return base + r.uniform(-variance, variance)


class BaseLoop:
    """Shared lifecycle for the toggleable loops.

    Every start and stop bumps ``handle.generation``. Callbacks scheduled under an
    older generation see the mismatch and do nothing, which is how a stale pause
    or a late network completion from a previous run is neutralised.
    """

    channel = ""

    def __init__(self, timers: TimerService, board: StatusBoard, settings: AgentSettings):
        self._timers = timers
        self._board = board
        self._settings = settings
        self.handle = LoopHandle()

    @property
    def enabled(self) -> bool:
        return self.handle.enabled

    def status(self) -> str:
        return "ACTIVE" if self.handle.enabled else "INACTIVE"

    def is_current(self, generation: int) -> bool:
        return self.handle.enabled and generation == self.handle.generation

    async def start(self):
        if self.handle.enabled:
            return
        self.handle.enabled = True
        self.handle.generation += 1
        await self._on_start(self.handle.generation)

    async def stop(self):
        if not self.handle.enabled:
            return
        self.handle.enabled = False
        self.handle.generation += 1
        self._disarm()
        self._on_stop()

    def _arm(self, interval: float, callback: Callable[[], Any]):
        self._disarm()
        self.handle.timer_id = self._timers.every(interval, callback)

    def _arm_once(self, delay: float, callback: Callable[[], Any]):
        self._disarm()
        self.handle.timer_id = self._timers.later(delay, callback)

    def _disarm(self):
        self._timers.cancel(self.handle.timer_id)
        self.handle.timer_id = None

    def _record_run(self, interval_seconds: float):
        self.handle.last_run = time.time()
        self.handle.next_run = self.handle.last_run + interval_seconds
        self._board.set_run_times(self.channel, self.handle.last_run, self.handle.next_run)

    async def _on_start(self, generation: int):
        raise NotImplementedError

    def _on_stop(self):
        pass

    def snapshot(self) -> Dict[str, Any]:
        return {
            "status": self.status(),
            "last_run": self.handle.last_run,
            "next_run": self.handle.next_run,
        }
