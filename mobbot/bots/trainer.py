"""Auto-trainer — trains a stat on a fixed interval whenever energy allows."""

import functools
from typing import Any, Dict, Optional

from mobbot.bots.base_loop import BaseLoop
from mobbot.config import CONFIG
from mobbot.domain.models import read_resource
from mobbot.domain.settings import AgentSettings
from mobbot.status import StatusBoard
from mobbot.timers import TimerService


def _format_training(stat: str, data: Any) -> str:
    data = data if isinstance(data, dict) else {}
    return (
        f"Trained {stat} successfully!\n"
        f"Energy used: {data.get('energy_cost') or 'N/A'}\n"
        f"Exp gained: {data.get('exp_gained') or 'N/A'}"
    )


class AutoTrainer(BaseLoop):
    """Inactive <-> Active.

    Each tick force-refreshes the character cache and trains only when current
    energy reaches the ``min_energy`` threshold. A failed training call replaces
    the regular timer with a one-minute retry, after which the regular interval
    resumes.
    """

    channel = "trainer"

    def __init__(self, timers: TimerService, board: StatusBoard, settings: AgentSettings, cache, api):
        super().__init__(timers, board, settings)
        self._cache = cache
        self._api = api
        self.current_energy: float = 0.0
        self.last_error: Optional[str] = None

    def _interval_seconds(self) -> float:
        return self._settings.train_interval() * 60

    def _arm_regular(self, generation: int):
        self._arm(self._interval_seconds(), functools.partial(self.check_energy_and_train, generation))

    async def _on_start(self, generation: int):
        self._board.set_status(self.channel, "ACTIVE")
        self._board.report(self.channel, "Auto-trainer activated")
        self._arm_regular(generation)
        self._record_run(self._interval_seconds())
        await self.check_energy_and_train(generation)

    def _on_stop(self):
        self.handle.next_run = None
        self._board.set_status(self.channel, "INACTIVE")
        self._board.set_run_times(self.channel, self.handle.last_run, None)
        self._board.report(self.channel, "Auto-trainer deactivated")

    async def check_energy_and_train(self, generation: int):
        if not self.is_current(generation):
            return
        try:
            await self._train_tick(generation)
        except Exception as e:
            if self.is_current(generation):
                self._schedule_retry(generation, str(e))

    async def _train_tick(self, generation: int):
        state = await self._cache.get_character_updates(force=True)
        if not self.is_current(generation):
            return
        if state is None:
            self._board.report(self.channel, "Failed to fetch character updates", is_error=True)
            return

        min_energy = self._settings.energy_threshold()
        self.current_energy = read_resource(state, "energy")
        if self.current_energy < min_energy:
            self._board.report(
                self.channel, f"Waiting for energy ({self.current_energy:g}/{min_energy})"
            )
            return

        stat = self._settings.train_stat
        self._board.report(self.channel, f"Training {stat}...")
        result = await self._api.train(stat)
        if not self.is_current(generation):
            return
        if not result.success:
            self._schedule_retry(generation, result.error)
            return

        self.last_error = None
        self._board.report(self.channel, _format_training(stat, result.data))
        interval = self._interval_seconds()
        timer = self.handle.timer_id
        if timer is None or not timer.repeating or timer.interval != interval:
            # Interval edited since arming, or recovering from a retry
            self._arm_regular(generation)
        self._record_run(interval)

    def _schedule_retry(self, generation: int, error: Optional[str]):
        retry = CONFIG["train_retry_seconds"]
        self.last_error = error
        self._board.report(self.channel, f"Training failed: {error}", is_error=True)
        self._arm_once(retry, functools.partial(self._recover, generation))
        self._record_run(retry)

    async def _recover(self, generation: int):
        if not self.is_current(generation):
            return
        self._arm_regular(generation)
        await self.check_energy_and_train(generation)

    async def manual_train(self, stat: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """One-off training outside the loop. Same energy gate, no retry scheduling."""
        stat = stat or self._settings.train_stat
        state = await self._cache.get_character_updates(force=True)
        if state is None:
            self._board.report(self.channel, "Failed to fetch character updates", is_error=True)
            return None

        min_energy = self._settings.energy_threshold()
        self.current_energy = read_resource(state, "energy")
        if self.current_energy < min_energy:
            self._board.report(
                self.channel, f"Not enough energy ({self.current_energy:g}/{min_energy})"
            )
            return {"error": "Not enough energy"}

        self._board.report(self.channel, f"Manually training {stat}...")
        result = await self._api.train(stat)
        if not result.success:
            self._board.report(self.channel, f"Training failed: {result.error}", is_error=True)
            return None

        self._board.report(self.channel, _format_training(stat, result.data))
        if self.enabled:
            self._record_run(self._interval_seconds())
        return result.data
