"""Auto-crime — picks heist, GTA or crime by resource priority behind a shared cooldown."""

import functools
from dataclasses import dataclass
from typing import Any, Dict, Optional

from mobbot.bots.base_loop import BaseLoop
from mobbot.config import CONFIG
from mobbot.domain.models import CharacterState, CrimeCooldown, is_in_jail, read_resource, timer_ready
from mobbot.domain.settings import AgentSettings
from mobbot.status import StatusBoard
from mobbot.timers import TimerService


@dataclass(frozen=True)
class CrimeOperation:
    kind: str
    name: str
    resource: str
    client_method: str


OPERATIONS: Dict[str, CrimeOperation] = {
    "crime": CrimeOperation("crime", "Crime", "nerve", "commit_crime"),
    "gta": CrimeOperation("gta", "GTA", "focus", "commit_gta"),
    "heist": CrimeOperation("heist", "Heist", "wit", "start_heist"),
}


def choose_action(state: CharacterState, settings: AgentSettings) -> Optional[str]:
    """First satisfied of heist, GTA, crime. Heist ignores availability timers."""
    wit = read_resource(state, "wit")
    focus = read_resource(state, "focus")
    nerve = read_resource(state, "nerve")

    if wit >= settings.resource_cost("heist", "wit"):
        return "heist"
    if timer_ready(state, "gta") and focus >= settings.resource_cost("gta", "focus"):
        return "gta"
    if timer_ready(state, "crime") and nerve >= settings.resource_cost("crime", "nerve"):
        return "crime"
    return None


class AutoCrimes(BaseLoop):
    """Inactive <-> Active, with a nested Ready -> InProgress(N) -> Ready cooldown.

    The cooldown is shared by auto and manual attempts and is checked before any
    action request goes out. Stopping the loop leaves a running cooldown alone.
    """

    channel = "crimes"

    def __init__(self, timers: TimerService, board: StatusBoard, settings: AgentSettings, cache, api):
        super().__init__(timers, board, settings)
        self._cache = cache
        self._api = api
        self.cooldown = CrimeCooldown()
        self._cooldown_timer = None
        self._attempting = False

    # ------------------------------------------------------------------
    # Loop lifecycle
    # ------------------------------------------------------------------
    async def _on_start(self, generation: int):
        self._arm(CONFIG["auto_crime_interval"], functools.partial(self.check_and_execute, generation))
        self._board.report(self.channel, "Auto-crime system activated")
        await self.check_and_execute(generation)

    def _on_stop(self):
        self._board.report(self.channel, "Auto-crime system deactivated")

    async def check_and_execute(self, generation: int):
        if not self.is_current(generation):
            return
        try:
            await self._auto_tick(generation)
        except Exception as e:
            self._board.report(self.channel, f"Auto-crime tick failed: {e}", is_error=True)

    async def _auto_tick(self, generation: int):
        state = await self._cache.get_character_updates(force=True)
        if not self.is_current(generation):
            return
        if not state or not state.get("resources"):
            self._board.report(self.channel, "Failed to fetch character updates", is_error=True)
            return
        if is_in_jail(state):
            self._board.report(self.channel, "Character is in jail - skipping")
            return

        kind = choose_action(state, self._settings)
        if kind is None:
            self._board.report(
                self.channel,
                "Insufficient resources (Nerve:{:g} Focus:{:g} Wit:{:g})".format(
                    read_resource(state, "nerve"),
                    read_resource(state, "focus"),
                    read_resource(state, "wit"),
                ),
            )
            return

        op = OPERATIONS[kind]
        verb = "starting" if kind == "heist" else "committing"
        self._board.report(
            self.channel, f"Auto-{verb} {op.name} ({op.resource.title()}: {read_resource(state, op.resource):g})"
        )
        await self.execute(kind, state=state)

    # ------------------------------------------------------------------
    # Action attempts
    # ------------------------------------------------------------------
    async def execute(self, kind: str, state: Optional[CharacterState] = None) -> Optional[Any]:
        """Attempt one action. ``state`` is passed by the auto loop; manual calls fetch it."""
        op = OPERATIONS[kind]
        if self._refuse_if_busy():
            return None

        if state is None:
            state = await self._cache.get_character_updates(force=True)
            if not state:
                self._board.report(self.channel, "Failed to fetch character data", is_error=True)
                self._board.set_status(self.channel, "Update failed", is_error=True)
                self.start_cooldown(CONFIG["default_cooldown"])
                return None
            if is_in_jail(state):
                self._board.report(self.channel, "Cannot commit crimes while in jail", is_error=True)
                self._board.set_status(self.channel, "In jail", is_error=True)
                return None
            # Another attempt may have started while the refresh was pending
            if self._refuse_if_busy():
                return None

        action_id = self._settings.action_id(kind)
        self._board.report(self.channel, f"Attempting {op.name}...")
        self._board.set_status(self.channel, f"{op.name}...")
        self._attempting = True
        try:
            result = await getattr(self._api, op.client_method)(action_id)
        finally:
            self._attempting = False

        if not result.success:
            self._board.report(self.channel, f"{op.name} failed: {result.error}", is_error=True)
            self._board.set_status(self.channel, "Error", is_error=True)
            self.start_cooldown(CONFIG["default_cooldown"])
            return None

        data = result.data if isinstance(result.data, dict) else {}
        self._board.report(
            self.channel,
            f"{op.name} successful!\n"
            f"Reward: ${data.get('reward') or '0'}\n"
            f"Exp gained: {data.get('exp_gained') or '0'}",
        )
        self._board.set_status(self.channel, f"{op.name} done")
        try:
            seconds = int(float(data.get("cooldown_remaining") or 0))
        except (TypeError, ValueError):
            seconds = 0
        self.start_cooldown(seconds)
        return result.data

    def _refuse_if_busy(self) -> bool:
        if self._attempting:
            self._board.report(self.channel, "Another action is in progress", is_error=True)
            return True
        if self.cooldown.active:
            remaining = self.cooldown.remaining_seconds
            self._board.report(self.channel, f"Wait {remaining}s before next action", is_error=True)
            self._board.set_status(self.channel, f"Wait {remaining}s", is_error=True)
            return True
        return False

    async def commit_crime(self, crime_id: Optional[int] = None):
        return await self._manual("crime", crime_id)

    async def commit_gta(self, gta_id: Optional[int] = None):
        return await self._manual("gta", gta_id)

    async def start_heist(self, heist_id: Optional[int] = None):
        return await self._manual("heist", heist_id)

    async def _manual(self, kind: str, action_id: Optional[int]):
        if action_id:
            self._settings.set_action_id(kind, action_id)
        return await self.execute(kind)

    # ------------------------------------------------------------------
    # Cooldown countdown
    # ------------------------------------------------------------------
    def start_cooldown(self, seconds: int):
        seconds = max(0, int(seconds))
        self._timers.cancel(self._cooldown_timer)
        self._cooldown_timer = None
        cd = self.cooldown
        cd.generation += 1
        cd.remaining_seconds = seconds
        cd.active = seconds > 0
        if not cd.active:
            self._finish_cooldown()
            return
        self._board.set_cooldown(self.channel, f"Cooldown: {seconds}s")
        self._cooldown_timer = self._timers.later(1, functools.partial(self._tick_cooldown, cd.generation))

    def _tick_cooldown(self, generation: int):
        cd = self.cooldown
        if generation != cd.generation or not cd.active:
            return
        cd.remaining_seconds = max(0, cd.remaining_seconds - 1)
        if cd.remaining_seconds == 0:
            cd.active = False
            self._cooldown_timer = None
            self._finish_cooldown()
            return
        self._board.set_cooldown(self.channel, f"Cooldown: {cd.remaining_seconds}s")
        self._cooldown_timer = self._timers.later(1, functools.partial(self._tick_cooldown, generation))

    def _finish_cooldown(self):
        self._board.set_cooldown(self.channel, "")
        self._board.set_status(self.channel, "Ready")

    def snapshot(self) -> Dict[str, Any]:
        snap = super().snapshot()
        snap["cooldown"] = {
            "active": self.cooldown.active,
            "remaining_seconds": self.cooldown.remaining_seconds,
        }
        return snap
