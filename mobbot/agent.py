"""Scanner agent — wires the cache and the three loops, exposes the control surface."""

import random
import sys
from typing import Any, Dict, Optional

from mobbot.api_client import GameApiClient
from mobbot.bots.bust_scanner import BustScanner
from mobbot.bots.crimes import AutoCrimes
from mobbot.bots.trainer import AutoTrainer
from mobbot.character_cache import CharacterStateCache
from mobbot.domain.settings import AgentSettings
from mobbot.ports.dom import DomProbe
from mobbot.status import StatusBoard
from mobbot.timers import TimerService


def _log(msg: str):
    print(msg, file=sys.stderr)


class ScannerAgent:
    """Owns every component instance. No module-level state is shared between agents."""

    def __init__(
        self,
        probe: DomProbe,
        api: Optional[GameApiClient] = None,
        timers: Optional[TimerService] = None,
        settings: Optional[AgentSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.timers = timers or TimerService()
        self.api = api or GameApiClient()
        self.settings = settings or AgentSettings()
        self.board = StatusBoard()
        self.probe = probe
        self.cache = CharacterStateCache(self.api, clock=self.timers.now)
        self.bust = BustScanner(self.timers, self.board, self.settings, probe, rng=rng)
        self.trainer = AutoTrainer(self.timers, self.board, self.settings, self.cache, self.api)
        self.crimes = AutoCrimes(self.timers, self.board, self.settings, self.cache, self.api)
        self._destroyed = False

    def loop(self, name: str):
        loops = {"bust": self.bust, "trainer": self.trainer, "crimes": self.crimes}
        if name not in loops:
            raise KeyError(name)
        return loops[name]

    # ------------------------------------------------------------------
    # Bust scanner
    # ------------------------------------------------------------------
    async def start_bust_scanner(self):
        await self.bust.start()

    async def stop_bust_scanner(self):
        await self.bust.stop()

    def get_bust_scanner_status(self) -> str:
        return self.bust.status()

    def set_scan_interval(self, ms: int):
        self.settings.set_scan_interval(ms)

    def get_scan_interval(self) -> int:
        return self.settings.scan_interval()

    # ------------------------------------------------------------------
    # Trainer
    # ------------------------------------------------------------------
    async def start_trainer(self):
        await self.trainer.start()

    async def stop_trainer(self):
        await self.trainer.stop()

    def get_trainer_status(self) -> str:
        return self.trainer.status()

    async def manual_train(self, stat: Optional[str] = None):
        return await self.trainer.manual_train(stat)

    def get_current_energy(self) -> float:
        return self.trainer.current_energy

    # ------------------------------------------------------------------
    # Crimes
    # ------------------------------------------------------------------
    async def commit_crime(self, crime_id: Optional[int] = None):
        return await self.crimes.commit_crime(crime_id)

    async def commit_gta(self, gta_id: Optional[int] = None):
        return await self.crimes.commit_gta(gta_id)

    async def start_heist(self, heist_id: Optional[int] = None):
        return await self.crimes.start_heist(heist_id)

    async def start_auto_crimes(self):
        await self.crimes.start()

    async def stop_auto_crimes(self):
        await self.crimes.stop()

    def get_auto_crime_status(self) -> str:
        return self.crimes.status()

    def set_resource_cost(self, kind: str, resource: str, value: int):
        self.settings.set_resource_cost(kind, resource, value)

    def get_resource_cost(self, kind: str, resource: str) -> int:
        return self.settings.resource_cost(kind, resource)

    # ------------------------------------------------------------------
    # Shared
    # ------------------------------------------------------------------
    async def get_character_updates(self, force: bool = False):
        return await self.cache.get_character_updates(force)

    def get_resource_usage(self) -> Dict[str, int]:
        return self.timers.usage()

    def status_dict(self) -> Dict[str, Any]:
        """Snapshot for API / dashboard display."""
        return {
            "loops": {
                "bust": self.bust.snapshot(),
                "trainer": self.trainer.snapshot(),
                "crimes": self.crimes.snapshot(),
            },
            "board": self.board.to_dict(),
            "settings": self.settings.to_dict(),
            "energy": self.trainer.current_energy,
            "cache": self.cache.stats(),
            "timers": self.timers.usage(),
        }

    async def destroy(self):
        """Stop every loop, cancel every timer and release page-side effects."""
        if self._destroyed:
            return
        self._destroyed = True
        for loop in (self.bust, self.trainer, self.crimes):
            await loop.stop()
        self.timers.cancel_all()
        try:
            await self.probe.release()
        except Exception as e:
            _log(f"[Agent] probe release failed: {e}")
        await self.api.close()
        _log("[Agent] destroyed")
