"""Bust scanner — polls the page for bust buttons on a jittered interval and clicks them."""

import functools
import random
from typing import List, Optional

from mobbot.bots.base_loop import BaseLoop, randomize
from mobbot.config import BUST_LEXICON, CONFIG
from mobbot.domain.settings import AgentSettings
from mobbot.ports.dom import DomElement, DomProbe
from mobbot.status import StatusBoard
from mobbot.timers import TimerService

PREFERRED_CLASSES = ("shadow-deep-green", "shadow-deep-yellow")


def pick_target(matches: List[DomElement]) -> Optional[DomElement]:
    """Green marker first, then yellow, then the first match in document order."""
    for marker in PREFERRED_CLASSES:
        for element in matches:
            if element.has_class(marker):
                return element
    return matches[0] if matches else None


def _secs(ms: float) -> float:
    return round(ms / 10) / 100


class BustScanner(BaseLoop):
    """Stopped -> Scanning -> (Clicking -> Paused -> Scanning).

    After a click the repeating timer is replaced by a one-shot pause; when the
    pause expires a fresh repeating timer is armed with a newly jittered interval.
    """

    channel = "bust"

    def __init__(
        self,
        timers: TimerService,
        board: StatusBoard,
        settings: AgentSettings,
        probe: DomProbe,
        rng: Optional[random.Random] = None,
    ):
        super().__init__(timers, board, settings)
        self._probe = probe
        self._rng = rng
        self._scanning = False
        self.clicks = 0

    def _interval_ms(self) -> float:
        return randomize(self._settings.scan_interval(), CONFIG["jitter_ms"], self._rng)

    def _arm_scan(self, generation: int) -> float:
        interval_ms = self._interval_ms()
        self._arm(interval_ms / 1000, functools.partial(self.scan, generation))
        return interval_ms

    async def _on_start(self, generation: int):
        """The first scan runs in the caller; start() returns once the page has been queried."""
        self._board.set_status(self.channel, "Scanning")
        self._board.report(self.channel, "Bust scanner activated")
        await self.scan(generation)
        if self.is_current(generation) and self.handle.timer_id is None:
            interval_ms = self._arm_scan(generation)
            self._board.report(
                self.channel, f"Starting scan (randomized interval: ~{_secs(interval_ms)}s)"
            )

    def _on_stop(self):
        self._board.set_status(self.channel, "Ready")
        self._board.report(self.channel, "Bust scanner deactivated")

    async def scan(self, generation: int):
        if not self.is_current(generation) or self._scanning:
            return
        self._scanning = True
        try:
            await self._scan_once(generation)
        finally:
            self._scanning = False

    async def _scan_once(self, generation: int):
        try:
            elements = await self._probe.query_clickable()
        except Exception as e:
            self._board.report(self.channel, f"Scan failed: {e}", is_error=True)
            return
        if not self.is_current(generation):
            return

        matches = [el for el in elements if el.normalized_text in BUST_LEXICON]
        if not matches:
            self._board.report(
                self.channel, "No matching buttons found (looking for: Bust, Self Bust)"
            )
            return

        found = ", ".join(f'"{el.text.strip()}"' for el in matches)
        self._board.report(self.channel, f"Found {len(matches)} matching buttons: {found}")

        target = pick_target(matches)
        self._disarm()
        self._board.set_status(self.channel, "Clicking")
        self._board.report(self.channel, f'Clicking: "{target.text.strip()}"')
        try:
            await self._probe.click(target)
        except Exception as e:
            self._board.report(self.channel, f"Click failed: {e}", is_error=True)
            if self.is_current(generation):
                self._board.set_status(self.channel, "Scanning")
                self._arm_scan(generation)
            return
        self.clicks += 1

        if not self.is_current(generation):
            return
        delay_ms = randomize(CONFIG["bust_pause_ms"], CONFIG["jitter_ms"], self._rng)
        self._board.set_status(self.channel, "Paused")
        self._board.report(self.channel, f"Pausing for {_secs(delay_ms)}s...")
        self._arm_once(delay_ms / 1000, functools.partial(self._resume, generation))

    def _resume(self, generation: int):
        if not self.is_current(generation):
            return
        interval_ms = self._arm_scan(generation)
        self._board.set_status(self.channel, "Scanning")
        self._board.report(
            self.channel, f"Resuming scan (next check in ~{_secs(interval_ms)}s)"
        )
