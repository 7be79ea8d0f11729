"""Status board — latest observable state per loop, rendered by whatever UI is attached."""

import sys
from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Dict, Optional

CHANNELS = ("bust", "trainer", "crimes")


def _log(msg: str):
    print(msg, file=sys.stderr)


@dataclass
class ChannelStatus:
    status: str = "Ready"
    is_error: bool = False
    result: str = ""
    cooldown: str = ""
    last_run: Optional[str] = None  # ISO datetime
    next_run: Optional[str] = None


class StatusBoard:
    """Collects the text a panel would show. Every result is also logged."""

    def __init__(self):
        self._channels: Dict[str, ChannelStatus] = {name: ChannelStatus() for name in CHANNELS}

    def channel(self, name: str) -> ChannelStatus:
        return self._channels[name]

    def set_status(self, name: str, status: str, is_error: bool = False):
        ch = self._channels[name]
        ch.status = status
        ch.is_error = is_error

    def report(self, name: str, message: str, is_error: bool = False):
        self._channels[name].result = message
        prefix = "ERROR " if is_error else ""
        _log(f"[{name}] {prefix}{message}")

    def set_cooldown(self, name: str, text: str):
        self._channels[name].cooldown = text

    def set_run_times(self, name: str, last_run: Optional[float], next_run: Optional[float]):
        ch = self._channels[name]
        ch.last_run = datetime.fromtimestamp(last_run).isoformat() if last_run else None
        ch.next_run = datetime.fromtimestamp(next_run).isoformat() if next_run else None

    def to_dict(self) -> Dict[str, dict]:
        return {name: asdict(ch) for name, ch in self._channels.items()}
