"""Domain data models — pure Python dataclasses."""

from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, Optional

# Character state is the raw JSON returned by /character-updates.
# Replaced wholesale on refresh, never mutated in place.
CharacterState = Dict[str, Any]


def read_resource(state: Optional[CharacterState], name: str) -> float:
    """Read ``resources.<name>.current`` as a float (numeric strings allowed)."""
    if not state:
        return 0.0
    resource = (state.get("resources") or {}).get(name) or {}
    try:
        return float(resource.get("current") or 0)
    except (TypeError, ValueError):
        return 0.0


def is_in_jail(state: CharacterState) -> bool:
    return bool((state.get("jail") or {}).get("isInJail"))


def timer_ready(state: CharacterState, name: str) -> bool:
    """True only when ``timers.<name>`` is literally ``true``."""
    return (state.get("timers") or {}).get(name) is True


@dataclass
class ApiResult:
    """Outcome of a gateway call. Failures are values, never exceptions."""

    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    status_code: Optional[int] = None
    kind: str = "ok"  # "ok" | "transport" | "business"


@dataclass
class CacheEntry:
    value: Optional[CharacterState] = None
    fetched_at: Optional[float] = None  # monotonic seconds


@dataclass
class RefreshState:
    in_flight: bool = False
    waiters: Deque[Any] = field(default_factory=deque)  # asyncio.Future FIFO
    last_fetch_start: Optional[float] = None


@dataclass
class CrimeCooldown:
    """Per-action cooldown. ``generation`` invalidates stale countdown ticks."""

    remaining_seconds: int = 0
    active: bool = False
    generation: int = 0


@dataclass
class LoopHandle:
    enabled: bool = False
    timer_id: Optional[Any] = None  # TimerHandle while enabled
    last_run: Optional[float] = None  # wall-clock epoch seconds
    next_run: Optional[float] = None
    generation: int = 0
