"""Live user parameters — edited by the control surface, read by loops every tick."""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from mobbot.config import CONFIG, STATS

SCAN_INTERVAL_RANGE = (50, 1000)  # ms
TRAIN_INTERVAL_RANGE = (1, 60)  # minutes
MIN_ENERGY_RANGE = (1, 100)

# Which resource each action consumes
COST_RESOURCES: Dict[str, str] = {"crime": "nerve", "gta": "focus", "heist": "wit"}


def _default_costs() -> Dict[str, Dict[str, int]]:
    return {"crime": {"nerve": 10}, "gta": {"focus": 15}, "heist": {"wit": 20}}


def _clamp(value: int, bounds: tuple) -> int:
    return max(bounds[0], min(bounds[1], value))


def as_int(value: Any, default: int) -> int:
    """Lenient int parse: empty, zero or malformed input yields ``default``."""
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed or default


@dataclass
class AgentSettings:
    """Mutable settings the loops poll. Nothing here is snapshotted at start."""

    scan_interval_ms: int = 100
    train_interval_minutes: int = 1
    min_energy: int = 10
    train_stat: str = "strength"
    action_ids: Dict[str, Optional[int]] = field(
        default_factory=lambda: {"crime": None, "gta": None, "heist": None}
    )
    resource_costs: Dict[str, Dict[str, int]] = field(default_factory=_default_costs)

    def set_scan_interval(self, ms: int):
        self.scan_interval_ms = _clamp(int(ms), SCAN_INTERVAL_RANGE)

    def scan_interval(self) -> int:
        return as_int(self.scan_interval_ms, CONFIG["default_scan_interval"])

    def set_train_interval(self, minutes: int):
        self.train_interval_minutes = _clamp(int(minutes), TRAIN_INTERVAL_RANGE)

    def train_interval(self) -> int:
        return as_int(self.train_interval_minutes, CONFIG["default_train_interval"])

    def set_min_energy(self, value: int):
        self.min_energy = _clamp(int(value), MIN_ENERGY_RANGE)

    def energy_threshold(self) -> int:
        return as_int(self.min_energy, CONFIG["min_train_energy"])

    def set_train_stat(self, stat: str):
        if stat not in STATS:
            raise ValueError(f"unknown stat {stat!r}; expected one of {', '.join(STATS)}")
        self.train_stat = stat

    def set_action_id(self, kind: str, action_id: Optional[int]):
        if kind not in self.action_ids:
            raise ValueError(f"unknown action {kind!r}")
        self.action_ids[kind] = action_id

    def action_id(self, kind: str) -> int:
        """Configured id, falling back to the default when the field is empty."""
        return as_int(self.action_ids.get(kind), CONFIG["default_ids"][kind])

    def set_resource_cost(self, kind: str, resource: str, value: int):
        costs = self.resource_costs.get(kind)
        if costs is None or resource not in costs:
            return
        costs[resource] = max(0, int(value))

    def resource_cost(self, kind: str, resource: str) -> int:
        costs = self.resource_costs.get(kind) or {}
        try:
            return max(0, int(costs.get(resource) or 0))
        except (TypeError, ValueError):
            return 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scan_interval_ms": self.scan_interval(),
            "train_interval_minutes": self.train_interval(),
            "min_energy": self.energy_threshold(),
            "train_stat": self.train_stat,
            "action_ids": {k: self.action_id(k) for k in self.action_ids},
            "resource_costs": {k: dict(v) for k, v in self.resource_costs.items()},
        }
