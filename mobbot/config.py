"""Runtime configuration — static defaults overridable from the environment."""

import os
from typing import Any, Dict, Tuple

STATS: Tuple[str, ...] = ("health", "stamina", "strength", "speed", "endurance", "defence")

# Action kinds in auto-crime priority order
ACTION_KINDS: Tuple[str, ...] = ("heist", "gta", "crime")

BUST_LEXICON: Tuple[str, ...] = ("bust", "self bust")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


def load_config() -> Dict[str, Any]:
    """Build the config dict from environment variables."""
    token = os.getenv("MOBBOT_AUTH_TOKEN", "")
    return {
        "api_base": os.getenv("MOBBOT_API_BASE", "https://api.mobsteria.com/api").rstrip("/"),
        # Rotate manually; sent verbatim as the bearer credential
        "auth_token": token,
        "game_url": os.getenv("MOBBOT_GAME_URL", "https://mobsteria.com"),
        "control_port": _env_int("MOBBOT_CONTROL_PORT", 8765),
        "cache_cooldown": _env_float("MOBBOT_CACHE_COOLDOWN", 2.0),
        "cache_expiry": _env_float("MOBBOT_CACHE_EXPIRY", 5.0),
        "max_queue_size": _env_int("MOBBOT_MAX_QUEUE", 5),
        "auto_crime_interval": _env_float("MOBBOT_AUTO_CRIME_INTERVAL", 5.0),
        "default_cooldown": _env_int("MOBBOT_DEFAULT_COOLDOWN", 30),
        "bust_pause_ms": 300,
        "jitter_ms": 50,
        "train_retry_seconds": 60,
        "default_ids": {"crime": 2, "gta": 1, "heist": 1},
        "min_train_energy": 10,
        "default_train_interval": 1,
        "default_scan_interval": 100,
    }


CONFIG: Dict[str, Any] = load_config()
