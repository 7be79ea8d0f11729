"""mobbot — Mobsteria automation agent package."""

from mobbot.config import CONFIG
from mobbot.timers import TimerService
from mobbot.api_client import GameApiClient
from mobbot.character_cache import CharacterStateCache
from mobbot.status import StatusBoard
from mobbot.bots.bust_scanner import BustScanner
from mobbot.bots.trainer import AutoTrainer
from mobbot.bots.crimes import AutoCrimes
from mobbot.agent import ScannerAgent

__all__ = [
    "CONFIG",
    "TimerService",
    "GameApiClient",
    "CharacterStateCache",
    "StatusBoard",
    "BustScanner",
    "AutoTrainer",
    "AutoCrimes",
    "ScannerAgent",
]
