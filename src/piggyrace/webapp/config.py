"""Configuration values for the Piggy Race web adapter, read from the environment."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from ..catalog import GameRules
from ..simulation import DEFAULT_MINI_GAME_PROBABILITY, DEFAULT_TEMPTATION_PROBABILITY
from ..state import STORAGE_KEY as DEFAULT_STORAGE_KEY

load_dotenv()


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


def _env_optional(name: str) -> Optional[str]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    return raw.strip()


SQLITE_FILE_NAME = os.environ.get("PIGGYRACE_SQLITE", "piggyrace.db")
STORAGE_KEY = os.environ.get("PIGGYRACE_STORAGE_KEY", DEFAULT_STORAGE_KEY)
LOCALE = os.environ.get("PIGGYRACE_LOCALE", "en")
LOG_FILE: Optional[Path] = Path(os.environ["PIGGYRACE_LOG_FILE"]) if os.environ.get("PIGGYRACE_LOG_FILE") else None
TEMPTATION_PROBABILITY = _env_float("PIGGYRACE_TEMPTATION_PROBABILITY", DEFAULT_TEMPTATION_PROBABILITY)
MINI_GAME_PROBABILITY = _env_float("PIGGYRACE_MINI_GAME_PROBABILITY", DEFAULT_MINI_GAME_PROBABILITY)
RULES = GameRules.from_overrides(
    daily_allowance=_env_optional("PIGGYRACE_DAILY_ALLOWANCE"),
    chore_reward=_env_optional("PIGGYRACE_CHORE_REWARD"),
    weekly_interest=_env_optional("PIGGYRACE_WEEKLY_INTEREST"),
    save_bonus=_env_optional("PIGGYRACE_SAVE_BONUS"),
)

__all__ = [
    "LOCALE",
    "LOG_FILE",
    "MINI_GAME_PROBABILITY",
    "RULES",
    "SQLITE_FILE_NAME",
    "STORAGE_KEY",
    "TEMPTATION_PROBABILITY",
]
