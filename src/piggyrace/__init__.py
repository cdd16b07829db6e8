"""Piggy Race: a savings game where kids race AI savers towards a purchase goal."""

from .catalog import Catalog, GameRules
from .engine import SavingsEngine
from .exceptions import (
    AlreadyCollectedError,
    InsufficientFundsError,
    InvalidGoalError,
    PersistenceFailedError,
    PiggyRaceError,
    TooSoonError,
    UnknownMiniGameError,
    UnknownTemptationError,
)
from .i18n import Translator
from .minigames import CoinCountingPuzzle, PriceComparisonPuzzle, generate_puzzle
from .models import (
    AIRacer,
    Choice,
    CompletedGoal,
    Credited,
    GamePhase,
    GameStatus,
    Goal,
    GoalCompleted,
    MilestoneReached,
    MiniGame,
    MiniGameOutcome,
    Temptation,
    TemptationOutcome,
)
from .notifications import Notification, NotificationCenter, NotificationChannel, NotificationType
from .ops import MemoryStateStore, StateStore, StructuredLogger
from .simulation import DailySimulationDriver, DayReport
from .state import STORAGE_KEY, GameState, load, serialize

__all__ = [
    "AIRacer",
    "AlreadyCollectedError",
    "Catalog",
    "Choice",
    "CoinCountingPuzzle",
    "CompletedGoal",
    "Credited",
    "DailySimulationDriver",
    "DayReport",
    "GamePhase",
    "GameRules",
    "GameState",
    "GameStatus",
    "Goal",
    "GoalCompleted",
    "InsufficientFundsError",
    "InvalidGoalError",
    "MemoryStateStore",
    "MilestoneReached",
    "MiniGame",
    "MiniGameOutcome",
    "Notification",
    "NotificationCenter",
    "NotificationChannel",
    "NotificationType",
    "PersistenceFailedError",
    "PiggyRaceError",
    "PriceComparisonPuzzle",
    "STORAGE_KEY",
    "SavingsEngine",
    "StateStore",
    "StructuredLogger",
    "Temptation",
    "TemptationOutcome",
    "TooSoonError",
    "Translator",
    "UnknownMiniGameError",
    "UnknownTemptationError",
    "generate_puzzle",
    "load",
    "serialize",
]
