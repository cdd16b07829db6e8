"""Static game content: goals, racers, temptations, mini-games and rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Iterable, Optional, Sequence, Tuple

from .exceptions import InvalidGoalError, UnknownMiniGameError, UnknownTemptationError
from .models import AIRacer, Goal, MiniGame, Temptation
from .money import AmountLike, require_positive, to_decimal

MILESTONE_THRESHOLDS: Tuple[int, ...] = (25, 50, 75, 100)
INTEREST_INTERVAL_DAYS = 7


@dataclass(frozen=True, slots=True)
class GameRules:
    """Amounts paid out by the savings engine."""

    daily_allowance: Decimal = Decimal("1.00")
    chore_reward: Decimal = Decimal("2.00")
    weekly_interest: Decimal = Decimal("0.50")
    save_bonus: Decimal = Decimal("0.25")
    interest_interval_days: int = INTEREST_INTERVAL_DAYS
    milestones: Tuple[int, ...] = MILESTONE_THRESHOLDS

    def __post_init__(self) -> None:
        for name in ("daily_allowance", "chore_reward", "weekly_interest", "save_bonus"):
            value = to_decimal(getattr(self, name))
            require_positive(value)
            object.__setattr__(self, name, value)
        if self.interest_interval_days <= 0:
            raise ValueError("interest_interval_days must be positive")
        thresholds = tuple(sorted(set(int(item) for item in self.milestones)))
        if not thresholds or thresholds[0] <= 0 or thresholds[-1] > 100:
            raise ValueError("Milestones must be percentages between 1 and 100.")
        object.__setattr__(self, "milestones", thresholds)

    @property
    def average_daily_rate(self) -> Decimal:
        """Expected earnings per day assuming half of the offered chores are done."""

        return to_decimal(self.daily_allowance + self.chore_reward / 2)

    @classmethod
    def from_overrides(cls, **overrides: Optional[AmountLike]) -> "GameRules":
        """Build rules, ignoring overrides that are ``None``."""

        values = {key: value for key, value in overrides.items() if value is not None}
        return cls(**values)


DEFAULT_GOALS: Tuple[Goal, ...] = (
    Goal("basketball", "Basketball", 25, "🏀"),
    Goal("videogame", "Video Game", 50, "🎮"),
    Goal("bike", "Bike", 100, "🚲"),
    Goal("toy", "Toy", 10, "🧸"),
    Goal("book", "Book", 15, "📚"),
    Goal("headphones", "Headphones", 75, "🎧"),
)

DEFAULT_TEMPTATIONS: Tuple[Temptation, ...] = (
    Temptation("candy", "candy", 2, "🍭"),
    Temptation("soda", "soda", 3, "🥤"),
    Temptation("chips", "chips", 2, "🍿"),
    Temptation("toy", "toy", 5, "🪀"),
    Temptation("comic-book", "comic book", 4, "📖"),
)

DEFAULT_MINI_GAMES: Tuple[MiniGame, ...] = (
    MiniGame("coinCounting", "Coin Counting", Decimal("0.50"), "🪙", difficulty=1, success_rate=0.8),
    MiniGame("priceComparison", "Price Comparison", Decimal("1.00"), "💰", difficulty=2, success_rate=0.85),
)


def default_racers() -> list[AIRacer]:
    """Return fresh racer instances; racers are mutable so each game needs its own."""

    return [
        AIRacer(name="Mia", emoji="🐭", target=25, savings=8, daily_progress=Decimal("0.5")),
        AIRacer(name="Max", emoji="🐶", target=50, savings=15, daily_progress=Decimal("1.2")),
        AIRacer(name="Ruby", emoji="🐰", target=10, savings=5, daily_progress=Decimal("0.3")),
    ]


@dataclass(slots=True)
class Catalog:
    """Lookup tables for everything the engine reads but never changes."""

    goals: Sequence[Goal] = DEFAULT_GOALS
    temptations: Sequence[Temptation] = DEFAULT_TEMPTATIONS
    mini_games: Sequence[MiniGame] = DEFAULT_MINI_GAMES
    rules: GameRules = field(default_factory=GameRules)
    _goals: Dict[str, Goal] = field(init=False, repr=False)
    _temptations: Dict[str, Temptation] = field(init=False, repr=False)
    _mini_games: Dict[str, MiniGame] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._goals = _index(self.goals, "goal_id")
        self._temptations = _index(self.temptations, "temptation_id")
        self._mini_games = _index(self.mini_games, "key")

    def goal(self, goal_id: str) -> Goal:
        try:
            return self._goals[goal_id]
        except KeyError as exc:
            raise InvalidGoalError(f"Goal '{goal_id}' is not available.") from exc

    def temptation(self, temptation_id: str) -> Temptation:
        try:
            return self._temptations[temptation_id]
        except KeyError as exc:
            raise UnknownTemptationError(f"Temptation '{temptation_id}' does not exist.") from exc

    def mini_game(self, key: str) -> MiniGame:
        try:
            return self._mini_games[key]
        except KeyError as exc:
            raise UnknownMiniGameError(f"Mini-game '{key}' does not exist.") from exc

    def goal_ids(self) -> Tuple[str, ...]:
        return tuple(self._goals)

    def temptation_ids(self) -> Tuple[str, ...]:
        return tuple(self._temptations)

    def mini_game_keys(self) -> Tuple[str, ...]:
        return tuple(self._mini_games)


def _index(items: Iterable, attribute: str) -> Dict:
    index: Dict = {}
    for item in items:
        key = getattr(item, attribute)
        if key in index:
            raise ValueError(f"Duplicate catalog entry '{key}'.")
        index[key] = item
    return index


__all__ = [
    "Catalog",
    "DEFAULT_GOALS",
    "DEFAULT_MINI_GAMES",
    "DEFAULT_TEMPTATIONS",
    "GameRules",
    "INTEREST_INTERVAL_DAYS",
    "MILESTONE_THRESHOLDS",
    "default_racers",
]
