"""Daily simulation driver sequencing one simulated day of engine calls."""

from __future__ import annotations

import random
from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from typing import Callable, List, Optional, Tuple

from .engine import SavingsEngine
from .exceptions import InsufficientFundsError, TooSoonError
from .minigames import GENERATORS, Puzzle, generate_puzzle
from .models import (
    AIRacer,
    Choice,
    Credited,
    GameEvent,
    GoalCompleted,
    MiniGame,
    MiniGameOutcome,
    Temptation,
    TemptationOutcome,
)
from .state import GameState

ChorePolicy = Callable[[], bool]
TemptationPolicy = Callable[[Temptation, GameState], Choice]
MiniGamePolicy = Callable[[MiniGame, Optional[Puzzle]], bool]

DEFAULT_TEMPTATION_PROBABILITY = 0.3
DEFAULT_MINI_GAME_PROBABILITY = 0.2
DEFAULT_CHORE_ACCEPTANCE = 0.7
DEFAULT_SAVE_PROBABILITY = 0.6


@dataclass(slots=True)
class DayReport:
    """Everything that happened on one simulated day."""

    day: date
    allowance: Optional[Credited] = None
    interest: Optional[Credited] = None
    chore: Optional[Credited] = None
    temptation: Optional[TemptationOutcome] = None
    unaffordable: Optional[Temptation] = None
    puzzle: Optional[Puzzle] = None
    mini_game: Optional[MiniGameOutcome] = None
    racers: Tuple[AIRacer, ...] = ()
    events: Tuple[GameEvent, ...] = ()
    new_goal_selected: bool = False
    state: Optional[GameState] = None

    @property
    def goal_completed(self) -> bool:
        return any(isinstance(event, GoalCompleted) for event in self.events)

    def as_dict(self) -> dict:
        return {
            "day": self.day.isoformat(),
            "allowance": self.allowance.as_dict() if self.allowance else None,
            "interest": self.interest.as_dict() if self.interest else None,
            "chore": self.chore.as_dict() if self.chore else None,
            "temptation": self.temptation.as_dict() if self.temptation else None,
            "unaffordable": self.unaffordable.temptation_id if self.unaffordable else None,
            "puzzle": self.puzzle.as_dict() if self.puzzle else None,
            "mini_game": self.mini_game.as_dict() if self.mini_game else None,
            "racers": [racer.as_dict() for racer in self.racers],
            "events": [event.as_dict() for event in self.events],
            "new_goal_selected": self.new_goal_selected,
            "state": self.state.as_dict() if self.state else None,
        }


@dataclass(slots=True)
class DailySimulationDriver:
    """Step a :class:`SavingsEngine` through simulated days.

    ``rng`` decides which events happen and, in batch mode, how the player
    answers them. ``racer_rng`` only feeds cosmetic noise: racer speed and the
    content of mini-game questions. Seeding both makes a run reproducible.
    Interactive surfaces pass policies that ask the player instead of rolling.
    """

    engine: SavingsEngine
    rng: random.Random = field(default_factory=random.Random)
    racer_rng: random.Random = field(default_factory=random.Random)
    temptation_probability: float = DEFAULT_TEMPTATION_PROBABILITY
    mini_game_probability: float = DEFAULT_MINI_GAME_PROBABILITY
    chore_acceptance: float = DEFAULT_CHORE_ACCEPTANCE
    save_probability: float = DEFAULT_SAVE_PROBABILITY
    chore_policy: Optional[ChorePolicy] = None
    temptation_policy: Optional[TemptationPolicy] = None
    mini_game_policy: Optional[MiniGamePolicy] = None
    auto_new_goal: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("temptation_probability", "mini_game_probability", "chore_acceptance", "save_probability"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must be between 0 and 1.")

    @classmethod
    def seeded(cls, engine: SavingsEngine, seed: int | str, **options: object) -> "DailySimulationDriver":
        return cls(
            engine=engine,
            rng=random.Random(seed),
            racer_rng=random.Random(f"racers:{seed}"),
            **options,  # type: ignore[arg-type]
        )

    def step(self, today: date | None = None) -> DayReport:
        engine = self.engine
        day = today or engine.today()
        report = DayReport(day=day)
        events: List[GameEvent] = []

        last_allowance = engine.state.last_allowance_date
        if last_allowance is None or day > last_allowance:
            report.allowance = engine.credit_allowance(day)
            events.extend(report.allowance.events)

        try:
            report.interest = engine.credit_weekly_interest(day)
        except TooSoonError:
            report.interest = None
        else:
            events.extend(report.interest.events)

        if self._accept_chore():
            report.chore = engine.complete_chore()
            events.extend(report.chore.events)

        if self.rng.random() < self.temptation_probability:
            temptation = self.rng.choice(tuple(engine.catalog.temptations))
            choice = self._choose(temptation)
            try:
                report.temptation = engine.resolve_temptation(temptation.temptation_id, choice)
            except InsufficientFundsError:
                report.unaffordable = temptation
            else:
                events.extend(report.temptation.events)

        if self.rng.random() < self.mini_game_probability:
            game = self.rng.choice(tuple(engine.catalog.mini_games))
            if game.key in GENERATORS:
                report.puzzle = generate_puzzle(game.key, self.racer_rng)
            correct = self._answer(game, report.puzzle)
            report.mini_game = engine.resolve_mini_game(game.key, correct)
            events.extend(report.mini_game.events)

        factors = [self.racer_rng.uniform(0.75, 1.25) for _ in engine.state.ai_racers]
        report.racers = tuple(replace(racer) for racer in engine.advance_ai_racers(factors))

        report.events = tuple(events)
        if self.auto_new_goal and report.goal_completed:
            engine.select_goal(self.auto_new_goal)
            report.new_goal_selected = True

        report.state = engine.state.snapshot()
        engine.logger.log(
            "day_simulated",
            day=day.isoformat(),
            savings=float(engine.state.current_savings),
            events=len(report.events),
        )
        return report

    def run(self, days: int, *, start: date | None = None) -> List[DayReport]:
        """Simulate ``days`` consecutive days beginning at ``start``."""

        if days < 0:
            raise ValueError("days must not be negative")
        first = start or self.engine.today()
        return [self.step(first + timedelta(days=offset)) for offset in range(days)]

    # ------------------------------------------------------------------
    # Batch-mode decisions
    # ------------------------------------------------------------------
    def _accept_chore(self) -> bool:
        if self.chore_policy is not None:
            return self.chore_policy()
        return self.rng.random() < self.chore_acceptance

    def _choose(self, temptation: Temptation) -> Choice:
        if self.temptation_policy is not None:
            return self.temptation_policy(temptation, self.engine.state)
        return Choice.SAVE if self.rng.random() < self.save_probability else Choice.SPEND

    def _answer(self, game: MiniGame, puzzle: Optional[Puzzle]) -> bool:
        if self.mini_game_policy is not None:
            return self.mini_game_policy(game, puzzle)
        return self.rng.random() < game.success_rate


__all__ = [
    "ChorePolicy",
    "DailySimulationDriver",
    "DayReport",
    "MiniGamePolicy",
    "TemptationPolicy",
]
