"""Domain models used by the Piggy Race package."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import Any, Dict, Optional, Tuple, Union

from .money import require_positive, to_decimal


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def parse_timestamp(raw: str) -> datetime:
    """Parse an ISO 8601 timestamp, including the ``Z`` suffix browsers write."""

    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


class GamePhase(str, Enum):
    """Screens the game can be on."""

    GOAL_SELECTION = "goal-selection"
    DASHBOARD = "main-dashboard"


class Choice(str, Enum):
    """Answers to a spending temptation."""

    SAVE = "save"
    SPEND = "spend"


@dataclass(frozen=True, slots=True)
class Goal:
    """A purchase target the player saves towards."""

    goal_id: str
    name: str
    price: Decimal
    icon: str = ""

    def __post_init__(self) -> None:
        price = to_decimal(self.price)
        require_positive(price)
        object.__setattr__(self, "price", price)

    def as_dict(self) -> Dict[str, Any]:
        return {"id": self.goal_id, "name": self.name, "price": str(self.price), "icon": self.icon}

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "Goal":
        return cls(
            goal_id=payload["id"],
            name=payload["name"],
            price=payload["price"],
            icon=payload.get("icon", payload.get("image", "")),
        )


@dataclass(slots=True)
class AIRacer:
    """A computer-controlled saver shown next to the player for comparison."""

    name: str
    target: Decimal
    savings: Decimal
    daily_progress: Decimal
    emoji: str = ""

    def __post_init__(self) -> None:
        self.target = to_decimal(self.target)
        self.savings = to_decimal(self.savings)
        self.daily_progress = to_decimal(self.daily_progress)
        require_positive(self.target)
        require_positive(self.savings, allow_zero=True)
        if self.savings > self.target:
            self.savings = self.target

    def advance(self, factor: Decimal) -> Decimal:
        """Move the racer forward by ``daily_progress * factor`` without passing the target."""

        increment = self.daily_progress * factor
        self.savings = to_decimal(min(self.target, self.savings + increment))
        return self.savings

    @property
    def finished(self) -> bool:
        return self.savings >= self.target

    def progress(self) -> int:
        ratio = self.savings / self.target * Decimal(100)
        return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "emoji": self.emoji,
            "target": str(self.target),
            "savings": str(self.savings),
            "daily_progress": str(self.daily_progress),
        }

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AIRacer":
        return cls(
            name=payload["name"],
            emoji=payload.get("emoji", ""),
            target=payload["target"],
            savings=payload.get("savings", "0"),
            daily_progress=payload["daily_progress"],
        )


@dataclass(frozen=True, slots=True)
class Temptation:
    """A small discretionary purchase offered to the player."""

    temptation_id: str
    item: str
    price: Decimal
    emoji: str = ""

    def __post_init__(self) -> None:
        price = to_decimal(self.price)
        require_positive(price)
        object.__setattr__(self, "price", price)


@dataclass(frozen=True, slots=True)
class MiniGame:
    """A learning game that pays a fixed reward for a correct answer."""

    key: str
    name: str
    reward: Decimal
    emoji: str = ""
    difficulty: int = 1
    success_rate: float = 0.8  # used only by batch simulation

    def __post_init__(self) -> None:
        reward = to_decimal(self.reward)
        require_positive(reward)
        if not 0.0 <= self.success_rate <= 1.0:
            raise ValueError("success_rate must be between 0 and 1.")
        object.__setattr__(self, "reward", reward)


@dataclass(frozen=True, slots=True)
class CompletedGoal:
    """Gallery entry recorded when a goal is fully funded."""

    goal: Goal
    completed_at: datetime
    final_amount: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "final_amount", to_decimal(self.final_amount))

    def as_dict(self) -> Dict[str, Any]:
        payload = self.goal.as_dict()
        payload.update(
            {
                "completedDate": self.completed_at.isoformat(),
                "finalAmount": str(self.final_amount),
            }
        )
        return payload

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "CompletedGoal":
        completed = payload.get("completedDate", payload.get("completed_at"))
        amount = payload.get("finalAmount", payload.get("final_amount"))
        if completed is None or amount is None:
            raise ValueError("Gallery entries need a completion date and a final amount.")
        return cls(
            goal=Goal.from_dict(payload),
            completed_at=parse_timestamp(str(completed)),
            final_amount=str(amount),
        )


# ---------------------------------------------------------------------------
# Events and operation results
# ---------------------------------------------------------------------------
@dataclass(frozen=True, slots=True)
class MilestoneReached:
    threshold: int
    goal_id: str

    def as_dict(self) -> Dict[str, Any]:
        return {"event": "milestone_reached", "threshold": self.threshold, "goal": self.goal_id}


@dataclass(frozen=True, slots=True)
class GoalCompleted:
    goal: Goal
    entry: CompletedGoal

    def as_dict(self) -> Dict[str, Any]:
        return {"event": "goal_completed", **self.entry.as_dict()}


GameEvent = Union[MilestoneReached, GoalCompleted]


@dataclass(frozen=True, slots=True)
class Credited:
    """Result of an operation that added money to the savings."""

    amount: Decimal
    new_total: Decimal
    source: str
    events: Tuple[GameEvent, ...] = ()
    persisted: bool = True

    def as_dict(self) -> Dict[str, Any]:
        return {
            "amount": str(self.amount),
            "new_total": str(self.new_total),
            "source": self.source,
            "events": [event.as_dict() for event in self.events],
            "persisted": self.persisted,
        }


@dataclass(frozen=True, slots=True)
class TemptationOutcome:
    """Result of deciding whether to save or spend on a temptation."""

    temptation: Temptation
    choice: Choice
    credited: Decimal
    cost: Decimal
    new_total: Decimal
    delay_days: int = 0
    events: Tuple[GameEvent, ...] = ()
    persisted: bool = True

    def as_dict(self) -> Dict[str, Any]:
        return {
            "temptation": self.temptation.temptation_id,
            "choice": self.choice.value,
            "credited": str(self.credited),
            "cost": str(self.cost),
            "new_total": str(self.new_total),
            "delay_days": self.delay_days,
            "events": [event.as_dict() for event in self.events],
            "persisted": self.persisted,
        }


@dataclass(frozen=True, slots=True)
class MiniGameOutcome:
    """Result of a mini-game round."""

    game: MiniGame
    correct: bool
    reward: Decimal
    new_total: Decimal
    events: Tuple[GameEvent, ...] = ()
    persisted: bool = True

    def as_dict(self) -> Dict[str, Any]:
        return {
            "game": self.game.key,
            "correct": self.correct,
            "reward": str(self.reward),
            "new_total": str(self.new_total),
            "events": [event.as_dict() for event in self.events],
            "persisted": self.persisted,
        }


@dataclass(slots=True)
class GameStatus:
    """Read-only projection used by presentation adapters."""

    phase: GamePhase
    goal: Optional[Goal]
    savings: Decimal
    target: Decimal
    progress: int
    completed_goals: int
    milestones: Tuple[int, ...] = ()
    estimated_completion: Optional[date] = None
    ready_for_new_goal: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "phase": self.phase.value,
            "goal": self.goal.as_dict() if self.goal else None,
            "savings": str(self.savings),
            "target": str(self.target),
            "progress": self.progress,
            "completed_goals": self.completed_goals,
            "milestones": list(self.milestones),
            "estimated_completion": (
                self.estimated_completion.isoformat() if self.estimated_completion else None
            ),
            "ready_for_new_goal": self.ready_for_new_goal,
        }


__all__ = [
    "AIRacer",
    "Choice",
    "CompletedGoal",
    "Credited",
    "GameEvent",
    "GamePhase",
    "GameStatus",
    "Goal",
    "GoalCompleted",
    "MilestoneReached",
    "MiniGame",
    "MiniGameOutcome",
    "Temptation",
    "TemptationOutcome",
    "parse_timestamp",
    "utc_now",
]
