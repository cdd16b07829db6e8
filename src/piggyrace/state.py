"""The mutable game state and its persisted JSON form."""

from __future__ import annotations

import copy
import json
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Set, Union

from .catalog import default_racers
from .models import AIRacer, CompletedGoal, GamePhase, Goal
from .money import ZERO, require_positive, to_decimal

STORAGE_KEY = "piggyBankRaceState"

Blob = Union[str, bytes, Mapping[str, Any], None]

# Browser saves write days with Date.toDateString(), e.g. "Fri May 10 2024".
BROWSER_DATE_FORMAT = "%a %b %d %Y"


@dataclass(slots=True)
class GameState:
    """Everything the savings engine mutates, owned by exactly one engine."""

    current_goal: Optional[Goal] = None
    target_amount: Decimal = ZERO
    current_savings: Decimal = ZERO
    last_allowance_date: Optional[date] = None
    last_interest_date: date = field(default_factory=date.today)
    milestones_reached: Set[int] = field(default_factory=set)
    goal_archived: bool = False
    completed_goals: List[CompletedGoal] = field(default_factory=list)
    game_phase: GamePhase = GamePhase.GOAL_SELECTION
    ai_racers: List[AIRacer] = field(default_factory=default_racers)

    def __post_init__(self) -> None:
        self.target_amount = to_decimal(self.target_amount)
        self.current_savings = to_decimal(self.current_savings)
        require_positive(self.target_amount, allow_zero=True)
        if self.current_savings < Decimal("0"):
            raise ValueError("current_savings cannot be negative.")
        self.milestones_reached = set(self.milestones_reached)

    @property
    def progress(self) -> Decimal:
        """Percentage of the target saved so far (0 when no target is set)."""

        if self.target_amount <= Decimal("0"):
            return Decimal("0")
        return self.current_savings / self.target_amount * Decimal(100)

    def snapshot(self) -> "GameState":
        return copy.deepcopy(self)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "currentGoal": self.current_goal.as_dict() if self.current_goal else None,
            "targetAmount": str(self.target_amount),
            "currentSavings": str(self.current_savings),
            "lastAllowanceDate": self.last_allowance_date.isoformat() if self.last_allowance_date else None,
            "lastInterestDate": self.last_interest_date.isoformat(),
            "milestonesReached": sorted(self.milestones_reached),
            "goalArchived": self.goal_archived,
            "completedGoals": [entry.as_dict() for entry in self.completed_goals],
            "gamePhase": self.game_phase.value,
            "aiRacers": [racer.as_dict() for racer in self.ai_racers],
        }


def serialize(state: GameState) -> str:
    """Return the JSON blob stored under :data:`STORAGE_KEY`."""

    return json.dumps(state.as_dict(), sort_keys=True, ensure_ascii=False)


def parse_day(raw: object) -> Optional[date]:
    """Read an ISO or browser-formatted day; anything unreadable counts as missing."""

    if not raw or not isinstance(raw, str):
        return None
    text = raw.strip()
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass
    try:
        return datetime.strptime(text, BROWSER_DATE_FORMAT).date()
    except ValueError:
        return None


def load(blob: Blob, *, today: Optional[date] = None) -> GameState:
    """Rebuild a :class:`GameState`, filling in defaults for anything missing."""

    if blob is None or blob == "" or blob == b"":
        payload: Mapping[str, Any] = {}
    elif isinstance(blob, (str, bytes)):
        payload = json.loads(blob)
    else:
        payload = blob
    if not isinstance(payload, Mapping):
        raise ValueError("Saved game state must be a JSON object.")

    state = GameState(last_interest_date=today or date.today())
    goal_payload = payload.get("currentGoal")
    if goal_payload:
        state.current_goal = Goal.from_dict(goal_payload)
    if payload.get("targetAmount") is not None:
        state.target_amount = to_decimal(str(payload["targetAmount"]))
    elif state.current_goal is not None:
        state.target_amount = state.current_goal.price
    if payload.get("currentSavings") is not None:
        state.current_savings = max(ZERO, to_decimal(str(payload["currentSavings"])))
    state.last_allowance_date = parse_day(payload.get("lastAllowanceDate"))
    state.last_interest_date = parse_day(payload.get("lastInterestDate")) or state.last_interest_date
    state.milestones_reached = {int(item) for item in payload.get("milestonesReached") or ()}
    state.completed_goals = [CompletedGoal.from_dict(item) for item in payload.get("completedGoals") or ()]
    if "goalArchived" in payload:
        state.goal_archived = bool(payload["goalArchived"])
    else:
        state.goal_archived = 100 in state.milestones_reached
    if payload.get("gamePhase"):
        state.game_phase = GamePhase(payload["gamePhase"])
    elif state.current_goal is not None:
        state.game_phase = GamePhase.DASHBOARD
    racers = payload.get("aiRacers")
    if racers:
        state.ai_racers = [AIRacer.from_dict(item) for item in racers]
    return state


__all__ = ["BROWSER_DATE_FORMAT", "Blob", "GameState", "STORAGE_KEY", "load", "parse_day", "serialize"]
