import json
from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from piggyrace.catalog import DEFAULT_GOALS
from piggyrace.models import CompletedGoal, GamePhase
from piggyrace.state import GameState, load, parse_day, serialize

TODAY = date(2024, 5, 10)


def test_load_without_blob_uses_defaults() -> None:
    state = load(None, today=TODAY)

    assert state.current_goal is None
    assert state.current_savings == Decimal("0.00")
    assert state.last_allowance_date is None
    assert state.last_interest_date == TODAY
    assert state.milestones_reached == set()
    assert state.completed_goals == []
    assert state.game_phase is GamePhase.GOAL_SELECTION
    assert [racer.name for racer in state.ai_racers] == ["Mia", "Max", "Ruby"]


def test_serialized_state_loads_back() -> None:
    state = GameState(
        current_goal=DEFAULT_GOALS[0],
        target_amount=25,
        current_savings="12.75",
        last_allowance_date=date(2024, 5, 9),
        last_interest_date=date(2024, 5, 3),
        milestones_reached={25, 50},
        game_phase=GamePhase.DASHBOARD,
    )
    state.completed_goals.append(
        CompletedGoal(goal=DEFAULT_GOALS[3], completed_at=datetime(2024, 4, 1, 9, 30), final_amount=10)
    )

    restored = load(serialize(state), today=TODAY)

    assert restored.current_goal == DEFAULT_GOALS[0]
    assert restored.current_savings == Decimal("12.75")
    assert restored.last_allowance_date == date(2024, 5, 9)
    assert restored.last_interest_date == date(2024, 5, 3)
    assert restored.milestones_reached == {25, 50}
    assert restored.completed_goals[0].goal.goal_id == "toy"
    assert restored.completed_goals[0].completed_at == datetime(2024, 4, 1, 9, 30)
    assert restored.game_phase is GamePhase.DASHBOARD


def test_partial_legacy_blob_merges_defaults() -> None:
    blob = json.dumps(
        {
            "currentGoal": {"id": "book", "name": "📚 Book", "price": 15, "image": "📚"},
            "currentSavings": 4,
            "milestonesReached": [25],
            "completedGoals": [],
        }
    )

    state = load(blob, today=TODAY)

    assert state.current_goal.icon == "📚"
    assert state.target_amount == Decimal("15.00")
    assert state.current_savings == Decimal("4.00")
    assert state.game_phase is GamePhase.DASHBOARD
    assert state.goal_archived is False
    assert state.last_interest_date == TODAY
    assert len(state.ai_racers) == 3


def test_load_accepts_mapping_and_clamps_negative_savings() -> None:
    state = load({"currentSavings": "-3"}, today=TODAY)

    assert state.current_savings == Decimal("0.00")


def test_load_rejects_non_object_blob() -> None:
    with pytest.raises(ValueError):
        load("[1, 2, 3]", today=TODAY)


def test_state_rejects_negative_savings() -> None:
    with pytest.raises(ValueError):
        GameState(current_savings=-1)


def test_snapshot_is_independent() -> None:
    state = GameState(last_interest_date=TODAY)
    copy = state.snapshot()

    state.milestones_reached.add(25)
    state.ai_racers[0].savings = Decimal("20.00")

    assert copy.milestones_reached == set()
    assert copy.ai_racers[0].savings == Decimal("8.00")


def test_load_reads_a_browser_saved_game() -> None:
    blob = json.dumps(
        {
            "currentGoal": {"id": "basketball", "name": "🏀 Basketball", "price": 25, "image": "🏀"},
            "targetAmount": 25,
            "currentSavings": 12.5,
            "dailyAllowance": 1,
            "choreReward": 2,
            "lastAllowanceDate": "Fri May 10 2024",
            "completedGoals": [
                {
                    "id": "toy",
                    "name": "🧸 Toy",
                    "price": 10,
                    "image": "🧸",
                    "completedDate": "2024-04-01T09:30:00.000Z",
                    "finalAmount": 10,
                }
            ],
            "gamePhase": "main-dashboard",
        }
    )

    state = load(blob, today=TODAY)

    assert state.current_goal.goal_id == "basketball"
    assert state.current_savings == Decimal("12.50")
    assert state.last_allowance_date == date(2024, 5, 10)
    assert state.last_interest_date == TODAY
    entry = state.completed_goals[0]
    assert entry.goal.icon == "🧸"
    assert entry.completed_at == datetime(2024, 4, 1, 9, 30, tzinfo=timezone.utc)
    assert entry.final_amount == Decimal("10.00")
    assert state.game_phase is GamePhase.DASHBOARD


def test_gallery_entries_are_saved_with_browser_keys() -> None:
    state = GameState(last_interest_date=TODAY)
    state.completed_goals.append(
        CompletedGoal(
            goal=DEFAULT_GOALS[3],
            completed_at=datetime(2024, 4, 1, 9, 30, tzinfo=timezone.utc),
            final_amount="10.25",
        )
    )

    saved = json.loads(serialize(state))["completedGoals"][0]

    assert saved["completedDate"] == "2024-04-01T09:30:00+00:00"
    assert saved["finalAmount"] == "10.25"
    assert load(serialize(state), today=TODAY).completed_goals == state.completed_goals


def test_unreadable_days_fall_back_to_defaults() -> None:
    state = load({"lastAllowanceDate": "someday", "lastInterestDate": 42}, today=TODAY)

    assert state.last_allowance_date is None
    assert state.last_interest_date == TODAY
    assert parse_day("2024-05-03") == date(2024, 5, 3)
    assert parse_day("Fri May 03 2024") == date(2024, 5, 3)
