from datetime import date, timedelta
from decimal import Decimal

import pytest

from piggyrace.engine import SavingsEngine
from piggyrace.models import Choice, MilestoneReached
from piggyrace.ops import MemoryStateStore
from piggyrace.simulation import DailySimulationDriver

START = date(2024, 6, 3)


def make_engine(goal: str | None = "bike") -> SavingsEngine:
    game = SavingsEngine(store=MemoryStateStore(), clock=lambda: START)
    if goal:
        game.select_goal(goal)
    return game


def quiet_driver(game: SavingsEngine, **options) -> DailySimulationDriver:
    options.setdefault("temptation_probability", 0.0)
    options.setdefault("mini_game_probability", 0.0)
    options.setdefault("chore_policy", lambda: False)
    return DailySimulationDriver.seeded(game, 1, **options)


def test_same_seed_gives_same_game() -> None:
    first = DailySimulationDriver.seeded(make_engine(), 99).run(60, start=START)
    second = DailySimulationDriver.seeded(make_engine(), 99).run(60, start=START)

    assert [report.state.current_savings for report in first] == [
        report.state.current_savings for report in second
    ]
    assert [[racer.savings for racer in report.racers] for report in first] == [
        [racer.savings for racer in report.racers] for report in second
    ]


def test_allowance_and_interest_follow_the_calendar() -> None:
    game = make_engine()

    reports = quiet_driver(game).run(14, start=START)

    assert all(report.allowance is not None for report in reports)
    interest_days = [report.day for report in reports if report.interest is not None]
    assert interest_days == [START + timedelta(days=7)]
    assert game.state.current_savings == Decimal("14.50")
    assert game.state.last_allowance_date == START + timedelta(days=13)


def test_stepping_same_day_twice_does_not_double_allowance() -> None:
    game = make_engine()
    driver = quiet_driver(game)

    driver.step(START)
    again = driver.step(START)

    assert again.allowance is None
    assert game.state.current_savings == Decimal("1.00")


def test_unaffordable_temptation_is_recorded_not_raised() -> None:
    game = make_engine()
    driver = quiet_driver(
        game,
        temptation_probability=1.0,
        temptation_policy=lambda temptation, state: Choice.SPEND,
    )

    report = driver.step(START)

    assert report.temptation is None
    assert report.unaffordable is not None
    assert game.state.current_savings == Decimal("1.00")


def test_interactive_mini_game_policy_gets_the_puzzle() -> None:
    game = make_engine()
    seen = []

    def answer(mini_game, puzzle):
        seen.append(puzzle)
        return puzzle.check(puzzle.answer)

    report = quiet_driver(game, mini_game_probability=1.0, mini_game_policy=answer).step(START)

    assert seen and seen[0] is report.puzzle
    assert report.mini_game.correct is True
    assert game.state.current_savings == Decimal("1.00") + report.mini_game.reward


def test_racers_never_exceed_target_over_long_runs() -> None:
    game = make_engine()

    reports = DailySimulationDriver.seeded(game, 5).run(200, start=START)

    for report in reports:
        for racer in report.racers:
            assert racer.savings <= racer.target
    assert all(racer.finished for racer in game.state.ai_racers)


def test_goal_completion_can_start_the_next_goal() -> None:
    game = make_engine("toy")
    driver = quiet_driver(game, chore_policy=lambda: True, auto_new_goal="book")

    reports = driver.run(5, start=START)

    completed = [report for report in reports if report.goal_completed]
    assert len(completed) == 1
    assert completed[0].new_goal_selected is True
    assert completed[0].state.current_goal.goal_id == "book"
    assert completed[0].state.current_savings == Decimal("0.00")
    assert len(game.state.completed_goals) == 1


def test_report_collects_milestones_from_every_step() -> None:
    game = make_engine("toy")

    report = quiet_driver(game, chore_policy=lambda: True).step(START)

    assert report.events == (MilestoneReached(threshold=25, goal_id="toy"),)
    assert report.as_dict()["events"][0]["threshold"] == 25


def test_probabilities_are_validated() -> None:
    with pytest.raises(ValueError):
        DailySimulationDriver(engine=make_engine(), temptation_probability=1.5)
