from datetime import date
from decimal import Decimal

import pytest

pytest.importorskip("fastapi")
pytest.importorskip("sqlmodel")
from fastapi.testclient import TestClient

from piggyrace.engine import SavingsEngine
from piggyrace.ops import MemoryStateStore
from piggyrace.webapp import SqlStateStore, create_app, make_engine

START = date(2024, 7, 1)


@pytest.fixture()
def client() -> TestClient:
    game = SavingsEngine(store=MemoryStateStore(), clock=lambda: START)
    return TestClient(create_app(game, seed=3))


def solve(puzzle: dict) -> str:
    if puzzle["game"] == "coinCounting":
        total = sum(Decimal(coin["value"]) * coin["count"] for coin in puzzle["coins"])
        return f"${total:.2f}"
    options = puzzle["options"]
    return "A" if Decimal(options["A"]) < Decimal(options["B"]) else "B"


def test_catalog_lists_goals_temptations_and_games(client: TestClient) -> None:
    payload = client.get("/goals").json()

    assert [goal["id"] for goal in payload["goals"]][:3] == ["basketball", "videogame", "bike"]
    assert {item["id"] for item in payload["temptations"]} >= {"candy", "soda"}
    assert {game["key"] for game in payload["mini_games"]} == {"coinCounting", "priceComparison"}


def test_player_flow_through_the_api(client: TestClient) -> None:
    status = client.get("/status").json()
    assert status["phase"] == "goal-selection"
    assert status["ready_for_new_goal"] is True

    selected = client.post("/goal", data={"goal_id": "toy"})
    assert selected.status_code == 200
    assert selected.json()["status"]["target"] == "10.00"

    first = client.post("/allowance")
    assert first.status_code == 200
    assert first.json()["new_total"] == "1.00"

    again = client.post("/allowance")
    assert again.status_code == 409
    assert again.json()["error"] == "AlreadyCollectedError"

    broke = client.post("/temptation", data={"temptation_id": "candy", "choice": "spend"})
    assert broke.status_code == 400
    assert broke.json()["error"] == "InsufficientFundsError"

    resisted = client.post("/temptation", data={"temptation_id": "candy", "choice": "SAVE"})
    assert resisted.json()["new_total"] == "1.25"

    chore = client.post("/chore").json()
    assert chore["new_total"] == "3.25"
    assert chore["events"] == [{"event": "milestone_reached", "threshold": 25, "goal": "toy"}]

    status = client.get("/status").json()
    assert status["milestones"] == [25]
    assert status["progress"] == 33
    assert len(status["racers"]) == 3
    assert status["persistence_error"] is None


def test_rejections_map_to_status_codes(client: TestClient) -> None:
    assert client.post("/goal", data={"goal_id": "pony"}).status_code == 404
    assert client.post("/temptation", data={"temptation_id": "yacht", "choice": "save"}).status_code == 404
    assert client.get("/minigame/sudoku/puzzle").status_code == 404
    assert client.post("/temptation", data={"temptation_id": "candy", "choice": "maybe"}).status_code == 400
    assert client.post("/interest").status_code == 409


def test_mini_game_needs_a_puzzle_first(client: TestClient) -> None:
    client.post("/goal", data={"goal_id": "bike"})

    missing = client.post("/minigame/coinCounting/answer", data={"answer": "1.00"})
    assert missing.status_code == 409

    for key, reward in (("coinCounting", "0.50"), ("priceComparison", "1.00")):
        puzzle = client.get(f"/minigame/{key}/puzzle").json()
        result = client.post(f"/minigame/{key}/answer", data={"answer": solve(puzzle)}).json()
        assert result["correct"] is True
        assert result["reward"] == reward

    wrong_puzzle = client.get("/minigame/priceComparison/puzzle").json()
    wrong = "B" if solve(wrong_puzzle) == "A" else "A"
    result = client.post("/minigame/priceComparison/answer", data={"answer": wrong}).json()
    assert result["correct"] is False
    assert result["new_total"] == "1.50"


def test_simulated_days_gallery_and_reset(client: TestClient) -> None:
    client.post("/goal", data={"goal_id": "bike"})

    days = [client.post("/simulate/day", data={"day": f"2024-07-{day:02d}"}).json() for day in range(1, 11)]
    assert days[0]["allowance"]["amount"] == "1.00"
    assert all(day["allowance"] is not None for day in days)

    racers = client.post("/racers/advance").json()["racers"]
    assert all(Decimal(racer["savings"]) <= Decimal(racer["target"]) for racer in racers)

    client.post("/goal", data={"goal_id": "toy"})
    for _ in range(5):
        client.post("/chore")

    gallery = client.get("/gallery").json()["completed_goals"]
    assert [entry["id"] for entry in gallery] == ["toy"]

    notes = client.get("/notifications").json()["notifications"]
    assert any(note["type"] == "goal_completed" for note in notes)
    assert client.get("/notifications").json()["notifications"] == []

    reset = client.post("/goal/reset").json()
    assert reset["phase"] == "goal-selection"
    assert reset["completed_goals"] == 1


def test_sql_store_round_trips_the_game(tmp_path) -> None:
    store = SqlStateStore(make_engine(str(tmp_path / "game.db")))
    assert store.load() is None

    game = SavingsEngine(store=store, clock=lambda: START)
    game.select_goal("book")
    game.complete_chore()

    resumed = SavingsEngine(store=SqlStateStore(make_engine(str(tmp_path / "game.db"))), clock=lambda: START)
    assert resumed.state.current_goal.goal_id == "book"
    assert resumed.state.current_savings == Decimal("2.00")

    store.clear()
    assert store.load() is None


def test_sql_store_overwrites_the_saved_row(tmp_path) -> None:
    store = SqlStateStore(make_engine(str(tmp_path / "game.db")))

    store.save("{}")
    store.save('{"currentSavings": "2.00"}')
    assert store.load() == '{"currentSavings": "2.00"}'

    game = SavingsEngine(store=store, clock=lambda: START)
    result = game.credit_allowance()
    assert result.new_total == Decimal("3.00")
    assert result.persisted is True
    assert game.persistence_error is None
