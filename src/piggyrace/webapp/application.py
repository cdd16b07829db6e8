"""FastAPI surface for Piggy Race.

The web application is a thin presentation adapter: every route forwards a
player's choice to the :class:`~piggyrace.engine.SavingsEngine` and returns the
engine's result as JSON. Rendering, animations and toasts are left to whatever
client consumes these endpoints; the queued notifications carry the texts.
``uvicorn piggyrace.webapp:app`` serves the default SQLite-backed game.
"""

from __future__ import annotations

import random
import threading
from datetime import date
from typing import Dict, Optional

from fastapi import FastAPI, Form, Request
from fastapi.responses import JSONResponse

from ..engine import SavingsEngine
from ..exceptions import (
    AlreadyCollectedError,
    InsufficientFundsError,
    InvalidGoalError,
    PiggyRaceError,
    TooSoonError,
    UnknownMiniGameError,
    UnknownTemptationError,
)
from ..catalog import Catalog
from ..i18n import Translator
from ..minigames import Puzzle, generate_puzzle
from ..ops import StructuredLogger
from ..simulation import DailySimulationDriver
from .config import LOCALE, LOG_FILE, MINI_GAME_PROBABILITY, RULES, TEMPTATION_PROBABILITY
from .persistence import SqlStateStore

ERROR_STATUS: Dict[type, int] = {
    InvalidGoalError: 404,
    UnknownTemptationError: 404,
    UnknownMiniGameError: 404,
    AlreadyCollectedError: 409,
    TooSoonError: 409,
    InsufficientFundsError: 400,
}


def default_engine() -> SavingsEngine:
    """Build the engine served by ``app``, reading configuration from the environment."""

    return SavingsEngine(
        catalog=Catalog(rules=RULES),
        store=SqlStateStore(),
        logger=StructuredLogger(path=LOG_FILE),
        translator=Translator(LOCALE),
    )


class GameHolder:
    """Owns the single engine served by an app and serializes access to it."""

    def __init__(self, game: SavingsEngine | None = None, *, seed: int | None = None) -> None:
        self._game = game
        self.lock = threading.RLock()
        self.rng = random.Random(seed)
        self.racer_rng = random.Random(None if seed is None else f"racers:{seed}")
        self.puzzles: Dict[str, Puzzle] = {}

    @property
    def game(self) -> SavingsEngine:
        with self.lock:
            if self._game is None:
                self._game = default_engine()
            return self._game

    def driver(self) -> DailySimulationDriver:
        return DailySimulationDriver(
            engine=self.game,
            rng=self.rng,
            racer_rng=self.racer_rng,
            temptation_probability=TEMPTATION_PROBABILITY,
            mini_game_probability=MINI_GAME_PROBABILITY,
        )


def _error_response(exc: Exception) -> JSONResponse:
    status = 400
    for error_type, code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            status = code
            break
    return JSONResponse({"error": type(exc).__name__, "detail": str(exc)}, status_code=status)


def _holder(request: Request) -> GameHolder:
    return request.app.state.holder


def _parse_day(raw: Optional[str]) -> Optional[date]:
    if not raw:
        return None
    return date.fromisoformat(raw)


def create_app(game: SavingsEngine | None = None, *, seed: int | None = None) -> FastAPI:
    """Create the HTTP adapter; ``game`` defaults to an SQLite-backed engine built on first use."""

    app = FastAPI(title="Piggy Race")
    app.state.holder = GameHolder(game, seed=seed)

    @app.exception_handler(PiggyRaceError)
    async def piggy_race_error(_: Request, exc: PiggyRaceError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(ValueError)
    async def value_error(_: Request, exc: ValueError) -> JSONResponse:
        return _error_response(exc)

    @app.get("/status")
    def status(request: Request) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            game = holder.game
            payload = game.get_status().as_dict()
            payload["racers"] = [racer.as_dict() for racer in game.state.ai_racers]
            payload["persistence_error"] = str(game.persistence_error) if game.persistence_error else None
        return JSONResponse(payload)

    @app.get("/goals")
    def goals(request: Request) -> JSONResponse:
        holder = _holder(request)
        catalog = holder.game.catalog
        return JSONResponse(
            {
                "goals": [goal.as_dict() for goal in catalog.goals],
                "temptations": [
                    {"id": item.temptation_id, "item": item.item, "price": str(item.price), "emoji": item.emoji}
                    for item in catalog.temptations
                ],
                "mini_games": [
                    {"key": game.key, "name": game.name, "reward": str(game.reward), "emoji": game.emoji}
                    for game in catalog.mini_games
                ],
            }
        )

    @app.post("/goal")
    def select_goal(request: Request, goal_id: str = Form(...)) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            goal = holder.game.select_goal(goal_id)
            status_payload = holder.game.get_status().as_dict()
        return JSONResponse({"goal": goal.as_dict(), "status": status_payload})

    @app.post("/goal/reset")
    def reset_goal(request: Request) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            holder.game.reset_for_new_goal()
            return JSONResponse(holder.game.get_status().as_dict())

    @app.post("/allowance")
    def allowance(request: Request, day: Optional[str] = Form(None)) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            result = holder.game.credit_allowance(_parse_day(day))
        return JSONResponse(result.as_dict())

    @app.post("/chore")
    def chore(request: Request) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            result = holder.game.complete_chore()
        return JSONResponse(result.as_dict())

    @app.post("/interest")
    def interest(request: Request, day: Optional[str] = Form(None)) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            result = holder.game.credit_weekly_interest(_parse_day(day))
        return JSONResponse(result.as_dict())

    @app.post("/temptation")
    def temptation(request: Request, temptation_id: str = Form(...), choice: str = Form(...)) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            result = holder.game.resolve_temptation(temptation_id, choice.strip().lower())
        return JSONResponse(result.as_dict())

    @app.get("/minigame/{game_key}/puzzle")
    def puzzle(request: Request, game_key: str) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            holder.game.catalog.mini_game(game_key)
            question = generate_puzzle(game_key, holder.racer_rng)
            holder.puzzles[game_key] = question
        return JSONResponse(question.as_dict())

    @app.post("/minigame/{game_key}/answer")
    def answer(request: Request, game_key: str, answer: str = Form(...)) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            question = holder.puzzles.pop(game_key, None)
            if question is None:
                return JSONResponse(
                    {"error": "NoPuzzle", "detail": f"Request a {game_key} puzzle first."},
                    status_code=409,
                )
            result = holder.game.resolve_mini_game(game_key, question.check(answer))
        payload = result.as_dict()
        payload["answer"] = str(question.answer)
        return JSONResponse(payload)

    @app.post("/racers/advance")
    def advance_racers(request: Request) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            game = holder.game
            factors = [holder.racer_rng.uniform(0.75, 1.25) for _ in game.state.ai_racers]
            racers = game.advance_ai_racers(factors)
        return JSONResponse({"racers": [racer.as_dict() for racer in racers]})

    @app.post("/simulate/day")
    def simulate_day(request: Request, day: Optional[str] = Form(None)) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            report = holder.driver().step(_parse_day(day))
        return JSONResponse(report.as_dict())

    @app.get("/gallery")
    def gallery(request: Request) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            entries = holder.game.gallery()
        return JSONResponse({"completed_goals": [entry.as_dict() for entry in entries]})

    @app.get("/notifications")
    def notifications(request: Request) -> JSONResponse:
        holder = _holder(request)
        with holder.lock:
            drained = holder.game.notifications.pop_all()
        return JSONResponse({"notifications": [item.as_dict() for item in drained]})

    return app


app = create_app()


__all__ = ["GameHolder", "app", "create_app", "default_engine"]
