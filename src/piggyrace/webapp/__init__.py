"""Piggy Race web adapter package (FastAPI + SQLModel)."""
from __future__ import annotations

from .application import GameHolder, app, create_app, default_engine
from .persistence import SavedGame, SqlStateStore, make_engine

__all__ = [
    "GameHolder",
    "SavedGame",
    "SqlStateStore",
    "app",
    "create_app",
    "default_engine",
    "make_engine",
]
