"""SQLModel-backed storage for the serialized game state."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Field, Session, SQLModel, create_engine

from ..exceptions import PersistenceFailedError
from ..models import utc_now
from .config import SQLITE_FILE_NAME, STORAGE_KEY


# ---------------------------------------------------------------------------
# Database models
# ---------------------------------------------------------------------------
class SavedGame(SQLModel, table=True):
    k: str = Field(primary_key=True)
    v: str
    updated_at: datetime = Field(default_factory=utc_now)


def make_engine(path: str = SQLITE_FILE_NAME) -> Engine:
    return create_engine(
        f"sqlite:///{path}",
        echo=False,
        connect_args={"check_same_thread": False},
    )


class SqlStateStore:
    """Keep the game blob in a single SQLite row keyed by the storage key."""

    def __init__(self, engine: Engine | None = None, *, key: str = STORAGE_KEY) -> None:
        self.engine = engine if engine is not None else make_engine()
        self.key = key
        SQLModel.metadata.create_all(self.engine, tables=[SavedGame.__table__])

    def load(self) -> Optional[str]:
        with Session(self.engine) as session:
            record = session.get(SavedGame, self.key)
            return record.v if record is not None else None

    def save(self, blob: str) -> None:
        try:
            with Session(self.engine) as session:
                record = session.get(SavedGame, self.key)
                if record is None:
                    record = SavedGame(k=self.key, v=blob)
                else:
                    record.v = blob
                    record.updated_at = utc_now()
                session.add(record)
                session.commit()
        except SQLAlchemyError as exc:
            raise PersistenceFailedError(f"Could not save game state: {exc}") from exc

    def clear(self) -> None:
        with Session(self.engine) as session:
            record = session.get(SavedGame, self.key)
            if record is not None:
                session.delete(record)
                session.commit()


__all__ = ["SavedGame", "SqlStateStore", "make_engine"]
