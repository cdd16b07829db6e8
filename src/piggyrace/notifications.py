"""Notification primitives handed to presentation adapters as toasts and modals."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Sequence

from .models import utc_now


class NotificationChannel(str, Enum):
    TOAST = "toast"
    MODAL = "modal"


class NotificationType(str, Enum):
    GOAL_SELECTED = "goal_selected"
    ALLOWANCE = "allowance"
    CHORE = "chore"
    INTEREST = "interest"
    TEMPTATION = "temptation"
    MINI_GAME = "mini_game"
    MILESTONE = "milestone"
    GOAL_COMPLETED = "goal_completed"
    PERSISTENCE_FAILED = "persistence_failed"
    OTHER = "other"


@dataclass(slots=True)
class Notification:
    """Simple representation of a message waiting to be shown."""

    channel: NotificationChannel
    type: NotificationType
    title: str
    body: str
    metadata: Dict[str, str] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)

    def as_dict(self) -> Dict[str, str]:
        payload = {
            "channel": self.channel.value,
            "type": self.type.value,
            "title": self.title,
            "body": self.body,
            "created_at": self.created_at.isoformat(),
        }
        payload.update(self.metadata)
        return payload


class NotificationCenter:
    """In-memory inbox drained by whichever surface renders the game."""

    def __init__(self) -> None:
        self._queue: List[Notification] = []
        self._sent: List[Notification] = []

    def queue(self, notification: Notification) -> None:
        self._queue.append(notification)

    def pending(self, *, notification_type: NotificationType | None = None) -> Sequence[Notification]:
        if notification_type is None:
            return tuple(self._queue)
        return tuple(item for item in self._queue if item.type is notification_type)

    def pop_all(self) -> Sequence[Notification]:
        pending = tuple(self._queue)
        self._queue.clear()
        self._sent.extend(pending)
        return pending

    def history(self) -> Sequence[Notification]:
        return tuple(self._sent)


__all__ = [
    "Notification",
    "NotificationCenter",
    "NotificationChannel",
    "NotificationType",
]
