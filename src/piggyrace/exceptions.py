"""Custom exception hierarchy for the Piggy Race package."""

from __future__ import annotations


class PiggyRaceError(Exception):
    """Base class for all Piggy Race specific errors."""


class InvalidGoalError(PiggyRaceError):
    """Raised when a goal identifier is not part of the catalog."""


class AlreadyCollectedError(PiggyRaceError):
    """Raised when the daily allowance was already collected for the date."""


class TooSoonError(PiggyRaceError):
    """Raised when weekly interest is requested before the window elapsed."""


class InsufficientFundsError(PiggyRaceError):
    """Raised when a spend would result in negative savings."""


class UnknownTemptationError(PiggyRaceError):
    """Raised when a temptation identifier is not part of the catalog."""


class UnknownMiniGameError(PiggyRaceError):
    """Raised when a mini-game key is not part of the catalog."""


class PersistenceFailedError(PiggyRaceError):
    """Raised by state stores when the serialized state could not be saved."""
