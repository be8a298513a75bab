"""
Exception hierarchy for yorihime.

StatusError subclasses are recoverable: the main loop shows them in the
status overlay and the user dismisses them. Everything else that derives
from TrainerError is fatal and escapes the loop.
"""

from __future__ import annotations


class TrainerError(Exception):
    """Base class for all yorihime errors."""


class StatusError(TrainerError):
    """A recoverable error reported through the status overlay."""

    message = "Error"

    def __init__(self, detail: str = ""):
        self.detail = detail
        super().__init__(f"{self.message}: {detail}" if detail else self.message)


class NoGameFoundError(StatusError):
    message = "No games are found! Please run the game first!"


class NotSupportedError(StatusError):
    message = "Not supported"


class InvalidInputError(StatusError):
    message = "Invalid input"


class ProcessNotFoundError(StatusError):
    message = "Not found"


class MemoryAccessError(StatusError):
    message = "Failed to access memory"


class NoMenuInHistoryError(TrainerError):
    """The menu history stack is empty. Signals a broken invariant."""

    def __init__(self) -> None:
        super().__init__("No menu in history")


class EventSourceError(TrainerError):
    """The input event channel closed or its producer failed."""
