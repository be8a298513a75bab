"""
Status overlay state.

While a status is SUCCESS or ERROR the overlay is shown full-screen and
the next key press only dismisses it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .errors import StatusError


class StatusKind(Enum):
    RUNNING = "running"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Status:
    kind: StatusKind = StatusKind.RUNNING
    message: str = ""
    error: StatusError | None = None

    @classmethod
    def running(cls) -> Status:
        return cls()

    @classmethod
    def success(cls, message: str) -> Status:
        return cls(StatusKind.SUCCESS, message)

    @classmethod
    def failure(cls, error: StatusError) -> Status:
        return cls(StatusKind.ERROR, str(error), error)

    @property
    def is_running(self) -> bool:
        return self.kind is StatusKind.RUNNING

    @property
    def is_success(self) -> bool:
        return self.kind is StatusKind.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.kind is StatusKind.ERROR


RUNNING = Status.running()
