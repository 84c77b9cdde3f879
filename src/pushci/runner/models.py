"""Data models for the command runner."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class OutcomeKind(StrEnum):
    """How an external command ended.

    SUCCESS: exit code 0.
    FAILURE: nonzero exit code.
    ERROR: could not be started, timed out, or output capture failed.
    """

    SUCCESS = "SUCCESS"
    FAILURE = "FAILURE"
    ERROR = "ERROR"


@dataclass(frozen=True)
class CommandOutcome:
    """Result of one external process invocation.

    Attributes:
        kind: Classified outcome.
        log: Combined stdout and stderr, possibly empty.
        message: Explanation when kind is ERROR.
        exit_code: Process exit code, None when the process never exited normally.
        duration_seconds: Wall time spent on the invocation.
    """

    kind: OutcomeKind
    log: str = ""
    message: str | None = None
    exit_code: int | None = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    @classmethod
    def error(cls, message: str, log: str = "", duration_seconds: float = 0.0) -> CommandOutcome:
        """Build an ERROR outcome."""
        return cls(
            kind=OutcomeKind.ERROR,
            log=log,
            message=message,
            duration_seconds=duration_seconds,
        )
