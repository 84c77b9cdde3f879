"""Data models for the Status Reporter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class CommitState(StrEnum):
    """Commit status states accepted by the GitHub API."""

    PENDING = "pending"
    SUCCESS = "success"
    FAILURE = "failure"
    ERROR = "error"


@dataclass(frozen=True)
class CommitStatus:
    """A status to attach to a commit.

    Attributes:
        state: Status state.
        description: Short human-readable text.
        target_url: Link shown next to the status, usually the archived run log.
        context: Label distinguishing this reporter from other checks on the commit.
    """

    state: CommitState
    description: str = ""
    target_url: str | None = None
    context: str = ""

    def to_payload(self) -> dict[str, str]:
        """Request body for the statuses endpoint.

        All four keys are always present; missing optional values become "".
        """
        return {
            "state": self.state.value,
            "target_url": self.target_url or "",
            "description": self.description or "",
            "context": self.context or "",
        }
