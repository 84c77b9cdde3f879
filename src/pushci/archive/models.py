"""Data models for the Log Archiver."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pushci.runner import CommandOutcome

STATUS_NOT_RUN = "NOT_RUN"


@dataclass(frozen=True)
class RunRecord:
    """Archived outcome of one pipeline run.

    Attributes:
        timestamp: Creation time; identifies the record within its repository.
        commit_sha: Commit the run built.
        build_status: SUCCESS, FAILURE, ERROR, or NOT_RUN.
        build_log: Captured build output.
        test_status: SUCCESS, FAILURE, ERROR, or NOT_RUN.
        test_log: Captured test output.
    """

    timestamp: datetime
    commit_sha: str
    build_status: str
    build_log: str = ""
    test_status: str = STATUS_NOT_RUN
    test_log: str = ""

    @classmethod
    def from_outcomes(
        cls,
        timestamp: datetime,
        commit_sha: str,
        build: CommandOutcome,
        test: CommandOutcome | None = None,
    ) -> RunRecord:
        """Build a record from stage outcomes; a missing test outcome is NOT_RUN."""
        return cls(
            timestamp=timestamp,
            commit_sha=commit_sha,
            build_status=build.kind.value,
            build_log=build.log,
            test_status=test.kind.value if test is not None else STATUS_NOT_RUN,
            test_log=test.log if test is not None else "",
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the on-disk JSON shape."""
        return {
            "timestamp": self.timestamp.isoformat(),
            "commitIdentifier": self.commit_sha,
            "buildStatus": self.build_status,
            "buildLog": self.build_log,
            "testStatus": self.test_status,
            "testLog": self.test_log,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> RunRecord:
        """Create a record from the on-disk JSON shape.

        Raises:
            KeyError: If a required field is missing.
            ValueError: If the timestamp is not ISO-8601.
        """
        return cls(
            timestamp=datetime.fromisoformat(data["timestamp"]),
            commit_sha=data["commitIdentifier"],
            build_status=data["buildStatus"],
            build_log=data.get("buildLog") or "",
            test_status=data.get("testStatus") or STATUS_NOT_RUN,
            test_log=data.get("testLog") or "",
        )
