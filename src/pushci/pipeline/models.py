"""Data models for the Pipeline Orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

    from pushci.runner import CommandOutcome
    from pushci.status import CommitStatus


class PipelineState(StrEnum):
    """Stages a pipeline run passes through."""

    START = "start"
    CLONING = "cloning"
    CHECKING_OUT = "checking_out"
    REPORTING_PENDING = "reporting_pending"
    BUILDING = "building"
    REPORTING_BUILD_STATUS = "reporting_build_status"
    TESTING = "testing"
    ARCHIVING = "archiving"
    REPORTING_TEST_STATUS = "reporting_test_status"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (PipelineState.DONE, PipelineState.ABORTED)


@dataclass(frozen=True)
class PushEvent:
    """A push to a branch, as delivered by the webhook.

    Attributes:
        branch_ref: Full ref, e.g. "refs/heads/main".
        commit_sha: Head commit after the push.
        repo_full_name: Repository in "owner/name" format.
        clone_url: URL to clone the repository from.
    """

    branch_ref: str
    commit_sha: str
    repo_full_name: str
    clone_url: str

    @property
    def short_sha(self) -> str:
        return self.commit_sha[:7]


@dataclass
class PipelineResult:
    """What happened during one pipeline run.

    Attributes:
        event: The push that triggered the run.
        final_state: DONE or ABORTED once the run has finished.
        states: Every state entered, in order.
        build_outcome: Build command outcome, if the build ran.
        test_outcome: Test command outcome, if the tests ran.
        locator: Archive locator, if a record was written.
        reported: Commit statuses GitHub accepted, in order.
        error: Reason the run aborted.
        workspace: Checkout directory, once cloned.
    """

    event: PushEvent
    final_state: PipelineState | None = None
    states: list[PipelineState] = field(default_factory=list)
    build_outcome: CommandOutcome | None = None
    test_outcome: CommandOutcome | None = None
    locator: str | None = None
    reported: list[CommitStatus] = field(default_factory=list)
    error: str | None = None
    workspace: Path | None = None

    @property
    def aborted(self) -> bool:
        return self.final_state is PipelineState.ABORTED
