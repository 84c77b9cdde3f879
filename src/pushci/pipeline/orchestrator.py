"""Orchestrator - drives one push through clone, build, test, report and archive."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from pushci.archive import LogArchiver, RunRecord
from pushci.config import (
    DEFAULT_BUILD_TIMEOUT,
    DEFAULT_PORT,
    DEFAULT_STATUS_CONTEXT,
    DEFAULT_TEST_TIMEOUT,
)
from pushci.exceptions import InvalidNameError, ValidationError
from pushci.logging import truncate_output
from pushci.naming import RepoName, branch_from_ref, parse_repo_full_name
from pushci.pipeline.exceptions import PipelineError, ReportFailedError, StageFailedError
from pushci.pipeline.locks import RepoLocks
from pushci.pipeline.models import PipelineResult, PipelineState, PushEvent
from pushci.runner import CommandOutcome, OutcomeKind, SubprocessRunner
from pushci.status import (
    CommitState,
    CommitStatus,
    StatusReporter,
    StatusReporterError,
    TokenProvider,
)
from pushci.workspace import WorkspaceError, WorkspaceManager

if TYPE_CHECKING:
    from pathlib import Path

    from pushci.config import Settings
    from pushci.runner import ProcessRunner

logger = logging.getLogger("pushci.pipeline")

_TEST_STATUSES: dict[OutcomeKind, tuple[CommitState, str]] = {
    OutcomeKind.SUCCESS: (CommitState.SUCCESS, "tests passed"),
    OutcomeKind.FAILURE: (CommitState.FAILURE, "tests failed"),
    OutcomeKind.ERROR: (CommitState.ERROR, "test error"),
}


def _local_now() -> datetime:
    return datetime.now().astimezone()


class Orchestrator:
    """Runs the pipeline state machine for push events.

    One call to ``run`` handles one push from start to finish:
    - clone and check out the pushed branch
    - report "pending" on the commit
    - build, then test if the build passed
    - archive the run log and report the result with a link to it
    - delete the workspace, whatever happened before

    Runs for the same repository are serialized with a per-repository lock.
    Nothing is retried.
    """

    def __init__(
        self,
        workspace_manager: WorkspaceManager,
        status_reporter: StatusReporter,
        archiver: LogArchiver,
        runner: ProcessRunner,
        workspace_root: str | Path,
        build_command: list[str],
        test_command: list[str],
        *,
        build_timeout: float = DEFAULT_BUILD_TIMEOUT,
        test_timeout: float = DEFAULT_TEST_TIMEOUT,
        public_url: str = f"http://localhost:{DEFAULT_PORT}",
        status_context: str = DEFAULT_STATUS_CONTEXT,
        locks: RepoLocks | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        """Initialize the Orchestrator.

        Args:
            workspace_manager: Clones, checks out and deletes workspaces.
            status_reporter: Sends commit statuses to GitHub.
            archiver: Stores run records.
            runner: Runs the build and test commands.
            workspace_root: Directory under which repositories are cloned.
            build_command: Build command, run in the checkout.
            test_command: Test command, run in the checkout.
            build_timeout: Seconds allowed for the build command.
            test_timeout: Seconds allowed for the test command.
            public_url: Base URL that serves archived logs.
            status_context: Context label on every commit status.
            locks: Lock registry, shared if several orchestrators exist.
            clock: Source of archive timestamps. Defaults to local time.
        """
        self.workspace_manager = workspace_manager
        self.status_reporter = status_reporter
        self.archiver = archiver
        self.runner = runner
        self.workspace_root = workspace_root
        self.build_command = list(build_command)
        self.test_command = list(test_command)
        self.build_timeout = build_timeout
        self.test_timeout = test_timeout
        self.public_url = public_url.rstrip("/")
        self.status_context = status_context
        self.locks = locks if locks is not None else RepoLocks()
        self._clock = clock or _local_now

    @classmethod
    def from_settings(cls, settings: Settings, runner: ProcessRunner | None = None) -> Orchestrator:
        """Wire up an Orchestrator and its collaborators from settings."""
        runner = runner or SubprocessRunner()
        return cls(
            workspace_manager=WorkspaceManager(runner, git_timeout=settings.git_timeout),
            status_reporter=StatusReporter(
                TokenProvider(settings.config_file),
                base_url=settings.github_api_url,
                timeout=settings.http_timeout,
            ),
            archiver=LogArchiver(settings.archive_root),
            runner=runner,
            workspace_root=settings.workspace_root,
            build_command=settings.build_command,
            test_command=settings.test_command,
            build_timeout=settings.build_timeout,
            test_timeout=settings.test_timeout,
            public_url=settings.public_url,
            status_context=settings.status_context,
        )

    def run(self, event: PushEvent) -> PipelineResult:
        """Run the pipeline for one push event.

        Never raises for pipeline failures; the outcome is in the result.

        Args:
            event: The push to build.

        Returns:
            PipelineResult with the final state and everything reported.
        """
        result = PipelineResult(event=event)
        self._enter(result, PipelineState.START)
        logger.info(
            "Pipeline started for %s@%s (%s)",
            event.repo_full_name,
            event.short_sha,
            event.branch_ref,
        )

        with self.locks.hold(event.repo_full_name):
            try:
                final_state = self._execute(event, result)
            finally:
                self._enter(result, PipelineState.CLEANING_UP)
                self._cleanup(event)

        result.final_state = final_state
        self._enter(result, final_state)
        if final_state is PipelineState.ABORTED:
            logger.warning(
                "Pipeline aborted for %s@%s: %s",
                event.repo_full_name,
                event.short_sha,
                result.error,
            )
        else:
            logger.info("Pipeline finished for %s@%s", event.repo_full_name, event.short_sha)
        return result

    def _execute(self, event: PushEvent, result: PipelineResult) -> PipelineState:
        try:
            return self._run_stages(event, result)
        except PipelineError as e:
            result.error = str(e)
            return PipelineState.ABORTED
        except Exception as e:
            logger.exception(
                "Unexpected error in pipeline for %s@%s", event.repo_full_name, event.short_sha
            )
            # Once GitHub shows the commit as pending, leave it with a final state.
            if result.reported:
                self._report_internal_error(event, result)
            result.error = f"Internal error: {e}"
            return PipelineState.ABORTED

    def _run_stages(self, event: PushEvent, result: PipelineResult) -> PipelineState:
        self._enter(result, PipelineState.CLONING)
        try:
            repo = parse_repo_full_name(event.repo_full_name)
            result.workspace = self.workspace_manager.prepare(
                self.workspace_root, event.repo_full_name, event.clone_url
            )
        except (ValidationError, WorkspaceError) as e:
            raise StageFailedError(f"Clone failed: {e}") from e

        self._enter(result, PipelineState.CHECKING_OUT)
        try:
            branch = branch_from_ref(event.branch_ref)
            self.workspace_manager.checkout(result.workspace, branch)
        except (ValidationError, WorkspaceError) as e:
            raise StageFailedError(f"Checkout failed: {e}") from e

        self._enter(result, PipelineState.REPORTING_PENDING)
        self._report(event, repo, result, CommitState.PENDING, "cloned and checked out")

        self._enter(result, PipelineState.BUILDING)
        build = self.runner.run(result.workspace, self.build_command, self.build_timeout)
        result.build_outcome = build
        self._log_outcome("Build", event, build)

        if build.kind is OutcomeKind.FAILURE:
            self._enter(result, PipelineState.ARCHIVING)
            target_url = self._archive(event, result, build)
            self._enter(result, PipelineState.REPORTING_BUILD_STATUS)
            self._report(event, repo, result, CommitState.FAILURE, "build failed", target_url)
            return PipelineState.DONE

        self._enter(result, PipelineState.REPORTING_BUILD_STATUS)
        if build.kind is OutcomeKind.ERROR:
            self._report(event, repo, result, CommitState.ERROR, "build error")
            return PipelineState.DONE
        self._report(event, repo, result, CommitState.PENDING, "build succeeded")

        self._enter(result, PipelineState.TESTING)
        test = self.runner.run(result.workspace, self.test_command, self.test_timeout)
        result.test_outcome = test
        self._log_outcome("Tests", event, test)

        state, description = _TEST_STATUSES[test.kind]
        target_url = None
        if test.kind is not OutcomeKind.ERROR:
            self._enter(result, PipelineState.ARCHIVING)
            target_url = self._archive(event, result, build, test)
        self._enter(result, PipelineState.REPORTING_TEST_STATUS)
        self._report(event, repo, result, state, description, target_url)
        return PipelineState.DONE

    def _report(
        self,
        event: PushEvent,
        repo: RepoName,
        result: PipelineResult,
        state: CommitState,
        description: str,
        target_url: str | None = None,
    ) -> None:
        """Send a commit status.

        Raises:
            ReportFailedError: If GitHub did not accept the status.
        """
        status = CommitStatus(
            state=state,
            description=description,
            target_url=target_url,
            context=self.status_context,
        )
        try:
            self.status_reporter.report(repo.owner, repo.name, event.commit_sha, status)
        except StatusReporterError as e:
            logger.error("Status '%s' for %s@%s failed: %s", description, repo, event.short_sha, e)
            raise ReportFailedError(f"Status report '{description}' failed: {e}") from e
        result.reported.append(status)
        logger.info("Reported %s '%s' for %s@%s", state, description, repo, event.short_sha)

    def _report_internal_error(self, event: PushEvent, result: PipelineResult) -> None:
        repo = parse_repo_full_name(event.repo_full_name)
        status = CommitStatus(
            state=CommitState.ERROR,
            description="internal error",
            context=self.status_context,
        )
        try:
            self.status_reporter.report(repo.owner, repo.name, event.commit_sha, status)
        except StatusReporterError as e:
            logger.error("Could not report internal error for %s@%s: %s", repo, event.short_sha, e)
        else:
            result.reported.append(status)

    def _archive(
        self,
        event: PushEvent,
        result: PipelineResult,
        build: CommandOutcome,
        test: CommandOutcome | None = None,
    ) -> str:
        """Store the run record and return the URL it is served at."""
        record = RunRecord.from_outcomes(self._clock(), event.commit_sha, build, test)
        result.locator = self.archiver.archive(event.repo_full_name, record)
        return f"{self.public_url}/logs/{result.locator}"

    def _cleanup(self, event: PushEvent) -> None:
        try:
            local_path = self.workspace_manager.workspace_path(
                self.workspace_root, event.repo_full_name
            )
        except InvalidNameError:
            logger.debug("No workspace to clean up for %r", event.repo_full_name)
            return
        try:
            self.workspace_manager.destroy(local_path, missing_ok=True)
        except WorkspaceError as e:
            logger.error("Failed to clean up workspace %s: %s", local_path, e)

    @staticmethod
    def _enter(result: PipelineResult, state: PipelineState) -> None:
        result.states.append(state)
        logger.debug("Pipeline for %s -> %s", result.event.repo_full_name, state)

    @staticmethod
    def _log_outcome(stage: str, event: PushEvent, outcome: CommandOutcome) -> None:
        if outcome.kind is OutcomeKind.ERROR:
            logger.error(
                "%s errored for %s@%s: %s",
                stage,
                event.repo_full_name,
                event.short_sha,
                outcome.message,
            )
        else:
            logger.info(
                "%s %s for %s@%s (exit %s, %.1fs)",
                stage,
                outcome.kind.value.lower(),
                event.repo_full_name,
                event.short_sha,
                outcome.exit_code,
                outcome.duration_seconds,
            )
        logger.debug("%s output:\n%s", stage, truncate_output(outcome.log))
