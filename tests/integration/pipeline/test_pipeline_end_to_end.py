"""End-to-end pipeline runs against a local git repository.

Real git, real build and test processes, a real archive on disk. Only the
GitHub API is replaced, by an httpx mock transport.
"""

import json
import shutil
import subprocess
import sys
from pathlib import Path

import httpx
import pytest

from pushci.archive import STATUS_NOT_RUN, LogArchiver
from pushci.pipeline import Orchestrator, PipelineState, PushEvent
from pushci.runner import SubprocessRunner
from pushci.status import StatusReporter
from pushci.workspace import WorkspaceManager

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(shutil.which("git") is None, reason="git not installed"),
]

BUILD = [sys.executable, "build.py"]
TEST = [sys.executable, "check.py"]

GIT_IDENTITY = [
    "-c",
    "user.name=pushci tests",
    "-c",
    "user.email=tests@pushci.invalid",
    "-c",
    "commit.gpgsign=false",
]


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *GIT_IDENTITY, *args], cwd=cwd, check=True, capture_output=True, text=True
    )
    return result.stdout.strip()


def _make_origin(path: Path, build_exit: int = 0, test_exit: int = 0) -> str:
    """Create a repository whose build and test scripts exit with the given codes."""
    path.mkdir(parents=True)
    _git(path, "init", "-q")
    _git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    (path / "build.py").write_text(f"import sys\nprint('compiling')\nsys.exit({build_exit})\n")
    (path / "check.py").write_text(f"import sys\nprint('3 tests run')\nsys.exit({test_exit})\n")
    _git(path, "add", ".")
    _git(path, "commit", "-q", "-m", "initial")
    return _git(path, "rev-parse", "HEAD")


class RecordingRunner:
    """Real subprocess runner that remembers every command it ran."""

    def __init__(self) -> None:
        self.inner = SubprocessRunner()
        self.commands: list[list[str]] = []

    def run(self, working_directory, command, timeout):
        self.commands.append(list(command))
        return self.inner.run(working_directory, command, timeout)


class FakeGitHub:
    """Records commit status requests; answers with the configured code."""

    def __init__(self, status_code: int = 201) -> None:
        self.status_code = status_code
        self.statuses: list[dict] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.statuses.append(json.loads(request.read()))
        return httpx.Response(self.status_code, json={})


@pytest.fixture
def github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()


@pytest.fixture
def orchestrator(tmp_path: Path, github: FakeGitHub, runner: RecordingRunner) -> Orchestrator:
    """Create an Orchestrator using real git, processes and archive."""
    reporter = StatusReporter(token_provider=None)
    reporter._client = httpx.Client(
        base_url="https://api.github.test", transport=httpx.MockTransport(github)
    )
    orch = Orchestrator(
        workspace_manager=WorkspaceManager(runner, git_timeout=60),
        status_reporter=reporter,
        archiver=LogArchiver(tmp_path / "logs"),
        runner=runner,
        workspace_root=tmp_path / "workspace",
        build_command=BUILD,
        test_command=TEST,
        build_timeout=60,
        test_timeout=60,
        public_url="http://ci.test",
    )
    yield orch
    reporter.close()


def _event(origin: Path, sha: str, ref: str = "refs/heads/main") -> PushEvent:
    return PushEvent(
        branch_ref=ref, commit_sha=sha, repo_full_name="octo/app", clone_url=str(origin)
    )


class TestEndToEnd:
    """Full pipeline runs."""

    def test_passing_build_and_tests(
        self, orchestrator: Orchestrator, github: FakeGitHub, tmp_path: Path
    ) -> None:
        sha = _make_origin(tmp_path / "origin")

        result = orchestrator.run(_event(tmp_path / "origin", sha))

        assert result.final_state is PipelineState.DONE
        assert [s["state"] for s in github.statuses] == ["pending", "pending", "success"]
        assert github.statuses[-1]["target_url"] == f"http://ci.test/logs/{result.locator}"
        assert github.statuses[-1]["context"] == "continuous integration"
        record = orchestrator.archiver.lookup(result.locator)
        assert record.commit_sha == sha
        assert (record.build_status, record.test_status) == ("SUCCESS", "SUCCESS")
        assert "compiling" in record.build_log
        assert "3 tests run" in record.test_log
        assert not (tmp_path / "workspace" / "octo" / "app").exists()

    def test_build_exit_3(
        self,
        orchestrator: Orchestrator,
        github: FakeGitHub,
        runner: RecordingRunner,
        tmp_path: Path,
    ) -> None:
        sha = _make_origin(tmp_path / "origin", build_exit=3)

        result = orchestrator.run(_event(tmp_path / "origin", sha))

        assert github.statuses[-1]["state"] == "failure"
        assert github.statuses[-1]["target_url"].startswith("http://ci.test/logs/octo/app/")
        assert TEST not in runner.commands
        record = orchestrator.archiver.lookup(result.locator)
        assert record.build_status == "FAILURE"
        assert "compiling" in record.build_log
        assert record.test_status == STATUS_NOT_RUN
        assert not (tmp_path / "workspace" / "octo" / "app").exists()

    def test_nonexistent_branch(
        self, orchestrator: Orchestrator, github: FakeGitHub, tmp_path: Path
    ) -> None:
        sha = _make_origin(tmp_path / "origin")

        result = orchestrator.run(_event(tmp_path / "origin", sha, ref="refs/heads/nope"))

        assert result.final_state is PipelineState.ABORTED
        assert github.statuses == []
        assert not (tmp_path / "workspace" / "octo" / "app").exists()

    def test_pending_rejected_with_422(
        self,
        orchestrator: Orchestrator,
        github: FakeGitHub,
        runner: RecordingRunner,
        tmp_path: Path,
    ) -> None:
        github.status_code = 422
        sha = _make_origin(tmp_path / "origin")

        result = orchestrator.run(_event(tmp_path / "origin", sha))

        assert result.final_state is PipelineState.ABORTED
        assert len(github.statuses) == 1
        assert BUILD not in runner.commands
        assert not (tmp_path / "workspace" / "octo" / "app").exists()

    def test_repeated_runs(self, orchestrator: Orchestrator, tmp_path: Path) -> None:
        sha = _make_origin(tmp_path / "origin", test_exit=1)
        event = _event(tmp_path / "origin", sha)

        first = orchestrator.run(event)
        second = orchestrator.run(event)

        assert first.locator != second.locator
        a = orchestrator.archiver.lookup(first.locator)
        b = orchestrator.archiver.lookup(second.locator)
        assert a.timestamp != b.timestamp
        assert (a.build_status, a.test_status) == (b.build_status, b.test_status) == (
            "SUCCESS",
            "FAILURE",
        )
