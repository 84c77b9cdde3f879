"""Unit tests for the command line interface."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from pushci.cli import main
from pushci.pipeline import PipelineResult, PipelineState, PushEvent
from pushci.status import CommitState, CommitStatus

SHA = "9fceb02d0ae598e95dc970b74767f19372d61af8"

RUN_ARGS = ["run", "octo/app", "--clone-url", "https://github.com/octo/app.git", "--sha", SHA]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Start every test from default settings, without touching log files."""
    for key in ("PUSHCI_HOST", "PUSHCI_PORT", "PUSHCI_PUBLIC_URL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setattr("pushci.cli.setup_logging", MagicMock())


def _result(final_state: PipelineState, **kwargs) -> PipelineResult:
    event = PushEvent(
        branch_ref="refs/heads/main",
        commit_sha=SHA,
        repo_full_name="octo/app",
        clone_url="https://github.com/octo/app.git",
    )
    return PipelineResult(event=event, final_state=final_state, **kwargs)


@pytest.mark.unit
class TestRun:
    """Tests for the run command."""

    def test_done_prints_statuses(self) -> None:
        orchestrator = MagicMock()
        orchestrator.run.return_value = _result(
            PipelineState.DONE,
            reported=[
                CommitStatus(state=CommitState.PENDING, description="cloned and checked out"),
                CommitStatus(state=CommitState.SUCCESS, description="tests passed"),
            ],
            locator="octo/app/2026-05-01T08:30:00+00:00",
        )

        with patch("pushci.cli.Orchestrator.from_settings", return_value=orchestrator):
            result = CliRunner().invoke(main, RUN_ARGS)

        assert result.exit_code == 0, result.output
        assert "Final state: done" in result.output
        assert "pending: cloned and checked out" in result.output
        assert "success: tests passed" in result.output
        assert "Run log: octo/app/2026-05-01T08:30:00+00:00" in result.output
        orchestrator.status_reporter.close.assert_called_once()

    def test_event_built_from_arguments(self) -> None:
        orchestrator = MagicMock()
        orchestrator.run.return_value = _result(PipelineState.DONE)

        with patch("pushci.cli.Orchestrator.from_settings", return_value=orchestrator):
            CliRunner().invoke(main, [*RUN_ARGS, "--ref", "refs/heads/feature"])

        event = orchestrator.run.call_args.args[0]
        assert event.repo_full_name == "octo/app"
        assert event.branch_ref == "refs/heads/feature"
        assert event.commit_sha == SHA

    def test_aborted_exits_nonzero(self) -> None:
        orchestrator = MagicMock()
        orchestrator.run.return_value = _result(
            PipelineState.ABORTED, error="Clone failed: exit code 128"
        )

        with patch("pushci.cli.Orchestrator.from_settings", return_value=orchestrator):
            result = CliRunner().invoke(main, RUN_ARGS)

        assert result.exit_code == 1
        assert "Final state: aborted" in result.output
        assert "Aborted: Clone failed: exit code 128" in result.output
        orchestrator.status_reporter.close.assert_called_once()

    def test_config_error_is_reported(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUSHCI_PORT", "not-a-port")

        with patch("pushci.cli.Orchestrator.from_settings") as from_settings:
            result = CliRunner().invoke(main, RUN_ARGS)

        assert result.exit_code == 1
        assert "Error: PUSHCI_PORT must be an integer" in result.output
        from_settings.assert_not_called()

    def test_sha_required(self) -> None:
        result = CliRunner().invoke(main, ["run", "octo/app", "--clone-url", "x"])

        assert result.exit_code == 2
        assert "--sha" in result.output


@pytest.mark.unit
class TestServe:
    """Tests for the serve command."""

    def test_options_override_settings(self) -> None:
        with (
            patch("pushci.api.create_app") as create_app,
            patch("pushci.cli.uvicorn.run") as run,
        ):
            result = CliRunner().invoke(main, ["serve", "--host", "0.0.0.0", "--port", "9001"])

        assert result.exit_code == 0, result.output
        settings = create_app.call_args.args[0]
        assert (settings.host, settings.port) == ("0.0.0.0", 9001)
        run.assert_called_once_with(
            create_app.return_value, host="0.0.0.0", port=9001, log_config=None
        )

    def test_defaults_from_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUSHCI_HOST", "127.0.0.2")
        monkeypatch.setenv("PUSHCI_PORT", "8123")

        with (
            patch("pushci.api.create_app"),
            patch("pushci.cli.uvicorn.run") as run,
        ):
            result = CliRunner().invoke(main, ["serve"])

        assert result.exit_code == 0, result.output
        assert run.call_args.kwargs["host"] == "127.0.0.2"
        assert run.call_args.kwargs["port"] == 8123

    def test_config_error_is_reported(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PUSHCI_PORT", "eighty")

        with patch("pushci.cli.uvicorn.run") as run:
            result = CliRunner().invoke(main, ["serve"])

        assert result.exit_code == 1
        assert "PUSHCI_PORT" in result.output
        run.assert_not_called()
