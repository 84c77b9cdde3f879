"""Command line entry point for pushci."""

from __future__ import annotations

import sys

import click
import uvicorn

from pushci.config import ConfigError, Settings
from pushci.logging import setup_logging
from pushci.pipeline import Orchestrator, PushEvent


def _load_settings() -> Settings:
    try:
        return Settings.from_env()
    except ConfigError as e:
        raise click.ClickException(str(e)) from e


@click.group()
def main() -> None:
    """pushci - build and test pushed commits, report statuses to GitHub."""


@main.command("serve")
@click.option("--host", default=None, help="Interface to bind (default: PUSHCI_HOST)")
@click.option("--port", type=int, default=None, help="Port to listen on (default: PUSHCI_PORT)")
@click.option("--log-level", default=None, help="Log level (default: PUSHCI_LOG_LEVEL or INFO)")
def serve(host: str | None, port: int | None, log_level: str | None) -> None:
    """Run the webhook server."""
    from pushci.api import create_app  # noqa: PLC0415

    settings = _load_settings()
    if host is not None:
        settings.host = host
    if port is not None:
        settings.port = port
    setup_logging(level=log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port, log_config=None)


@main.command("run")
@click.argument("repo_full_name")
@click.option("--clone-url", required=True, help="URL to clone the repository from")
@click.option("--ref", "branch_ref", default="refs/heads/main", show_default=True)
@click.option("--sha", "commit_sha", required=True, help="Commit to report statuses on")
def run_once(repo_full_name: str, clone_url: str, branch_ref: str, commit_sha: str) -> None:
    """Run one pipeline in the foreground, as if REPO_FULL_NAME had been pushed."""
    settings = _load_settings()
    setup_logging()
    orchestrator = Orchestrator.from_settings(settings)
    event = PushEvent(
        branch_ref=branch_ref,
        commit_sha=commit_sha,
        repo_full_name=repo_full_name,
        clone_url=clone_url,
    )
    try:
        result = orchestrator.run(event)
    finally:
        orchestrator.status_reporter.close()

    click.echo(f"Final state: {result.final_state}")
    for status in result.reported:
        click.echo(f"  {status.state}: {status.description}")
    if result.locator:
        click.echo(f"Run log: {result.locator}")
    if result.aborted:
        click.echo(f"Aborted: {result.error}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
