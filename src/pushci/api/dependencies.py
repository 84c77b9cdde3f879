"""FastAPI dependencies for dependency injection."""

from __future__ import annotations

from collections.abc import Generator  # noqa: TC003
from typing import Annotated

from fastapi import Depends

from pushci.archive import LogArchiver
from pushci.pipeline import Orchestrator

# Global Orchestrator instance (initialized on app startup)
_orchestrator: Orchestrator | None = None


def init_orchestrator(orchestrator: Orchestrator) -> None:
    """Initialize the global Orchestrator instance."""
    global _orchestrator  # noqa: PLW0603
    _orchestrator = orchestrator


def close_orchestrator() -> None:
    """Close the global Orchestrator instance and its GitHub client."""
    global _orchestrator  # noqa: PLW0603
    if _orchestrator is not None:
        _orchestrator.status_reporter.close()
        _orchestrator = None


def get_orchestrator() -> Generator[Orchestrator, None, None]:
    """Dependency that provides the Orchestrator instance."""
    if _orchestrator is None:
        raise RuntimeError("Orchestrator not initialized. Call init_orchestrator() first.")
    yield _orchestrator


# Type alias for dependency injection
OrchestratorDep = Annotated[Orchestrator, Depends(get_orchestrator)]

# Global LogArchiver instance (initialized on app startup)
_archiver: LogArchiver | None = None


def init_archiver(archiver: LogArchiver) -> None:
    """Initialize the global LogArchiver instance."""
    global _archiver  # noqa: PLW0603
    _archiver = archiver


def close_archiver() -> None:
    """Release the global LogArchiver instance."""
    global _archiver  # noqa: PLW0603
    _archiver = None


def get_archiver() -> Generator[LogArchiver, None, None]:
    """Dependency that provides the LogArchiver instance."""
    if _archiver is None:
        raise RuntimeError("LogArchiver not initialized. Call init_archiver() first.")
    yield _archiver


# Type alias for dependency injection
ArchiverDep = Annotated[LogArchiver, Depends(get_archiver)]
