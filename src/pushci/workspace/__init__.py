"""Workspace Manager - sandboxed local checkouts of pushed repositories."""

from pushci.workspace.exceptions import (
    CheckoutError,
    CloneError,
    NotARepositoryError,
    WorkspaceDeleteError,
    WorkspaceError,
    WorkspaceNotFoundError,
)
from pushci.workspace.manager import WorkspaceManager

__all__ = [
    "CheckoutError",
    "CloneError",
    "NotARepositoryError",
    "WorkspaceDeleteError",
    "WorkspaceError",
    "WorkspaceManager",
    "WorkspaceNotFoundError",
]
