"""Custom exceptions for the Workspace Manager."""

from pushci.exceptions import FilesystemError, ProcessError, PushCIError


class WorkspaceError(PushCIError):
    """Base exception for Workspace Manager errors."""


class CloneError(WorkspaceError, ProcessError):
    """git clone could not be run or exited nonzero."""


class CheckoutError(WorkspaceError, ProcessError):
    """git checkout could not be run or exited nonzero."""


class NotARepositoryError(WorkspaceError, FilesystemError):
    """Directory has no .git marker."""


class WorkspaceNotFoundError(WorkspaceError, FilesystemError):
    """Workspace directory does not exist."""


class WorkspaceDeleteError(WorkspaceError, FilesystemError):
    """Workspace directory could not be fully removed."""
