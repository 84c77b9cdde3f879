"""Custom exceptions for the Status Reporter."""

from pushci.exceptions import PushCIError


class StatusReporterError(PushCIError):
    """Base exception for Status Reporter errors."""


class RemoteRejectedError(StatusReporterError):
    """The hosting API did not accept a commit status.

    status_code is None when no HTTP response was received at all.
    """

    def __init__(self, status_code: int | None, message: str = "") -> None:
        self.status_code = status_code
        if not message:
            message = f"Commit status rejected with HTTP {status_code}"
        super().__init__(message)


class TokenError(StatusReporterError):
    """GitHub token is missing or blank."""
