"""Custom exceptions for the Log Archiver."""

from pushci.exceptions import FilesystemError, NotFoundError, PushCIError, ValidationError


class ArchiveError(PushCIError):
    """Base exception for Log Archiver errors."""


class ArchiveWriteError(ArchiveError, FilesystemError):
    """A run record could not be written."""


class ArchiveReadError(ArchiveError, FilesystemError):
    """A stored run record could not be read or parsed."""


class InvalidLocatorError(ArchiveError, ValidationError):
    """Locator is malformed or points outside the archive root."""


class RecordNotFoundError(ArchiveError, NotFoundError):
    """No run record exists for the locator."""
