"""Error taxonomy shared by all pushci components."""


class PushCIError(Exception):
    """Base exception for pushci errors."""


class ValidationError(PushCIError):
    """Externally supplied input failed validation (repo name, branch, locator)."""


class ProcessError(PushCIError):
    """An external command could not be run or reported failure."""


class FilesystemError(PushCIError):
    """A filesystem precondition or operation failed."""


class NotFoundError(PushCIError):
    """A requested resource does not exist."""


class InvalidNameError(ValidationError):
    """Repository name is not a path-safe ``owner/name`` pair."""
