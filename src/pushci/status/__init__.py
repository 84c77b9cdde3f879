"""Status Reporter - commit status updates on GitHub."""

from pushci.status.exceptions import RemoteRejectedError, StatusReporterError, TokenError
from pushci.status.models import CommitState, CommitStatus
from pushci.status.reporter import StatusReporter
from pushci.status.token import TokenProvider, read_properties

__all__ = [
    "CommitState",
    "CommitStatus",
    "RemoteRejectedError",
    "StatusReporter",
    "StatusReporterError",
    "TokenError",
    "TokenProvider",
    "read_properties",
]
