"""Log Archiver - persistent JSON records of pipeline runs."""

from pushci.archive.archiver import LogArchiver
from pushci.archive.exceptions import (
    ArchiveError,
    ArchiveReadError,
    ArchiveWriteError,
    InvalidLocatorError,
    RecordNotFoundError,
)
from pushci.archive.models import STATUS_NOT_RUN, RunRecord

__all__ = [
    "STATUS_NOT_RUN",
    "ArchiveError",
    "ArchiveReadError",
    "ArchiveWriteError",
    "InvalidLocatorError",
    "LogArchiver",
    "RecordNotFoundError",
    "RunRecord",
]
