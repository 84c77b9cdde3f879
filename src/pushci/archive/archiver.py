"""LogArchiver - stores run records as JSON files per repository."""

from __future__ import annotations

import json
import logging
import os
import re
import tempfile
from dataclasses import replace
from datetime import datetime, timedelta
from pathlib import Path

from pushci.archive.exceptions import (
    ArchiveReadError,
    ArchiveWriteError,
    InvalidLocatorError,
    RecordNotFoundError,
)
from pushci.archive.models import RunRecord
from pushci.exceptions import InvalidNameError
from pushci.naming import parse_repo_full_name

logger = logging.getLogger("pushci.archive")

RECORD_SUFFIX = ".json"

# ISO-8601 characters only; keeps separators and dot-segments out of paths
_TIMESTAMP_PATTERN = re.compile(r"[0-9T:.+\-]+")


class LogArchiver:
    """Persists run records under ``root/owner/name/<timestamp>.json``.

    A record's locator is ``owner/name/<timestamp>``. The repository part is
    validated by the same rule the workspace manager uses.
    """

    def __init__(self, root: str | Path = "logs") -> None:
        """Initialize the Log Archiver.

        Args:
            root: Archive root directory. Created on first write.
        """
        self.root = Path(root)

    def archive(self, namespace: str, record: RunRecord) -> str:
        """Write a run record.

        The record is serialized completely before anything touches disk, then
        written to a hidden temporary file and renamed into place, so readers
        never see a partial record. A record already stored under the same
        timestamp is never overwritten; the timestamp moves forward instead.

        Args:
            namespace: Repository in "owner/name" format.
            record: Record to store.

        Returns:
            Locator of the stored record.

        Raises:
            InvalidNameError: If the namespace is not path-safe.
            ArchiveWriteError: If the record could not be written.
        """
        repo = parse_repo_full_name(namespace)
        directory = repo.resolve_under(self.root)
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ArchiveWriteError(f"Could not create archive directory {directory}: {e}") from e

        while (directory / self._filename(record.timestamp)).exists():
            record = replace(record, timestamp=record.timestamp + timedelta(microseconds=1))

        payload = json.dumps(record.to_dict(), indent=2, ensure_ascii=False)
        target = directory / self._filename(record.timestamp)

        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=".", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as tmp:
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, target)
        except OSError as e:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
            logger.error("Failed to archive run for %s: %s", repo, e)
            raise ArchiveWriteError(f"Could not write run record {target}: {e}") from e

        locator = f"{repo.full_name}/{record.timestamp.isoformat()}"
        logger.info("Archived run record %s", locator)
        return locator

    def lookup(self, locator: str) -> RunRecord:
        """Load a run record by locator.

        Args:
            locator: "owner/name/<timestamp>", optionally with a ".json" suffix.

        Returns:
            The stored RunRecord.

        Raises:
            InvalidLocatorError: If the locator is malformed or escapes the archive root.
            RecordNotFoundError: If no record is stored under the locator.
            ArchiveReadError: If the stored file cannot be read or parsed.
        """
        path = self._resolve(locator)
        if not path.is_file():
            raise RecordNotFoundError(f"Run record not found: {locator}")
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return RunRecord.from_dict(data)
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error("Could not read run record %s: %s", path, e)
            raise ArchiveReadError(f"Could not read run record {locator}: {e}") from e

    def list_records(self, namespace: str) -> list[str]:
        """List record timestamps for a repository, newest first.

        Raises:
            InvalidNameError: If the namespace is not path-safe.
        """
        directory = parse_repo_full_name(namespace).resolve_under(self.root)
        if not directory.is_dir():
            return []
        stamps: list[tuple[datetime, str]] = []
        for entry in directory.iterdir():
            if entry.name.startswith(".") or entry.suffix != RECORD_SUFFIX or not entry.is_file():
                continue
            stamp = entry.name.removesuffix(RECORD_SUFFIX)
            try:
                stamps.append((datetime.fromisoformat(stamp), stamp))
            except ValueError:
                logger.warning("Ignoring unexpected file in archive: %s", entry)
        stamps.sort(reverse=True)
        return [stamp for _, stamp in stamps]

    def list_namespaces(self) -> list[str]:
        """List repositories that have an archive directory, sorted by name."""
        if not self.root.is_dir():
            return []
        namespaces = []
        for owner_dir in self.root.iterdir():
            if not owner_dir.is_dir():
                continue
            for repo_dir in owner_dir.iterdir():
                if not repo_dir.is_dir():
                    continue
                candidate = f"{owner_dir.name}/{repo_dir.name}"
                try:
                    parse_repo_full_name(candidate)
                except InvalidNameError:
                    continue
                namespaces.append(candidate)
        return sorted(namespaces)

    def _resolve(self, locator: str) -> Path:
        parts = locator.removesuffix(RECORD_SUFFIX).split("/")
        if len(parts) != 3:
            raise InvalidLocatorError(f"Locator must be 'owner/name/timestamp': {locator!r}")
        owner, name, stamp = parts
        try:
            repo = parse_repo_full_name(f"{owner}/{name}")
        except InvalidNameError as e:
            raise InvalidLocatorError(f"Invalid locator {locator!r}: {e}") from e
        if not _TIMESTAMP_PATTERN.fullmatch(stamp):
            raise InvalidLocatorError(f"Invalid timestamp in locator: {locator!r}")
        try:
            datetime.fromisoformat(stamp)
        except ValueError as e:
            raise InvalidLocatorError(f"Invalid timestamp in locator: {locator!r}") from e

        root = self.root.resolve()
        path = (repo.resolve_under(self.root) / (stamp + RECORD_SUFFIX)).resolve()
        if not path.is_relative_to(root):
            raise InvalidLocatorError(f"Locator resolves outside the archive: {locator!r}")
        return path

    @staticmethod
    def _filename(timestamp: datetime) -> str:
        return timestamp.isoformat() + RECORD_SUFFIX
