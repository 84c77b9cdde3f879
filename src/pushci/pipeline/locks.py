"""Per-repository locks."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator

logger = logging.getLogger("pushci.pipeline")


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class RepoLocks:
    """Registry of one lock per repository.

    Runs for the same repository share a workspace path, so they must not
    overlap. Runs for different repositories proceed independently.

    An entry exists only while some run holds or waits for it, so the registry
    never holds more entries than there are pipelines in flight.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        """Hold the repository's lock for the duration of the block."""
        with self._guard:
            entry = self._entries.setdefault(key, _Entry())
            entry.users += 1
        try:
            if not entry.lock.acquire(blocking=False):
                logger.info("Waiting for running pipeline on %s to finish", key)
                entry.lock.acquire()
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            with self._guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._entries[key]

    def is_held(self, key: str) -> bool:
        """Whether a run currently holds the repository's lock."""
        with self._guard:
            entry = self._entries.get(key)
            return entry is not None and entry.lock.locked()

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)
