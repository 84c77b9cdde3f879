"""Repository name and branch ref validation.

This is the only place that decides whether an externally supplied
``owner/name`` string is safe to turn into a filesystem path. Both the
workspace manager and the log archiver go through ``parse_repo_full_name``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from pushci.exceptions import InvalidNameError, ValidationError

BRANCH_REF_PREFIX = "refs/heads/"

_SEGMENT_PATTERN = re.compile(r"[A-Za-z0-9._-]+")


@dataclass(frozen=True)
class RepoName:
    """A validated ``owner/name`` repository identifier."""

    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def resolve_under(self, root: str | Path) -> Path:
        """Return ``root/owner/name``."""
        return Path(root) / self.owner / self.name

    def __str__(self) -> str:
        return self.full_name


def _check_segment(segment: str, full_name: str) -> None:
    if segment in ("", ".", ".."):
        raise InvalidNameError(f"Invalid repository name part in {full_name!r}")
    if not _SEGMENT_PATTERN.fullmatch(segment):
        raise InvalidNameError(f"Invalid repository name part in {full_name!r}")
    # git would read a leading dash as an option
    if segment.startswith("-"):
        raise InvalidNameError(f"Repository name part starts with '-' in {full_name!r}")


def parse_repo_full_name(full_name: str) -> RepoName:
    """Validate an ``owner/name`` string.

    Args:
        full_name: Repository identifier as delivered by the webhook.

    Returns:
        The validated RepoName.

    Raises:
        InvalidNameError: If the name is not exactly two path-safe segments.
    """
    if not isinstance(full_name, str) or not full_name:
        raise InvalidNameError("Repository name cannot be blank")
    segments = full_name.split("/")
    if len(segments) != 2:
        raise InvalidNameError(f"Repository name must be 'owner/name': {full_name!r}")
    for segment in segments:
        _check_segment(segment, full_name)
    return RepoName(owner=segments[0], name=segments[1])


def branch_from_ref(ref: str) -> str:
    """Strip the ``refs/heads/`` prefix from a push ref.

    The prefix is only removed from the start of the string, so a branch such
    as ``feature/refs/heads/x`` keeps its name intact.

    Raises:
        ValidationError: If the ref is not a branch ref, names no branch, or the
            branch starts with "-".
    """
    if not ref or not ref.startswith(BRANCH_REF_PREFIX):
        raise ValidationError(f"Not a branch ref: {ref!r}")
    branch = ref.removeprefix(BRANCH_REF_PREFIX)
    if not branch.strip():
        raise ValidationError(f"Branch ref names no branch: {ref!r}")
    if branch.startswith("-"):
        raise ValidationError(f"Branch name starts with '-': {ref!r}")
    return branch
