"""WorkspaceManager - local checkouts of pushed repositories."""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import TYPE_CHECKING

from pushci.exceptions import ValidationError
from pushci.logging import sanitize_for_log, truncate_output
from pushci.naming import parse_repo_full_name
from pushci.runner import OutcomeKind
from pushci.workspace.exceptions import (
    CheckoutError,
    CloneError,
    NotARepositoryError,
    WorkspaceDeleteError,
    WorkspaceNotFoundError,
)

if TYPE_CHECKING:
    from pushci.runner import CommandOutcome, ProcessRunner

logger = logging.getLogger("pushci.workspace")

DEFAULT_GIT_TIMEOUT = 300.0


def _describe(outcome: CommandOutcome) -> str:
    if outcome.kind is OutcomeKind.ERROR:
        return outcome.message or "command error"
    return f"exit code {outcome.exit_code}"


class WorkspaceManager:
    """Maps repositories to directories under a root and manages their lifecycle.

    A repository ``owner/name`` always lives at ``root/owner/name``. Callers must
    hold the repository's lock while a workspace is in use, since two runs for
    the same repository share that path.
    """

    def __init__(self, runner: ProcessRunner, git_timeout: float = DEFAULT_GIT_TIMEOUT) -> None:
        """Initialize the Workspace Manager.

        Args:
            runner: Process runner used for git commands.
            git_timeout: Seconds allowed for each git command.
        """
        self.runner = runner
        self.git_timeout = git_timeout

    @staticmethod
    def workspace_path(root_dir: str | Path, repo_full_name: str) -> Path:
        """Compute the workspace directory for a repository.

        Raises:
            InvalidNameError: If the repository name is not path-safe.
        """
        return parse_repo_full_name(repo_full_name).resolve_under(root_dir)

    def prepare(self, root_dir: str | Path, repo_full_name: str, clone_url: str) -> Path:
        """Clone a repository into a fresh workspace.

        Any directory left at the target path by an earlier run is deleted first.

        Args:
            root_dir: Workspace root.
            repo_full_name: Repository in "owner/name" format.
            clone_url: URL passed to git clone.

        Returns:
            Path of the cloned repository.

        Raises:
            InvalidNameError: If the repository name is not path-safe. Nothing
                on disk is touched in that case.
            ValidationError: If the clone URL is blank.
            CloneError: If git clone fails.
        """
        local_path = self.workspace_path(root_dir, repo_full_name)
        if not clone_url or not clone_url.strip():
            raise ValidationError("clone_url cannot be blank")

        if local_path.exists() or local_path.is_symlink():
            logger.info("Stale workspace found at %s, deleting it", local_path)
            self.destroy(local_path)

        local_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info("Cloning %s into %s", sanitize_for_log(clone_url), local_path)
        outcome = self.runner.run(
            local_path.parent,
            ["git", "clone", "--", clone_url, local_path.name],
            self.git_timeout,
        )
        if not outcome.succeeded:
            logger.error(
                "git clone of %s failed (%s): %s",
                repo_full_name,
                _describe(outcome),
                sanitize_for_log(truncate_output(outcome.log, 2000)),
            )
            raise CloneError(f"git clone of '{repo_full_name}' failed: {_describe(outcome)}")
        logger.info("Cloned %s", repo_full_name)
        return local_path

    def checkout(self, local_path: str | Path, branch_name: str) -> None:
        """Check out a branch in an existing clone.

        Args:
            local_path: Path of the cloned repository.
            branch_name: Branch to switch to.

        Raises:
            ValidationError: If the branch name is blank or starts with "-".
            NotARepositoryError: If local_path has no .git marker.
            CheckoutError: If git checkout fails.
        """
        if not branch_name or not branch_name.strip():
            raise ValidationError("branch_name cannot be blank")
        if branch_name.startswith("-"):
            raise ValidationError(f"branch_name cannot start with '-': {branch_name!r}")
        local_path = Path(local_path)
        if not (local_path / ".git").exists():
            raise NotARepositoryError(f"Directory is not a git repository: {local_path}")

        logger.info("Checking out %s in %s", branch_name, local_path)
        outcome = self.runner.run(
            local_path, ["git", "checkout", branch_name, "--"], self.git_timeout
        )
        if not outcome.succeeded:
            logger.error(
                "git checkout %s failed (%s): %s",
                branch_name,
                _describe(outcome),
                truncate_output(outcome.log, 2000),
            )
            raise CheckoutError(f"git checkout of '{branch_name}' failed: {_describe(outcome)}")
        logger.info("Checked out %s", branch_name)

    def destroy(self, local_path: str | Path, missing_ok: bool = False) -> None:
        """Delete a workspace directory tree.

        Files are removed before the directories that hold them (post-order),
        and removal continues past individual failures so whatever can be
        deleted is deleted.

        Args:
            local_path: Directory to delete.
            missing_ok: Return quietly if the directory does not exist.

        Raises:
            WorkspaceNotFoundError: If the directory is absent and missing_ok is False.
            WorkspaceDeleteError: If the path is not a directory or some entries
                could not be removed.
        """
        local_path = Path(local_path)
        if local_path.is_symlink():
            try:
                local_path.unlink()
            except OSError as e:
                raise WorkspaceDeleteError(f"Failed to remove symlink {local_path}: {e}") from e
            return
        if not local_path.exists():
            if missing_ok:
                return
            raise WorkspaceNotFoundError(f"Workspace directory does not exist: {local_path}")
        if not local_path.is_dir():
            raise WorkspaceDeleteError(f"Path is not a directory: {local_path}")

        failures: list[tuple[str, OSError]] = []
        for dirpath, dirnames, filenames in os.walk(local_path, topdown=False):
            for filename in filenames:
                self._remove(os.path.join(dirpath, filename), failures, is_dir=False)
            for dirname in dirnames:
                path = os.path.join(dirpath, dirname)
                # os.walk lists symlinks to directories here without descending
                self._remove(path, failures, is_dir=not os.path.islink(path))
        self._remove(str(local_path), failures, is_dir=True)

        if failures:
            path, error = failures[0]
            logger.error("Could not remove %d entries under %s", len(failures), local_path)
            raise WorkspaceDeleteError(
                f"Failed to delete {len(failures)} entries under {local_path}; "
                f"first: {path}: {error}"
            )
        logger.info("Deleted workspace %s", local_path)

    @staticmethod
    def _remove(path: str, failures: list[tuple[str, OSError]], is_dir: bool) -> None:
        remove = os.rmdir if is_dir else os.unlink
        try:
            remove(path)
        except PermissionError:
            # git marks object files read-only
            try:
                os.chmod(path, stat.S_IWRITE | stat.S_IREAD | (stat.S_IEXEC if is_dir else 0))
                remove(path)
            except OSError as e:
                failures.append((path, e))
        except FileNotFoundError:
            pass
        except OSError as e:
            failures.append((path, e))
