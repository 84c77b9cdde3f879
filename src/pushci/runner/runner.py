"""Process runner - spawns an external command and classifies the outcome."""

from __future__ import annotations

import logging
import os
import signal
import subprocess
import time
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from pushci.runner.models import CommandOutcome, OutcomeKind

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger("pushci.runner")


class ProcessRunner(Protocol):
    """Interface for running an external command to completion."""

    def run(
        self,
        working_directory: str | Path,
        command: Sequence[str],
        timeout: float,
    ) -> CommandOutcome:
        """Run ``command`` in ``working_directory`` and classify the result."""
        ...


def _decode(data: bytes | None) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


class SubprocessRunner:
    """Runs commands with the subprocess module.

    stdout and stderr are merged into one stream and captured in full before
    ``run`` returns. Each call is a single attempt; there are no retries.
    """

    def run(
        self,
        working_directory: str | Path,
        command: Sequence[str],
        timeout: float,
    ) -> CommandOutcome:
        """Run a command to completion.

        Args:
            working_directory: Directory the process starts in.
            command: Program and arguments.
            timeout: Seconds before the process is killed.

        Returns:
            CommandOutcome: SUCCESS on exit 0, FAILURE on nonzero exit, ERROR if
            the command could not be started, timed out, or its output could not
            be read.
        """
        cmd = [str(part) for part in command]
        logger.info("Running %s in %s (timeout=%ss)", cmd, working_directory, timeout)
        started = time.monotonic()

        try:
            process = subprocess.Popen(
                cmd,
                cwd=working_directory,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                # own process group so a timeout also kills grandchildren
                start_new_session=os.name == "posix",
            )
        except FileNotFoundError as e:
            logger.error("Command or working directory not found: %s", e)
            return CommandOutcome.error(
                f"Command not found: {e}", duration_seconds=time.monotonic() - started
            )
        except OSError as e:
            logger.error("Failed to start %s: %s", cmd[0] if cmd else cmd, e)
            return CommandOutcome.error(
                f"Failed to start command: {e}", duration_seconds=time.monotonic() - started
            )

        try:
            output, _ = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            self._kill(process)
            output, _ = process.communicate()
            elapsed = time.monotonic() - started
            logger.error("Command %s timed out after %ss", cmd, timeout)
            return CommandOutcome.error(
                f"Command timed out after {timeout} seconds",
                log=_decode(output),
                duration_seconds=elapsed,
            )
        except OSError as e:
            self._kill(process)
            process.wait()
            logger.error("Failed to capture output of %s: %s", cmd, e)
            return CommandOutcome.error(
                f"Failed to capture output: {e}", duration_seconds=time.monotonic() - started
            )

        elapsed = time.monotonic() - started
        kind = OutcomeKind.SUCCESS if process.returncode == 0 else OutcomeKind.FAILURE
        logger.info(
            "Command %s finished with exit code %d (%s) in %.1fs",
            cmd,
            process.returncode,
            kind.value,
            elapsed,
        )
        return CommandOutcome(
            kind=kind,
            log=_decode(output),
            exit_code=process.returncode,
            duration_seconds=elapsed,
        )

    @staticmethod
    def _kill(process: subprocess.Popen[bytes]) -> None:
        """Forcibly terminate a process and its process group."""
        if os.name == "posix":
            try:
                os.killpg(process.pid, signal.SIGKILL)
                return
            except ProcessLookupError:
                return
            except PermissionError:
                pass
        process.kill()
