"""Command runner - runs external processes and classifies their outcome."""

from pushci.runner.models import CommandOutcome, OutcomeKind
from pushci.runner.runner import ProcessRunner, SubprocessRunner

__all__ = [
    "CommandOutcome",
    "OutcomeKind",
    "ProcessRunner",
    "SubprocessRunner",
]
