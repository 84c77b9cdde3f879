"""Exceptions for the Pipeline Orchestrator."""

from pushci.exceptions import PushCIError


class PipelineError(PushCIError):
    """Base exception for pipeline errors."""


class StageFailedError(PipelineError):
    """A workspace stage failed and the run cannot continue."""


class ReportFailedError(PipelineError):
    """GitHub did not accept a commit status."""
