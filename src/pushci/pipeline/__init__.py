"""Pipeline Orchestrator - the push-to-status state machine."""

from pushci.pipeline.exceptions import PipelineError, ReportFailedError, StageFailedError
from pushci.pipeline.locks import RepoLocks
from pushci.pipeline.models import PipelineResult, PipelineState, PushEvent
from pushci.pipeline.orchestrator import Orchestrator

__all__ = [
    "Orchestrator",
    "PipelineError",
    "PipelineResult",
    "PipelineState",
    "PushEvent",
    "ReportFailedError",
    "RepoLocks",
    "StageFailedError",
]
