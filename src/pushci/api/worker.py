"""Background threads that run pipelines for accepted pushes."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pushci.pipeline import Orchestrator, PipelineResult, PushEvent

logger = logging.getLogger("pushci.api.worker")

# Pipeline threads that have not finished yet
_active_threads: set[threading.Thread] = set()
_active_lock = threading.Lock()


def run_pipeline_sync(orchestrator: Orchestrator, event: PushEvent) -> PipelineResult | None:
    """Run one pipeline, logging anything it raises.

    This is the body of each pipeline thread.
    """
    try:
        return orchestrator.run(event)
    except Exception:
        logger.exception(
            "Pipeline thread failed for %s@%s", event.repo_full_name, event.short_sha
        )
        return None
    finally:
        with _active_lock:
            _active_threads.discard(threading.current_thread())


def start_pipeline_thread(orchestrator: Orchestrator, event: PushEvent) -> threading.Thread:
    """Run a pipeline on its own daemon thread.

    Args:
        orchestrator: Orchestrator that runs the pipeline.
        event: The accepted push.

    Returns:
        The started thread.
    """
    thread = threading.Thread(
        target=run_pipeline_sync,
        args=(orchestrator, event),
        name=f"pipeline-{event.repo_full_name}-{event.short_sha}",
        daemon=True,
    )
    with _active_lock:
        _active_threads.add(thread)
    thread.start()
    logger.info("Started pipeline thread %s", thread.name)
    return thread


def active_pipeline_count() -> int:
    """Number of pipeline threads still running."""
    with _active_lock:
        return len(_active_threads)
