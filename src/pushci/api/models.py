"""Pydantic models for the HTTP API."""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from pushci.archive import RunRecord

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


# Webhook payload


class RepositoryPayload(BaseModel):
    """The ``repository`` object of a GitHub push payload."""

    model_config = ConfigDict(extra="ignore")

    full_name: str = Field(..., min_length=1)
    clone_url: str = Field(..., min_length=1)


class PushPayload(BaseModel):
    """The parts of a GitHub push payload the pipeline uses."""

    model_config = ConfigDict(extra="ignore")

    ref: str
    after: str = Field(..., min_length=1)
    deleted: bool = False
    repository: RepositoryPayload


class WebhookResponse(BaseModel):
    """Response to a webhook delivery."""

    accepted: bool
    message: str
    repository: str | None = None
    commit: str | None = None


# Log retrieval


class RepositoryListResponse(BaseModel):
    """Repositories that have archived runs."""

    repositories: list[str]


class RunListResponse(BaseModel):
    """Archived runs of one repository, newest first."""

    repository: str
    timestamps: list[str]


class RunRecordResponse(BaseModel):
    """One archived run."""

    timestamp: datetime
    commit_sha: str
    build_status: str
    build_log: str
    test_status: str
    test_log: str


def run_record_to_response(record: RunRecord) -> RunRecordResponse:
    """Convert a RunRecord to RunRecordResponse."""
    return RunRecordResponse(
        timestamp=record.timestamp,
        commit_sha=record.commit_sha,
        build_status=record.build_status,
        build_log=record.build_log,
        test_status=record.test_status,
        test_log=record.test_log,
    )


class HealthResponse(BaseModel):
    """Server liveness."""

    status: str
    active_pipelines: int
