"""Endpoints for archived run records."""

from fastapi import APIRouter

from pushci.api.dependencies import ArchiverDep
from pushci.api.models import (
    APIResponse,
    RepositoryListResponse,
    RunListResponse,
    RunRecordResponse,
    run_record_to_response,
)

router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=APIResponse[RepositoryListResponse])
def list_repositories(archiver: ArchiverDep) -> APIResponse[RepositoryListResponse]:
    """List repositories that have archived runs."""
    return APIResponse(data=RepositoryListResponse(repositories=archiver.list_namespaces()))


@router.get("/{owner}/{name}", response_model=APIResponse[RunListResponse])
def list_runs(owner: str, name: str, archiver: ArchiverDep) -> APIResponse[RunListResponse]:
    """List archived runs of a repository, newest first."""
    namespace = f"{owner}/{name}"
    timestamps = archiver.list_records(namespace)
    return APIResponse(data=RunListResponse(repository=namespace, timestamps=timestamps))


@router.get("/{owner}/{name}/{timestamp}", response_model=APIResponse[RunRecordResponse])
def get_run(
    owner: str, name: str, timestamp: str, archiver: ArchiverDep
) -> APIResponse[RunRecordResponse]:
    """Get one archived run by its locator."""
    record = archiver.lookup(f"{owner}/{name}/{timestamp}")
    return APIResponse(data=run_record_to_response(record))
