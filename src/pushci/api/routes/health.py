"""Health check endpoint."""

from fastapi import APIRouter

from pushci.api.models import APIResponse, HealthResponse
from pushci.api.worker import active_pipeline_count

router = APIRouter(tags=["health"])


@router.get("/health", response_model=APIResponse[HealthResponse])
def health() -> APIResponse[HealthResponse]:
    """Report that the server is up."""
    return APIResponse(data=HealthResponse(status="ok", active_pipelines=active_pipeline_count()))
