"""Webhook endpoint for GitHub push deliveries."""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Body, Header, HTTPException, Response, status
from pydantic import ValidationError as PayloadValidationError

from pushci.api.dependencies import OrchestratorDep
from pushci.api.models import APIResponse, PushPayload, WebhookResponse
from pushci.api.worker import start_pipeline_thread
from pushci.naming import BRANCH_REF_PREFIX, parse_repo_full_name
from pushci.pipeline import PushEvent

logger = logging.getLogger("pushci.api.webhook")

router = APIRouter(tags=["webhook"])


def _ignored(message: str) -> APIResponse[WebhookResponse]:
    logger.info("Ignoring webhook delivery: %s", message)
    return APIResponse(data=WebhookResponse(accepted=False, message=message))


@router.post(
    "/webhook",
    response_model=APIResponse[WebhookResponse],
    status_code=status.HTTP_202_ACCEPTED,
)
def receive_webhook(
    body: Annotated[dict[str, Any], Body()],
    response: Response,
    orchestrator: OrchestratorDep,
    x_github_event: Annotated[str | None, Header()] = None,
) -> APIResponse[WebhookResponse]:
    """Start a pipeline for a branch push.

    Deliveries for other events, tag pushes and branch deletions are
    acknowledged with 200 and otherwise ignored.
    """
    if x_github_event is not None and x_github_event != "push":
        response.status_code = status.HTTP_200_OK
        return _ignored(f"event '{x_github_event}' ignored")

    try:
        payload = PushPayload.model_validate(body)
    except PayloadValidationError as e:
        raise HTTPException(
            status_code=422,
            detail=f"Invalid push payload: {e.error_count()} error(s)",
        ) from e

    if payload.deleted:
        response.status_code = status.HTTP_200_OK
        return _ignored(f"deletion of {payload.ref} ignored")
    if not payload.ref.startswith(BRANCH_REF_PREFIX):
        response.status_code = status.HTTP_200_OK
        return _ignored(f"non-branch ref {payload.ref} ignored")

    # Raises InvalidNameError (400) before any thread is started
    repo = parse_repo_full_name(payload.repository.full_name)

    event = PushEvent(
        branch_ref=payload.ref,
        commit_sha=payload.after,
        repo_full_name=repo.full_name,
        clone_url=payload.repository.clone_url,
    )
    start_pipeline_thread(orchestrator, event)
    logger.info("Accepted push to %s@%s (%s)", repo, event.short_sha, event.branch_ref)
    return APIResponse(
        data=WebhookResponse(
            accepted=True,
            message="pipeline started",
            repository=repo.full_name,
            commit=event.commit_sha,
        )
    )
