"""HTTP API for pushci: webhook intake and run log retrieval."""

from pushci.api.app import app, create_app
from pushci.api.models import APIResponse, PushPayload, RunRecordResponse, WebhookResponse

__all__ = [
    "APIResponse",
    "PushPayload",
    "RunRecordResponse",
    "WebhookResponse",
    "app",
    "create_app",
]
