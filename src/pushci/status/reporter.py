"""StatusReporter - posts commit statuses to the GitHub API."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

import httpx

from pushci.status.exceptions import RemoteRejectedError

if TYPE_CHECKING:
    from pushci.status.models import CommitStatus
    from pushci.status.token import TokenProvider

logger = logging.getLogger("pushci.status")

DEFAULT_TIMEOUT = 30.0


class StatusReporter:
    """Reports commit statuses through ``POST /repos/{owner}/{repo}/statuses/{sha}``.

    The token is not needed until the first report, so constructing a
    reporter never fails on missing credentials.
    """

    def __init__(
        self,
        token_provider: TokenProvider,
        base_url: str = "https://api.github.com",
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the Status Reporter.

        Args:
            token_provider: Source of the GitHub token.
            base_url: GitHub API base URL (for testing/enterprise).
            timeout: Seconds before an API call gives up.
        """
        self.token_provider = token_provider
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client: httpx.Client | None = None
        self._client_lock = threading.Lock()

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client for the GitHub API."""
        with self._client_lock:
            if self._client is None:
                token = self.token_provider.get_token()
                self._client = httpx.Client(
                    base_url=self.base_url,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Accept": "application/vnd.github+json",
                        "X-GitHub-Api-Version": "2022-11-28",
                    },
                    timeout=self.timeout,
                )
            return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        with self._client_lock:
            if self._client is not None:
                self._client.close()
                self._client = None

    def report(self, owner: str, repo: str, sha: str, status: CommitStatus) -> None:
        """Attach a status to a commit.

        Args:
            owner: Repository owner.
            repo: Repository name.
            sha: Commit SHA.
            status: Status to attach.

        Raises:
            TokenError: If no GitHub token is configured.
            RemoteRejectedError: If the API answers with anything but 200/201,
                or cannot be reached.
        """
        logger.info(
            "Reporting %s for %s/%s@%s: %s",
            status.state.value,
            owner,
            repo,
            sha[:12],
            status.description,
        )
        try:
            response = self.client.post(
                f"/repos/{owner}/{repo}/statuses/{sha}",
                json=status.to_payload(),
            )
        except httpx.HTTPError as e:
            logger.error("Commit status request for %s/%s failed: %s", owner, repo, e)
            raise RemoteRejectedError(None, f"Commit status request failed: {e}") from e

        if response.status_code not in (200, 201):
            logger.error(
                "Commit status rejected for %s/%s@%s: %s - %s",
                owner,
                repo,
                sha[:12],
                response.status_code,
                response.text,
            )
            raise RemoteRejectedError(
                response.status_code,
                f"Commit status rejected: {response.status_code} - {response.text}",
            )
        logger.info("Reported %s for %s/%s@%s", status.state.value, owner, repo, sha[:12])
