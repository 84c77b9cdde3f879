"""GitHub token loading."""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from pushci.status.exceptions import TokenError

logger = logging.getLogger("pushci.status.token")

TOKEN_PROPERTY = "GITHUB_TOKEN"


def read_properties(path: str | Path) -> dict[str, str]:
    """Read a simple ``KEY=VALUE`` properties file.

    Blank lines and lines starting with ``#`` or ``!`` are skipped. ``:`` is
    accepted as a separator as well as ``=``.
    """
    properties: dict[str, str] = {}
    for raw_line in Path(path).read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue
        positions = [i for i in (line.find("="), line.find(":")) if i != -1]
        if not positions:
            properties[line] = ""
            continue
        sep = min(positions)
        properties[line[:sep].strip()] = line[sep + 1 :].strip()
    return properties


class TokenProvider:
    """Loads the GitHub token once, on first use, and caches it.

    The GITHUB_TOKEN environment variable wins over the config file.
    """

    def __init__(self, config_file: str | Path = "config.properties") -> None:
        self.config_file = Path(config_file)
        self._token: str | None = None
        self._lock = threading.Lock()

    def get_token(self) -> str:
        """Return the cached token, loading it on the first call.

        Raises:
            TokenError: If no non-blank token is configured.
        """
        with self._lock:
            if self._token is None:
                self._token = self._load()
            return self._token

    def _load(self) -> str:
        token = os.environ.get(TOKEN_PROPERTY, "").strip()
        if token:
            logger.info("Using GitHub token from environment")
            return token

        try:
            properties = read_properties(self.config_file)
        except FileNotFoundError as e:
            raise TokenError(
                f"{TOKEN_PROPERTY} not set and config file {self.config_file} not found"
            ) from e
        except OSError as e:
            raise TokenError(f"Could not read config file {self.config_file}: {e}") from e

        token = properties.get(TOKEN_PROPERTY, "").strip()
        if not token:
            raise TokenError(f"{TOKEN_PROPERTY} is not set in {self.config_file}")
        logger.info("Loaded GitHub token from %s", self.config_file)
        return token
