"""Runtime configuration for pushci.

Settings are read from ``PUSHCI_*`` environment variables with defaults that
match a Gradle project served on localhost.
"""

from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Mapping

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8019
DEFAULT_WORKSPACE_ROOT = "workspace/repos"
DEFAULT_ARCHIVE_ROOT = "logs"
DEFAULT_CONFIG_FILE = "config.properties"
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_STATUS_CONTEXT = "continuous integration"
DEFAULT_BUILD_COMMAND = "./gradlew build -x test --no-daemon"
DEFAULT_TEST_COMMAND = "./gradlew test"
DEFAULT_BUILD_TIMEOUT = 600.0
DEFAULT_TEST_TIMEOUT = 600.0
DEFAULT_GIT_TIMEOUT = 300.0
DEFAULT_HTTP_TIMEOUT = 30.0


class ConfigError(Exception):
    """Raised when configuration values are invalid."""


def _get_float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from e
    if value <= 0:
        raise ConfigError(f"{key} must be positive, got {raw!r}")
    return value


def _get_int(env: Mapping[str, str], key: str, default: int) -> int:
    raw = env.get(key)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from e


def _get_command(env: Mapping[str, str], key: str, default: str) -> list[str]:
    raw = env.get(key) or default
    command = shlex.split(raw)
    if not command:
        raise ConfigError(f"{key} must not be empty")
    return command


@dataclass
class Settings:
    """pushci server settings.

    Attributes:
        host: Interface the HTTP server binds to.
        port: Port the HTTP server listens on.
        workspace_root: Directory under which repositories are cloned.
        archive_root: Directory under which run records are stored.
        config_file: Key-value file holding the GITHUB_TOKEN property.
        public_url: Base URL of this server, used for commit status links.
        github_api_url: GitHub REST API base URL.
        status_context: Context label attached to every commit status.
        build_command: Build command, run in the checkout.
        test_command: Test command, run in the checkout after a good build.
        build_timeout: Seconds before the build command is killed.
        test_timeout: Seconds before the test command is killed.
        git_timeout: Seconds before a git clone/checkout is killed.
        http_timeout: Seconds before a GitHub API call gives up.
    """

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    workspace_root: Path = field(default_factory=lambda: Path(DEFAULT_WORKSPACE_ROOT))
    archive_root: Path = field(default_factory=lambda: Path(DEFAULT_ARCHIVE_ROOT))
    config_file: Path = field(default_factory=lambda: Path(DEFAULT_CONFIG_FILE))
    public_url: str = f"http://localhost:{DEFAULT_PORT}"
    github_api_url: str = DEFAULT_GITHUB_API_URL
    status_context: str = DEFAULT_STATUS_CONTEXT
    build_command: list[str] = field(default_factory=lambda: shlex.split(DEFAULT_BUILD_COMMAND))
    test_command: list[str] = field(default_factory=lambda: shlex.split(DEFAULT_TEST_COMMAND))
    build_timeout: float = DEFAULT_BUILD_TIMEOUT
    test_timeout: float = DEFAULT_TEST_TIMEOUT
    git_timeout: float = DEFAULT_GIT_TIMEOUT
    http_timeout: float = DEFAULT_HTTP_TIMEOUT

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> Settings:
        """Build settings from PUSHCI_* environment variables.

        Args:
            env: Mapping to read from. Defaults to os.environ.

        Raises:
            ConfigError: If a numeric value or command is invalid.
        """
        if env is None:
            env = os.environ
        port = _get_int(env, "PUSHCI_PORT", DEFAULT_PORT)
        return cls(
            host=env.get("PUSHCI_HOST", DEFAULT_HOST),
            port=port,
            workspace_root=Path(env.get("PUSHCI_WORKSPACE_ROOT", DEFAULT_WORKSPACE_ROOT)),
            archive_root=Path(env.get("PUSHCI_ARCHIVE_ROOT", DEFAULT_ARCHIVE_ROOT)),
            config_file=Path(env.get("PUSHCI_CONFIG_FILE", DEFAULT_CONFIG_FILE)),
            public_url=env.get("PUSHCI_PUBLIC_URL", f"http://localhost:{port}").rstrip("/"),
            github_api_url=env.get("PUSHCI_GITHUB_API_URL", DEFAULT_GITHUB_API_URL),
            status_context=env.get("PUSHCI_STATUS_CONTEXT", DEFAULT_STATUS_CONTEXT),
            build_command=_get_command(env, "PUSHCI_BUILD_COMMAND", DEFAULT_BUILD_COMMAND),
            test_command=_get_command(env, "PUSHCI_TEST_COMMAND", DEFAULT_TEST_COMMAND),
            build_timeout=_get_float(env, "PUSHCI_BUILD_TIMEOUT", DEFAULT_BUILD_TIMEOUT),
            test_timeout=_get_float(env, "PUSHCI_TEST_TIMEOUT", DEFAULT_TEST_TIMEOUT),
            git_timeout=_get_float(env, "PUSHCI_GIT_TIMEOUT", DEFAULT_GIT_TIMEOUT),
            http_timeout=_get_float(env, "PUSHCI_HTTP_TIMEOUT", DEFAULT_HTTP_TIMEOUT),
        )
