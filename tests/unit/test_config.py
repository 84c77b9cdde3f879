"""Unit tests for Settings."""

from pathlib import Path

import pytest

from pushci.config import ConfigError, Settings


@pytest.mark.unit
class TestSettingsFromEnv:
    """Tests for Settings.from_env."""

    def test_defaults(self) -> None:
        """An empty environment yields the documented defaults."""
        settings = Settings.from_env({})

        assert settings.host == "0.0.0.0"
        assert settings.port == 8019
        assert settings.workspace_root == Path("workspace/repos")
        assert settings.archive_root == Path("logs")
        assert settings.config_file == Path("config.properties")
        assert settings.public_url == "http://localhost:8019"
        assert settings.github_api_url == "https://api.github.com"
        assert settings.status_context == "continuous integration"
        assert settings.build_command == ["./gradlew", "build", "-x", "test", "--no-daemon"]
        assert settings.test_command == ["./gradlew", "test"]
        assert settings.build_timeout == 600.0
        assert settings.git_timeout == 300.0
        assert settings.http_timeout == 30.0

    def test_overrides(self) -> None:
        """PUSHCI_* variables override the defaults."""
        settings = Settings.from_env(
            {
                "PUSHCI_PORT": "9000",
                "PUSHCI_WORKSPACE_ROOT": "/srv/ci/work",
                "PUSHCI_PUBLIC_URL": "https://ci.example.com/",
                "PUSHCI_BUILD_COMMAND": "make -j4 'all targets'",
                "PUSHCI_TEST_TIMEOUT": "45.5",
            }
        )

        assert settings.port == 9000
        assert settings.workspace_root == Path("/srv/ci/work")
        assert settings.public_url == "https://ci.example.com"
        assert settings.build_command == ["make", "-j4", "all targets"]
        assert settings.test_timeout == 45.5

    def test_public_url_follows_port(self) -> None:
        """Without PUSHCI_PUBLIC_URL the link base uses the configured port."""
        settings = Settings.from_env({"PUSHCI_PORT": "8080"})

        assert settings.public_url == "http://localhost:8080"

    def test_blank_numeric_uses_default(self) -> None:
        settings = Settings.from_env({"PUSHCI_BUILD_TIMEOUT": "  "})

        assert settings.build_timeout == 600.0

    @pytest.mark.parametrize(
        ("key", "value"),
        [
            ("PUSHCI_PORT", "eighty"),
            ("PUSHCI_BUILD_TIMEOUT", "soon"),
            ("PUSHCI_GIT_TIMEOUT", "0"),
            ("PUSHCI_HTTP_TIMEOUT", "-5"),
        ],
    )
    def test_invalid_numbers_raise(self, key: str, value: str) -> None:
        with pytest.raises(ConfigError) as exc_info:
            Settings.from_env({key: value})

        assert key in str(exc_info.value)

    def test_whitespace_command_raises(self) -> None:
        with pytest.raises(ConfigError):
            Settings.from_env({"PUSHCI_TEST_COMMAND": "   "})
