"""Tests for runtime settings defaults, aliases and validation."""

import pytest

from scrape_jobs.config import AppSettings, SettingsLoadError, config_load_settings


def test_config_settings_defaults_match_service_contract(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide usable defaults when nothing is configured.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when defaults drift.
    """

    for variable in ("PORT", "APPLICATION_PORT", "FRONTEND_URL", "WORKER_COMMAND", "ARTIFACT_DIRECTORY"):
        monkeypatch.delenv(variable, raising=False)

    settings = AppSettings(_env_file=None)

    assert settings.application_port == 4000
    assert settings.frontend_url == "http://localhost:5173"
    assert settings.artifact_pattern == "*.csv"
    assert settings.artifact_directory.endswith("maps-scraper")
    assert settings.settings_worker_argv() == ["node", "scrape-maps.js"]


def test_config_settings_reads_port_and_frontend_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Honor the conventional PORT and FRONTEND_URL variables."""

    monkeypatch.setenv("PORT", "8123")
    monkeypatch.setenv("FRONTEND_URL", "https://app.example.test")

    settings = config_load_settings()

    assert settings.application_port == 8123
    assert settings.frontend_url == "https://app.example.test"


def test_config_settings_splits_quoted_worker_command() -> None:
    """Split the worker command like a shell would."""

    settings = AppSettings(_env_file=None, worker_command='"/opt/my tools/node" scrape-maps.js --headless')

    assert settings.settings_worker_argv() == ["/opt/my tools/node", "scrape-maps.js", "--headless"]


def test_config_settings_normalizes_log_level() -> None:
    """Accept lower-case level names."""

    assert AppSettings(_env_file=None, log_level="debug").log_level == "DEBUG"


def test_config_load_settings_wraps_validation_errors(monkeypatch: pytest.MonkeyPatch) -> None:
    """Convert invalid environment values into SettingsLoadError.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when invalid settings are accepted.
    """

    monkeypatch.setenv("SEARCH_URL_TEMPLATE", "https://maps.example.test/search/")

    with pytest.raises(SettingsLoadError, match="Startup configuration validation failed"):
        config_load_settings()


def test_config_load_settings_rejects_blank_worker_command(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reject a blank worker command."""

    monkeypatch.setenv("WORKER_COMMAND", "   ")

    with pytest.raises(SettingsLoadError):
        config_load_settings()
