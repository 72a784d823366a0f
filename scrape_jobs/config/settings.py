"""Typed runtime settings with dotenv support and startup validation."""

import os
import shlex
import tempfile

from pydantic import AliasChoices, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_SEARCH_URL_TEMPLATE = "https://www.google.com/maps/search/{query}/"


class SettingsLoadError(RuntimeError):
    """Raised when runtime settings cannot be loaded or validated."""


def _config_default_artifact_directory() -> str:
    """Return the shared temp directory used when no artifact directory is configured.

    Returns:
        str: Absolute path under the system temp directory.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return os.path.join(tempfile.gettempdir(), "maps-scraper")


class AppSettings(BaseSettings):
    """Application settings for API runtime and scrape job supervision.

    Environment variable names map directly to field names in uppercase.
    Example: `frontend_url` reads from `FRONTEND_URL`. The listening port also
    accepts the conventional `PORT` variable.

    Attributes:
        environment_name: Runtime environment label.
        application_host: Host interface for web server binding.
        application_port: Web server port.
        frontend_url: Single origin allowed for cross-origin browser access.
        artifact_directory: Shared directory the worker writes result files into.
        artifact_pattern: Glob pattern selecting result files inside the directory.
        worker_command: Worker command line; the target URL is appended as last argument.
        search_url_template: URL template for plain search terms, `{query}` is replaced.
        artifact_retention_seconds: Age after which unclaimed artifacts are purged.
        sweep_interval_seconds: Delay between two retention sweeps.
        log_level: Root logging level name.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    environment_name: str = Field(default="development")
    application_host: str = Field(default="0.0.0.0")
    application_port: int = Field(
        default=4000,
        ge=1,
        le=65535,
        validation_alias=AliasChoices("application_port", "port"),
    )
    frontend_url: str = Field(default="http://localhost:5173")
    artifact_directory: str = Field(default_factory=_config_default_artifact_directory)
    artifact_pattern: str = Field(default="*.csv")
    worker_command: str = Field(default="node scrape-maps.js")
    search_url_template: str = Field(default=DEFAULT_SEARCH_URL_TEMPLATE)
    artifact_retention_seconds: float = Field(default=3600.0, gt=0)
    sweep_interval_seconds: float = Field(default=600.0, gt=0)
    log_level: str = Field(default="INFO")

    @field_validator("frontend_url", "artifact_directory", "artifact_pattern", "worker_command")
    @classmethod
    def _validate_non_empty_string(cls, value: str) -> str:
        stripped_value = value.strip()
        if not stripped_value:
            raise ValueError("value must not be blank")
        return stripped_value

    @field_validator("search_url_template")
    @classmethod
    def _validate_search_template(cls, value: str) -> str:
        stripped_value = value.strip()
        if "{query}" not in stripped_value:
            raise ValueError("search_url_template must contain a {query} placeholder")
        return stripped_value

    @field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        normalized_value = value.strip().upper()
        if normalized_value not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unsupported log_level={value}")
        return normalized_value

    def settings_worker_argv(self) -> list[str]:
        """Split the configured worker command into an argument vector.

        Returns:
            list[str]: Worker executable followed by its fixed arguments.

        Raises:
            ValueError: Raised when the command splits into no arguments.
        """

        worker_argv = shlex.split(self.worker_command)
        if not worker_argv:
            raise ValueError("worker_command must contain an executable")
        return worker_argv


def config_load_settings() -> AppSettings:
    """Load and validate runtime settings from environment and dotenv.

    Returns:
        AppSettings: Validated runtime settings object.

    Raises:
        SettingsLoadError: Raised when settings are invalid.
    """

    try:
        return AppSettings()
    except ValidationError as error:
        raise SettingsLoadError(
            f"Startup configuration validation failed. Update .env or environment variables. Details: {error}"
        ) from error
