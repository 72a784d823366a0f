"""Tests for API health endpoint behavior.

These tests validate deterministic response behavior for healthy and
unusable artifact directory states.
"""

from pathlib import Path

from fastapi.testclient import TestClient

from scrape_jobs.api.application import create_api_application
from scrape_jobs.config import AppSettings
from scrape_jobs.domain import HealthStatus


class _HealthyArtifactStore:
    """Test double that simulates a writable artifact directory."""

    def store_directory(self) -> Path:
        """Return deterministic directory.

        Returns:
            Path: Store directory.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        return Path("/tmp/maps-scraper")

    def store_check_health(self) -> HealthStatus:
        """Return healthy store result.

        Returns:
            HealthStatus: Healthy store response.

        Raises:
            ConnectionError: Never raised by this test double.
        """

        return HealthStatus(status="ok", detail="artifact directory writable")


class _BrokenArtifactStore(_HealthyArtifactStore):
    """Test double that simulates a missing artifact directory."""

    def store_check_health(self) -> HealthStatus:
        """Raise deterministic connection error.

        Returns:
            HealthStatus: This method does not return.

        Raises:
            ConnectionError: Always raised by this test double.
        """

        raise ConnectionError("artifact directory missing: /tmp/maps-scraper")


class _SupervisorStub:
    """Minimal supervisor stub for API factory dependency injection."""

    def supervisor_live_job_ids(self) -> tuple[str, ...]:
        """Return two deterministic live jobs.

        Returns:
            tuple[str, ...]: Live job ids.

        Raises:
            RuntimeError: Never raised by this test double.
        """

        return ("job-1", "job-2")

    async def supervisor_shutdown(self) -> None:
        """No-op shutdown.

        Returns:
            None: Shutdown has no return value.

        Raises:
            RuntimeError: Never raised by this test double.
        """


class _OrchestratorStub:
    """Orchestrator stub; health tests never reach scrape endpoints."""


def _build_test_settings() -> AppSettings:
    """Build deterministic settings for API tests.

    Returns:
        AppSettings: Test settings.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    return AppSettings(_env_file=None, environment_name="test", frontend_url="http://localhost:5173")


def test_api_health_returns_success_when_artifact_store_is_available() -> None:
    """Return 200 and store status when the directory is usable.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when response payload is unexpected.
    """

    application = create_api_application(
        settings=_build_test_settings(),
        orchestrator=_OrchestratorStub(),
        artifact_store=_HealthyArtifactStore(),
        supervisor=_SupervisorStub(),
    )

    with TestClient(application) as client:
        response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {
        "status": "ok",
        "app": "up",
        "artifact_store": "ok",
        "detail": "artifact directory writable",
        "target": "/tmp/maps-scraper",
        "live_workers": 2,
    }


def test_api_health_returns_service_unavailable_when_artifact_store_is_down() -> None:
    """Return 503 and degraded status when the directory is unusable.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when response payload is unexpected.
    """

    application = create_api_application(
        settings=_build_test_settings(),
        orchestrator=_OrchestratorStub(),
        artifact_store=_BrokenArtifactStore(),
        supervisor=_SupervisorStub(),
    )

    with TestClient(application) as client:
        response = client.get("/health")

    assert response.status_code == 503
    assert response.json()["status"] == "degraded"
    assert response.json()["artifact_store"] == "down"


def test_api_foundation_index_reports_environment() -> None:
    """Expose service descriptor on the root path."""

    application = create_api_application(
        settings=_build_test_settings(),
        orchestrator=_OrchestratorStub(),
        artifact_store=_HealthyArtifactStore(),
        supervisor=_SupervisorStub(),
    )

    with TestClient(application) as client:
        payload = client.get("/").json()

    assert payload == {"service": "scrape-jobs", "status": "ready", "environment": "test"}


def test_api_cors_allows_configured_frontend_origin() -> None:
    """Echo the configured frontend origin on cross-origin requests."""

    application = create_api_application(
        settings=_build_test_settings(),
        orchestrator=_OrchestratorStub(),
        artifact_store=_HealthyArtifactStore(),
        supervisor=_SupervisorStub(),
    )

    with TestClient(application) as client:
        allowed = client.get("/", headers={"Origin": "http://localhost:5173"})
        rejected = client.get("/", headers={"Origin": "http://evil.example.test"})

    assert allowed.headers["access-control-allow-origin"] == "http://localhost:5173"
    assert "access-control-allow-origin" not in rejected.headers
