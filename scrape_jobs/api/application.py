"""FastAPI application factory for the scrape job service.

This module composes routers, cross-origin policy and the background task
lifecycle (retention sweep, worker shutdown) into one application.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from scrape_jobs.config import AppSettings
from scrape_jobs.jobs import ArtifactRetentionSweeper, JobOrchestratorPort
from scrape_jobs.storage import ArtifactStorePort
from scrape_jobs.workers import WorkerSupervisorPort

from .routers import api_create_health_router, api_create_scrape_router


def create_api_application(
    settings: AppSettings,
    orchestrator: JobOrchestratorPort,
    artifact_store: ArtifactStorePort,
    supervisor: WorkerSupervisorPort,
    sweeper: ArtifactRetentionSweeper | None = None,
) -> FastAPI:
    """Create the FastAPI application instance for the service.

    Args:
        settings: Validated application settings used for CORS and metadata.
        orchestrator: Job orchestrator behind the scrape endpoints.
        artifact_store: Artifact store checked by the health endpoint.
        supervisor: Worker supervisor, shut down with the application.
        sweeper: Optional retention sweeper run for the application lifetime.

    Returns:
        FastAPI: Framework application instance.

    Raises:
        ValueError: Raised when router dependencies are invalid.
    """

    @asynccontextmanager
    async def api_lifespan(_application: FastAPI) -> AsyncIterator[None]:
        if sweeper is not None:
            sweeper.sweeper_start()
        try:
            yield
        finally:
            if sweeper is not None:
                await sweeper.sweeper_stop()
            await supervisor.supervisor_shutdown()

    application = FastAPI(title="Scrape Jobs", lifespan=api_lifespan)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @application.get("/", tags=["foundation"])
    async def foundation_index() -> dict[str, str]:
        """Return a minimal service descriptor for bootstrap verification.

        Returns:
            dict[str, str]: Service name, status and environment.

        Raises:
            RuntimeError: Raised if route handler cannot produce a response.
        """

        return {
            "service": "scrape-jobs",
            "status": "ready",
            "environment": settings.environment_name,
        }

    application.include_router(api_create_health_router(artifact_store=artifact_store, supervisor=supervisor))
    application.include_router(api_create_scrape_router(orchestrator=orchestrator))

    return application
