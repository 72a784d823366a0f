"""Health endpoint router composition for app, artifact store and worker checks."""

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from scrape_jobs.storage import ArtifactStorePort
from scrape_jobs.workers import WorkerSupervisorPort


def api_create_health_router(artifact_store: ArtifactStorePort, supervisor: WorkerSupervisorPort) -> APIRouter:
    """Create health-check router with app and artifact directory status.

    Args:
        artifact_store: Storage-layer artifact store.
        supervisor: Worker supervisor reporting live workers.

    Returns:
        APIRouter: Router exposing `/health` endpoint.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if artifact_store is None:
        raise ValueError("artifact_store must not be None")
    if supervisor is None:
        raise ValueError("supervisor must not be None")

    router = APIRouter(tags=["health"])

    @router.get("/health")
    async def api_health_status() -> JSONResponse:
        """Return application and artifact store health state.

        Returns:
            JSONResponse: Deterministic health payload for operational checks.

        Raises:
            ConnectionError: Raised when the artifact store check fails.
        """

        live_workers = len(supervisor.supervisor_live_job_ids())
        try:
            store_health = artifact_store.store_check_health()
            payload = {
                "status": "ok",
                "app": "up",
                "artifact_store": store_health.status,
                "detail": store_health.detail,
                "target": str(artifact_store.store_directory()),
                "live_workers": live_workers,
            }
            return JSONResponse(content=payload, status_code=status.HTTP_200_OK)
        except ConnectionError as error:
            payload = {
                "status": "degraded",
                "app": "up",
                "artifact_store": "down",
                "detail": str(error),
                "target": str(artifact_store.store_directory()),
                "live_workers": live_workers,
            }
            return JSONResponse(content=payload, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)

    return router
