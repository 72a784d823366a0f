"""Scrape job API router composition for create, status, cancel and download endpoints."""

from __future__ import annotations

import mimetypes
from typing import AsyncIterator
from urllib.parse import quote

from fastapi import APIRouter, Request, status
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask
from starlette.concurrency import run_in_threadpool

from scrape_jobs.domain import JobRecord, JobStatus
from scrape_jobs.jobs import JobNotFoundError, JobOrchestratorPort, JobValidationError

_DOWNLOAD_CHUNK_BYTES = 64 * 1024


def api_create_scrape_router(orchestrator: JobOrchestratorPort) -> APIRouter:
    """Create scrape router exposing the job lifecycle over HTTP.

    Handlers are coroutines so every orchestrator call runs on the event loop
    thread that owns job and worker state.

    Args:
        orchestrator: Job orchestrator.

    Returns:
        APIRouter: Router exposing scrape job APIs.

    Raises:
        ValueError: Raised when dependencies are invalid.
    """

    if orchestrator is None:
        raise ValueError("orchestrator must not be None")

    router = APIRouter(tags=["scrape"])

    @router.post("/scrape")
    async def api_scrape_create(request: Request) -> JSONResponse:
        """Accept a scrape query and start a background job.

        Returns:
            JSONResponse: Job identifier payload or 400 when the query is missing.

        Raises:
            RuntimeError: Raised when job creation fails unexpectedly.
        """

        query = await api_read_scrape_query(request)
        try:
            record = await orchestrator.job_create(query)
        except JobValidationError as error:
            return JSONResponse(content={"error": str(error)}, status_code=status.HTTP_400_BAD_REQUEST)

        payload = {
            "jobId": record.job_id,
            "status": record.status.value,
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/status/{job_id}")
    async def api_scrape_status(job_id: str) -> JSONResponse:
        """Return the current status of one job.

        Args:
            job_id: Job identifier.

        Returns:
            JSONResponse: Job status payload or 404 when unknown.

        Raises:
            RuntimeError: Raised when registry read fails.
        """

        try:
            record = orchestrator.job_get_status(job_id)
        except JobNotFoundError as error:
            return JSONResponse(content={"error": str(error)}, status_code=status.HTTP_404_NOT_FOUND)
        return JSONResponse(content=api_serialize_job_record(record), status_code=status.HTTP_200_OK)

    @router.post("/cancel/{job_id}")
    async def api_scrape_cancel(job_id: str) -> JSONResponse:
        """Request cancellation of a running job.

        Args:
            job_id: Job identifier.

        Returns:
            JSONResponse: Acceptance payload or 404 when no worker is running.

        Raises:
            RuntimeError: Raised when cancellation fails unexpectedly.
        """

        try:
            orchestrator.job_cancel(job_id)
        except JobNotFoundError as error:
            payload = {
                "success": False,
                "error": str(error),
            }
            return JSONResponse(content=payload, status_code=status.HTTP_404_NOT_FOUND)

        payload = {
            "success": True,
            "message": "Scrape cancellation requested",
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    @router.get("/download/{job_id}", response_model=None)
    async def api_scrape_download(job_id: str) -> StreamingResponse | JSONResponse:
        """Stream the result file of a completed job once, then delete it.

        A transfer that stops before the last chunk gives the claim back, so
        the file stays downloadable.

        Args:
            job_id: Job identifier.

        Returns:
            StreamingResponse | JSONResponse: File attachment or 404 payload.

        Raises:
            OSError: Raised when reading the open artifact fails mid-stream.
        """

        try:
            artifact = orchestrator.job_claim_result(job_id)
        except JobNotFoundError as error:
            return JSONResponse(content={"error": str(error)}, status_code=status.HTTP_404_NOT_FOUND)

        async def api_stream_artifact() -> AsyncIterator[bytes]:
            streamed = False
            try:
                while True:
                    chunk = await run_in_threadpool(artifact.stream.read, _DOWNLOAD_CHUNK_BYTES)
                    if not chunk:
                        break
                    yield chunk
                streamed = True
            finally:
                artifact.stream.close()
                if not streamed:
                    orchestrator.job_abandon_result(job_id)

        async def api_release_downloaded_artifact() -> None:
            orchestrator.job_release_result(job_id)

        media_type, _ = mimetypes.guess_type(artifact.filename)
        return StreamingResponse(
            api_stream_artifact(),
            media_type=media_type or "application/octet-stream",
            headers={
                "Content-Disposition": api_content_disposition(artifact.filename),
                "Content-Length": str(artifact.size_bytes),
            },
            background=BackgroundTask(api_release_downloaded_artifact),
        )

    @router.get("/jobs")
    async def api_scrape_job_list() -> JSONResponse:
        """Return every known job, newest first.

        Returns:
            JSONResponse: Job list payload.

        Raises:
            RuntimeError: Raised when registry read fails.
        """

        records = orchestrator.job_list()
        payload = {
            "items": [api_serialize_job_record(record) for record in records],
            "returned": len(records),
        }
        return JSONResponse(content=payload, status_code=status.HTTP_200_OK)

    return router


async def api_read_scrape_query(request: Request) -> str | None:
    """Read the `query` field from a JSON or form-encoded request body.

    Args:
        request: Incoming request.

    Returns:
        str | None: Query text, None when absent or not a string.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    content_type = request.headers.get("content-type", "")
    if content_type.startswith(("application/x-www-form-urlencoded", "multipart/form-data")):
        form_data = await request.form()
        query = form_data.get("query")
    else:
        try:
            body = await request.json()
        except ValueError:
            return None
        query = body.get("query") if isinstance(body, dict) else None

    if not isinstance(query, str):
        return None
    return query


def api_content_disposition(filename: str) -> str:
    """Build an attachment header value for a download file name.

    Args:
        filename: Artifact file name.

    Returns:
        str: `Content-Disposition` header value, RFC 5987 encoded for non-ASCII names.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    quoted_filename = quote(filename)
    if quoted_filename != filename:
        return f"attachment; filename*=utf-8''{quoted_filename}"
    return f'attachment; filename="{filename}"'


def api_serialize_job_record(record: JobRecord) -> dict[str, object]:
    """Serialize a job record to its JSON response payload.

    Args:
        record: Job record.

    Returns:
        dict[str, object]: JSON-serializable job payload.

    Raises:
        RuntimeError: This helper does not raise runtime errors.
    """

    payload: dict[str, object] = {
        "jobId": record.job_id,
        "status": record.status.value,
        "target": record.target,
        "createdAt": record.created_at_utc.isoformat(),
        "endedAt": record.ended_at_utc.isoformat() if record.ended_at_utc else None,
    }
    if record.status is JobStatus.COMPLETED and record.result_artifact is not None:
        payload["file"] = record.result_artifact
        payload["downloadUrl"] = f"/download/{record.job_id}"
    if record.status is JobStatus.FAILED and record.error_detail is not None:
        payload["error"] = record.error_detail
    return payload
