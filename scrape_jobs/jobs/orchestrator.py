"""Job-layer scrape orchestrator tying registry, supervisor and artifact store together."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

import structlog

from scrape_jobs.config.settings import DEFAULT_SEARCH_URL_TEMPLATE
from scrape_jobs.domain import JobRecord, JobStatus, domain_resolve_scrape_target
from scrape_jobs.storage import ArtifactStorePort, OpenedArtifact
from scrape_jobs.workers import WorkerError, WorkerExit, WorkerSupervisorPort

from .errors import JobNotFoundError, JobValidationError
from .interfaces import JobOrchestratorPort, JobRegistryPort

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ScrapeOrchestratorConfig:
    """Configuration values for scrape job orchestration.

    Attributes:
        search_url_template: URL template for plain search terms.
        artifact_pattern: Glob pattern of result files produced by the worker.
        missing_output_message: Failure detail used when the worker wrote no diagnostics.
    """

    search_url_template: str = DEFAULT_SEARCH_URL_TEMPLATE
    artifact_pattern: str = "*.csv"
    missing_output_message: str = "No CSV file generated"


class ScrapeJobOrchestrator(JobOrchestratorPort):
    """Concrete lifecycle manager for scrape jobs.

    Each job is written to its terminal state exactly once, by the completion
    watcher task that consumes the supervisor's one-shot exit signal.
    """

    def __init__(
        self,
        registry: JobRegistryPort,
        supervisor: WorkerSupervisorPort,
        artifact_store: ArtifactStorePort,
        config: ScrapeOrchestratorConfig | None = None,
    ):
        """Initialize orchestrator dependencies.

        Args:
            registry: Job state table.
            supervisor: Worker process supervisor.
            artifact_store: Store holding worker result files.
            config: Orchestration configuration.

        Returns:
            None: Initializer does not return a value.

        Raises:
            ValueError: Raised when dependencies or config values are invalid.
        """

        if registry is None:
            raise ValueError("registry must not be None")
        if supervisor is None:
            raise ValueError("supervisor must not be None")
        if artifact_store is None:
            raise ValueError("artifact_store must not be None")
        resolved_config = config or ScrapeOrchestratorConfig()
        if not resolved_config.artifact_pattern.strip():
            raise ValueError("config.artifact_pattern must not be blank")
        if "{query}" not in resolved_config.search_url_template:
            raise ValueError("config.search_url_template must contain a {query} placeholder")

        self._registry = registry
        self._supervisor = supervisor
        self._artifact_store = artifact_store
        self._config = resolved_config
        self._completion_tasks: dict[str, asyncio.Task[JobRecord]] = {}
        self._claimed_job_ids: set[str] = set()

    async def job_create(self, query: str | None) -> JobRecord:
        """Create a job and start its worker without waiting for completion.

        A worker that cannot be spawned finalizes the job as failed right away;
        the caller still receives the job record.

        Args:
            query: Client query, URL or search term.

        Returns:
            JobRecord: Created record, running unless the spawn failed.

        Raises:
            JobValidationError: Raised when query is missing or blank.
        """

        normalized_query = (query or "").strip()
        if not normalized_query:
            raise JobValidationError("Missing query or URL")

        target = domain_resolve_scrape_target(
            query=normalized_query,
            search_url_template=self._config.search_url_template,
        )
        record = self._registry.registry_create_running(target=target)
        logger.info("job created", job_id=record.job_id, target=target)

        try:
            await self._supervisor.supervisor_start(job_id=record.job_id, target=target)
        except WorkerError as error:
            logger.error("worker start failed", job_id=record.job_id, error=str(error))
            return self._registry.registry_finalize(
                job_id=record.job_id,
                status=JobStatus.FAILED,
                error_detail=str(error),
            )

        completion_task = asyncio.create_task(
            self._job_watch_completion(record.job_id),
            name=f"job-completion-{record.job_id}",
        )
        self._completion_tasks[record.job_id] = completion_task
        completion_task.add_done_callback(lambda _: self._completion_tasks.pop(record.job_id, None))
        return record

    def job_get_status(self, job_id: str) -> JobRecord:
        """Return the current record of a job.

        Args:
            job_id: Job identifier.

        Returns:
            JobRecord: Current record.

        Raises:
            JobNotFoundError: Raised when the job is unknown.
        """

        record = self._registry.registry_get(job_id)
        if record is None:
            raise JobNotFoundError("Job not found", job_id=job_id)
        return record

    def job_cancel(self, job_id: str) -> JobRecord:
        """Request cancellation of a running job.

        The status turns `cancelled` once the worker has exited. Repeated or late
        cancellation finds no live worker and reports not found.

        Args:
            job_id: Job identifier.

        Returns:
            JobRecord: Record at the time of the request.

        Raises:
            JobNotFoundError: Raised when no live worker exists for the job.
        """

        record = self._registry.registry_get(job_id)
        if record is None or not self._supervisor.supervisor_cancel(job_id):
            raise JobNotFoundError("No running scrape found for this job", job_id=job_id)
        logger.info("job cancellation accepted", job_id=job_id)
        return record

    def job_claim_result(self, job_id: str) -> OpenedArtifact:
        """Claim and open the single-use result artifact of a completed job.

        The artifact is opened before the claim is recorded, so a file removed
        by a retention sweep is reported as not found instead of failing later
        while streaming.

        Args:
            job_id: Job identifier.

        Returns:
            OpenedArtifact: Open artifact; the caller closes its stream.

        Raises:
            JobNotFoundError: Raised when the job is unknown, not completed,
                already downloaded or its artifact vanished.
        """

        record = self.job_get_status(job_id)
        if record.status is not JobStatus.COMPLETED or record.result_artifact is None:
            raise JobNotFoundError("File not ready", job_id=job_id)
        if job_id in self._claimed_job_ids:
            raise JobNotFoundError("File not found", job_id=job_id)

        try:
            artifact = self._artifact_store.store_open(record.result_artifact)
        except OSError as error:
            logger.warning(
                "artifact missing for completed job",
                job_id=job_id,
                artifact=record.result_artifact,
                error=str(error),
            )
            raise JobNotFoundError("File not found", job_id=job_id) from error

        self._claimed_job_ids.add(job_id)
        return artifact

    def job_abandon_result(self, job_id: str) -> None:
        """Drop the claim of a download that did not complete.

        The artifact stays in place and can be claimed again.

        Args:
            job_id: Job identifier.

        Returns:
            None: The claim is removed as side effect.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

        if job_id in self._claimed_job_ids:
            self._claimed_job_ids.discard(job_id)
            logger.warning("artifact download interrupted", job_id=job_id)

    def job_release_result(self, job_id: str) -> None:
        """Delete a claimed artifact once it has been streamed.

        Args:
            job_id: Job identifier.

        Returns:
            None: The artifact is removed as side effect.

        Raises:
            RuntimeError: This operation does not raise for missing files.
        """

        record = self._registry.registry_get(job_id)
        if record is None or record.result_artifact is None:
            return
        try:
            removed = self._artifact_store.store_delete(record.result_artifact)
        except OSError as error:
            logger.warning("artifact delete after download failed", job_id=job_id, error=str(error))
            return
        logger.info("artifact downloaded", job_id=job_id, artifact=record.result_artifact, removed=removed)

    def job_list(self) -> list[JobRecord]:
        """Return every known job, newest first.

        Returns:
            list[JobRecord]: Job records.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return self._registry.registry_list()

    async def job_wait(self, job_id: str) -> JobRecord:
        """Wait until a job reaches its terminal state.

        Args:
            job_id: Job identifier.

        Returns:
            JobRecord: Terminal record, or the current record when nothing is pending.

        Raises:
            JobNotFoundError: Raised when the job is unknown.
        """

        completion_task = self._completion_tasks.get(job_id)
        if completion_task is not None:
            await asyncio.shield(completion_task)
        return self.job_get_status(job_id)

    async def _job_watch_completion(self, job_id: str) -> JobRecord:
        """Consume the worker exit signal and apply the terminal transition.

        Args:
            job_id: Job identifier.

        Returns:
            JobRecord: Terminal record.

        Raises:
            JobAlreadyTerminalError: Raised if another writer finalized the job.
        """

        try:
            worker_exit = await self._supervisor.supervisor_wait(job_id)
            return self._job_apply_worker_exit(worker_exit)
        finally:
            self._supervisor.supervisor_forget(job_id)

    def _job_apply_worker_exit(self, worker_exit: WorkerExit) -> JobRecord:
        """Resolve the outcome of an exited worker into a terminal job record.

        Cancellation wins over any produced artifact; otherwise the latest
        artifact completes the job and its absence fails it.

        Args:
            worker_exit: One-shot exit report.

        Returns:
            JobRecord: Terminal record.

        Raises:
            JobAlreadyTerminalError: Raised if the job already left running.
        """

        job_id = worker_exit.job_id
        if worker_exit.cancel_requested:
            record = self._registry.registry_finalize(job_id=job_id, status=JobStatus.CANCELLED)
            logger.info("job finalized", job_id=job_id, status=record.status.value)
            return record

        try:
            artifact = self._artifact_store.store_find_latest(self._config.artifact_pattern)
        except OSError as error:
            logger.error("artifact lookup failed", job_id=job_id, error=str(error))
            artifact = None

        if artifact is not None:
            record = self._registry.registry_finalize(
                job_id=job_id,
                status=JobStatus.COMPLETED,
                result_artifact=artifact.filename,
            )
            logger.info("job finalized", job_id=job_id, status=record.status.value, artifact=artifact.filename)
            return record

        error_detail = worker_exit.diagnostic_output.strip() or self._config.missing_output_message
        record = self._registry.registry_finalize(job_id=job_id, status=JobStatus.FAILED, error_detail=error_detail)
        logger.warning(
            "job finalized",
            job_id=job_id,
            status=record.status.value,
            return_code=worker_exit.return_code,
        )
        return record
