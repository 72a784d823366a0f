"""In-memory job registry holding the authoritative job state table."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timezone
from uuid import uuid4

from scrape_jobs.domain import JobRecord, JobStatus

from .errors import JobAlreadyTerminalError
from .interfaces import JobRegistryPort


class InMemoryJobRegistry(JobRegistryPort):
    """Process-local job table.

    Records are immutable snapshots replaced on transition. Terminal jobs are
    kept for the lifetime of the process; nothing is evicted.
    """

    def __init__(self):
        self._records: dict[str, JobRecord] = {}

    def registry_create_running(self, target: str) -> JobRecord:
        """Insert a new running job under a never-issued identifier.

        Args:
            target: Resolved target URL.

        Returns:
            JobRecord: Created running record.

        Raises:
            ValueError: Raised when target is blank.
        """

        normalized_target = target.strip()
        if not normalized_target:
            raise ValueError("target must not be blank")

        job_id = uuid4().hex
        while job_id in self._records:
            job_id = uuid4().hex

        record = JobRecord(
            job_id=job_id,
            status=JobStatus.RUNNING,
            target=normalized_target,
            created_at_utc=datetime.now(timezone.utc),
        )
        self._records[job_id] = record
        return record

    def registry_get(self, job_id: str) -> JobRecord | None:
        """Return one job record.

        Args:
            job_id: Job identifier.

        Returns:
            JobRecord | None: Record or None when unknown.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return self._records.get(job_id)

    def registry_finalize(
        self,
        job_id: str,
        status: JobStatus,
        result_artifact: str | None = None,
        error_detail: str | None = None,
    ) -> JobRecord:
        """Apply the single running-to-terminal transition of a job.

        Args:
            job_id: Job identifier.
            status: Terminal status.
            result_artifact: Artifact name, required for completed and rejected otherwise.
            error_detail: Diagnostic text, required for failed and rejected otherwise.

        Returns:
            JobRecord: Terminal record.

        Raises:
            KeyError: Raised when the job is unknown.
            ValueError: Raised when status and payload break the record invariant.
            JobAlreadyTerminalError: Raised when the job already left running.
        """

        current_record = self._records[job_id]
        if current_record.status.status_is_terminal():
            raise JobAlreadyTerminalError(f"job_id={job_id} is already {current_record.status.value}")
        if not status.status_is_terminal():
            raise ValueError(f"status={status.value} is not terminal")
        if (status is JobStatus.COMPLETED) != bool(result_artifact):
            raise ValueError("result_artifact must be set exactly when status is completed")
        if (status is JobStatus.FAILED) != bool(error_detail):
            raise ValueError("error_detail must be set exactly when status is failed")

        terminal_record = replace(
            current_record,
            status=status,
            ended_at_utc=datetime.now(timezone.utc),
            result_artifact=result_artifact,
            error_detail=error_detail,
        )
        self._records[job_id] = terminal_record
        return terminal_record

    def registry_list(self) -> list[JobRecord]:
        """Return every job record, newest first.

        Returns:
            list[JobRecord]: Job records.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return sorted(self._records.values(), key=lambda record: record.created_at_utc, reverse=True)
