"""Typed interfaces for job-layer lifecycle responsibilities."""

from __future__ import annotations

from typing import Protocol

from scrape_jobs.domain import JobRecord, JobStatus
from scrape_jobs.storage import OpenedArtifact


class JobRegistryPort(Protocol):
    """Port definition for the authoritative table of job state."""

    def registry_create_running(self, target: str) -> JobRecord:
        """Insert a new running job under a never-issued identifier.

        Args:
            target: Resolved target URL.

        Returns:
            JobRecord: Created running record.

        Raises:
            ValueError: Raised when target is blank.
        """

    def registry_get(self, job_id: str) -> JobRecord | None:
        """Return one job record.

        Args:
            job_id: Job identifier.

        Returns:
            JobRecord | None: Record or None when unknown.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

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
            result_artifact: Artifact name, required for completed.
            error_detail: Diagnostic text, required for failed.

        Returns:
            JobRecord: Terminal record.

        Raises:
            KeyError: Raised when the job is unknown.
            ValueError: Raised when status and payload break the record invariant.
            JobAlreadyTerminalError: Raised when the job already left running.
        """

    def registry_list(self) -> list[JobRecord]:
        """Return every job record, newest first.

        Returns:
            list[JobRecord]: Job records.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """


class JobOrchestratorPort(Protocol):
    """Port definition for the scrape job lifecycle used by API surfaces."""

    async def job_create(self, query: str | None) -> JobRecord:
        """Create a job and start its worker without waiting for completion.

        Args:
            query: Client query, URL or search term.

        Returns:
            JobRecord: Created running record.

        Raises:
            JobValidationError: Raised when query is missing or blank.
        """

    def job_get_status(self, job_id: str) -> JobRecord:
        """Return the current record of a job.

        Args:
            job_id: Job identifier.

        Returns:
            JobRecord: Current record.

        Raises:
            JobNotFoundError: Raised when the job is unknown.
        """

    def job_cancel(self, job_id: str) -> JobRecord:
        """Request cancellation of a running job.

        Args:
            job_id: Job identifier.

        Returns:
            JobRecord: Record at the time of the request.

        Raises:
            JobNotFoundError: Raised when no live worker exists for the job.
        """

    def job_claim_result(self, job_id: str) -> OpenedArtifact:
        """Claim and open the single-use result artifact of a completed job.

        Args:
            job_id: Job identifier.

        Returns:
            OpenedArtifact: Open artifact to stream.

        Raises:
            JobNotFoundError: Raised when the job is unknown, not completed,
                already downloaded or its artifact vanished.
        """

    def job_abandon_result(self, job_id: str) -> None:
        """Drop the claim of a download that did not complete.

        Args:
            job_id: Job identifier.

        Returns:
            None: The claim is removed as side effect.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

    def job_release_result(self, job_id: str) -> None:
        """Delete a claimed artifact once it has been streamed.

        Args:
            job_id: Job identifier.

        Returns:
            None: The artifact is removed as side effect.

        Raises:
            RuntimeError: This operation does not raise for missing files.
        """

    def job_list(self) -> list[JobRecord]:
        """Return every known job, newest first.

        Returns:
            list[JobRecord]: Job records.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """
