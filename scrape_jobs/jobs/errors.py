"""Project-native typed exceptions for job lifecycle failures."""

from __future__ import annotations


class JobError(Exception):
    """Base exception for job-layer failures."""


class JobValidationError(JobError, ValueError):
    """Scrape request rejected before any job was created."""


class JobNotFoundError(JobError, LookupError):
    """Job, live worker or downloadable artifact does not exist.

    Attributes:
        job_id: Requested job identifier.
    """

    def __init__(self, message: str, job_id: str):
        super().__init__(message)
        self.job_id = job_id


class JobAlreadyTerminalError(JobError, RuntimeError):
    """Second terminal transition attempted on one job."""
