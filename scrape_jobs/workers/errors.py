"""Project-native typed exceptions for worker supervision failures."""

from __future__ import annotations


class WorkerError(Exception):
    """Base exception for worker supervision failures.

    Attributes:
        job_id: Job whose worker failed.
    """

    def __init__(self, message: str, job_id: str):
        super().__init__(message)
        self.job_id = job_id


class WorkerStartError(WorkerError, OSError):
    """Worker process could not be spawned."""


class WorkerAlreadyRunningError(WorkerError, RuntimeError):
    """A live worker already exists for the job."""
