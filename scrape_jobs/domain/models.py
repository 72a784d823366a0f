"""Typed domain models shared across runtime layers.

This module provides the job record contract read by the API layer and written
by the job layer, plus small health payloads used by operational surfaces.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class JobStatus(str, Enum):
    """Lifecycle status of one scrape job.

    `RUNNING` is the only non-terminal value; every other value is final.
    """

    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"

    def status_is_terminal(self) -> bool:
        """Return whether no further transition may leave this status.

        Returns:
            bool: True for completed, failed and cancelled.

        Raises:
            RuntimeError: This method does not raise runtime errors.
        """

        return self is not JobStatus.RUNNING


@dataclass(frozen=True)
class JobRecord:
    """Snapshot of one scrape job as held by the job registry.

    Attributes:
        job_id: Opaque unique job identifier.
        status: Current lifecycle status.
        target: Resolved target URL passed to the worker.
        created_at_utc: Creation timestamp.
        ended_at_utc: Terminal transition timestamp, None while running.
        result_artifact: Artifact filename, only set when completed.
        error_detail: Worker diagnostic text, only set when failed.
    """

    job_id: str
    status: JobStatus
    target: str
    created_at_utc: datetime
    ended_at_utc: datetime | None = None
    result_artifact: str | None = None
    error_detail: str | None = None


@dataclass(frozen=True)
class HealthStatus:
    """Health response contract used by health-check surfaces.

    Attributes:
        status: Overall status text for service health.
        detail: Additional message suitable for operational diagnostics.
    """

    status: str
    detail: str
