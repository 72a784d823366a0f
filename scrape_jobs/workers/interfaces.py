"""Typed interfaces for worker supervision responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Awaitable, Callable, Protocol


@dataclass(frozen=True)
class WorkerExit:
    """One-shot termination report for a supervised worker.

    Attributes:
        job_id: Job the worker ran for.
        return_code: Process exit code, negative when terminated by a signal.
        cancel_requested: Whether a cancellation was recorded before the worker was retired.
        diagnostic_output: Accumulated standard error text.
    """

    job_id: str
    return_code: int | None
    cancel_requested: bool
    diagnostic_output: str = ""


@dataclass(frozen=True)
class WorkerHandle:
    """Public view of a started worker.

    Attributes:
        job_id: Job the worker runs for.
        pid: Operating system process id.
        argv: Full argument vector the worker was started with.
    """

    job_id: str
    pid: int
    argv: tuple[str, ...]


WorkerTerminationCallback = Callable[[WorkerExit], None]


class WorkerSupervisorPort(Protocol):
    """Port definition for starting, observing and cancelling worker processes."""

    async def supervisor_start(self, job_id: str, target: str) -> WorkerHandle:
        """Spawn one worker for a job and return once it is running.

        Args:
            job_id: Job identifier.
            target: Target URL handed to the worker as its positional argument.

        Returns:
            WorkerHandle: Started worker metadata.

        Raises:
            WorkerStartError: Raised when the process cannot be spawned.
            WorkerAlreadyRunningError: Raised when the job already has a live worker.
        """

    def supervisor_wait(self, job_id: str) -> Awaitable[WorkerExit]:
        """Return the one-shot completion signal of a started worker.

        Args:
            job_id: Job identifier.

        Returns:
            Awaitable[WorkerExit]: Resolves exactly once after full process exit.

        Raises:
            KeyError: Raised when no worker was ever started for the job.
        """

    def supervisor_on_terminated(self, job_id: str, callback: WorkerTerminationCallback) -> None:
        """Register a callback invoked exactly once with the worker exit report.

        Args:
            job_id: Job identifier.
            callback: Callable receiving the exit report.

        Returns:
            None: Registration has no return value.

        Raises:
            KeyError: Raised when no worker was ever started for the job.
        """

    def supervisor_cancel(self, job_id: str) -> bool:
        """Request graceful termination of a live worker.

        Args:
            job_id: Job identifier.

        Returns:
            bool: True when a live worker was found and signalled.

        Raises:
            RuntimeError: This operation does not raise for unknown jobs.
        """

    def supervisor_live_job_ids(self) -> tuple[str, ...]:
        """Return job ids that currently have a live worker.

        Returns:
            tuple[str, ...]: Live job ids.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

    def supervisor_forget(self, job_id: str) -> None:
        """Drop the retained exit report of a retired worker.

        Args:
            job_id: Job identifier.

        Returns:
            None: Retained state is released as side effect.

        Raises:
            RuntimeError: This operation does not raise for unknown jobs.
        """

    async def supervisor_shutdown(self) -> None:
        """Cancel every live worker and wait for them to exit.

        Returns:
            None: Shutdown has no return value.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """
