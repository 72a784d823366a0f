"""Subprocess worker supervisor running one external scraper process per job."""

from __future__ import annotations

import asyncio
import codecs
import os
from pathlib import Path
from typing import Awaitable, Sequence

import structlog

from .errors import WorkerAlreadyRunningError, WorkerStartError
from .interfaces import WorkerExit, WorkerHandle, WorkerSupervisorPort, WorkerTerminationCallback

logger = structlog.get_logger(__name__)

ARTIFACT_DIRECTORY_ENV = "SCRAPE_ARTIFACT_DIR"
_STREAM_CHUNK_BYTES = 64 * 1024
_LOG_LINE_LIMIT_CHARS = 8 * 1024


class _LiveWorker:
    """Mutable supervision state of one running worker process."""

    def __init__(self, job_id: str, process: asyncio.subprocess.Process, argv: tuple[str, ...]):
        self.job_id = job_id
        self.process = process
        self.argv = argv
        self.cancel_requested = False
        self.stderr_chunks: list[str] = []


class SubprocessWorkerSupervisor(WorkerSupervisorPort):
    """Worker supervisor backed by asyncio subprocesses.

    All state is confined to the event loop thread. A worker is retired (removed
    from the live table, cancellation flag snapshotted, completion future
    resolved) in one synchronous step, so a cancel either lands before that step
    and is reported, or finds no live worker.
    """

    def __init__(
        self,
        worker_argv: Sequence[str],
        artifact_directory: str | Path,
        shutdown_grace_seconds: float = 5.0,
    ):
        """Initialize supervisor configuration.

        Args:
            worker_argv: Worker executable and fixed arguments; the target is appended.
            artifact_directory: Directory exported to workers for their result file.
            shutdown_grace_seconds: Wait after SIGTERM before SIGKILL on shutdown.

        Raises:
            ValueError: Raised when worker_argv is empty or the grace period is negative.
        """

        if not worker_argv:
            raise ValueError("worker_argv must not be empty")
        if shutdown_grace_seconds < 0:
            raise ValueError("shutdown_grace_seconds must not be negative")

        self._worker_argv = tuple(worker_argv)
        self._artifact_directory = str(artifact_directory)
        self._shutdown_grace_seconds = shutdown_grace_seconds
        self._live_workers: dict[str, _LiveWorker] = {}
        self._exit_futures: dict[str, asyncio.Future[WorkerExit]] = {}
        self._monitor_tasks: dict[str, asyncio.Task[None]] = {}

    async def supervisor_start(self, job_id: str, target: str) -> WorkerHandle:
        """Spawn one worker for a job and return once it is running.

        Args:
            job_id: Job identifier.
            target: Target URL appended as the worker's last argument.

        Returns:
            WorkerHandle: Started worker metadata.

        Raises:
            WorkerStartError: Raised when the process cannot be spawned.
            WorkerAlreadyRunningError: Raised when the job already has a live worker.
        """

        if job_id in self._live_workers:
            raise WorkerAlreadyRunningError(f"worker already running for job_id={job_id}", job_id=job_id)

        argv = (*self._worker_argv, target)
        environment = dict(os.environ)
        environment[ARTIFACT_DIRECTORY_ENV] = self._artifact_directory
        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                env=environment,
            )
        except OSError as error:
            raise WorkerStartError(f"worker spawn failed: {error}", job_id=job_id) from error

        worker = _LiveWorker(job_id=job_id, process=process, argv=argv)
        self._live_workers[job_id] = worker
        self._exit_futures[job_id] = asyncio.get_running_loop().create_future()
        self._monitor_tasks[job_id] = asyncio.create_task(
            self._supervisor_monitor(worker),
            name=f"worker-monitor-{job_id}",
        )
        logger.info("worker started", job_id=job_id, pid=process.pid, target=target)
        return WorkerHandle(job_id=job_id, pid=process.pid, argv=argv)

    def supervisor_wait(self, job_id: str) -> Awaitable[WorkerExit]:
        """Return the one-shot completion signal of a started worker.

        The returned awaitable is shielded: cancelling one waiter never cancels
        the underlying signal seen by other waiters.

        Args:
            job_id: Job identifier.

        Returns:
            Awaitable[WorkerExit]: Resolves once after full process exit.

        Raises:
            KeyError: Raised when no worker was ever started for the job.
        """

        return asyncio.shield(self._exit_futures[job_id])

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

        self._exit_futures[job_id].add_done_callback(lambda future: callback(future.result()))

    def supervisor_cancel(self, job_id: str) -> bool:
        """Flag a live worker as cancelled, then send it SIGTERM.

        Args:
            job_id: Job identifier.

        Returns:
            bool: True when a live worker was found, False otherwise.

        Raises:
            RuntimeError: This operation does not raise for unknown jobs.
        """

        worker = self._live_workers.get(job_id)
        if worker is None:
            return False

        worker.cancel_requested = True
        try:
            worker.process.terminate()
        except ProcessLookupError:
            # Exited but not yet retired; the retire step still sees the flag.
            logger.debug("worker already exited before terminate", job_id=job_id)
        logger.info("worker cancellation requested", job_id=job_id, pid=worker.process.pid)
        return True

    def supervisor_live_job_ids(self) -> tuple[str, ...]:
        """Return job ids that currently have a live worker.

        Returns:
            tuple[str, ...]: Live job ids in start order.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

        return tuple(self._live_workers)

    def supervisor_forget(self, job_id: str) -> None:
        """Drop the retained exit report of a retired worker.

        Callbacks already registered through `supervisor_on_terminated` still
        run. Live workers are kept.

        Args:
            job_id: Job identifier.

        Returns:
            None: Retained state is released as side effect.

        Raises:
            RuntimeError: This operation does not raise for unknown jobs.
        """

        if job_id in self._live_workers:
            return
        self._exit_futures.pop(job_id, None)

    async def supervisor_shutdown(self) -> None:
        """Cancel every live worker, escalating to SIGKILL after the grace period.

        Returns:
            None: Shutdown has no return value.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

        live_workers = list(self._live_workers.values())
        if not live_workers:
            return

        logger.info("terminating live workers", count=len(live_workers))
        for worker in live_workers:
            self.supervisor_cancel(worker.job_id)

        monitor_tasks = [
            self._monitor_tasks[worker.job_id] for worker in live_workers if worker.job_id in self._monitor_tasks
        ]
        if not monitor_tasks:
            return
        _, pending_tasks = await asyncio.wait(monitor_tasks, timeout=self._shutdown_grace_seconds)
        for worker in live_workers:
            if worker.job_id in self._live_workers and worker.process.returncode is None:
                logger.warning("worker ignored SIGTERM, killing", job_id=worker.job_id, pid=worker.process.pid)
                self._supervisor_kill(worker)
        if pending_tasks:
            await asyncio.gather(*pending_tasks, return_exceptions=True)

    async def _supervisor_monitor(self, worker: _LiveWorker) -> None:
        """Drain worker output, wait for exit and retire the worker.

        A worker is retired only after the process has exited. When draining
        fails the process is killed first, so its exit can still be awaited.

        Args:
            worker: Live worker state.

        Returns:
            None: The outcome is published through the completion future.

        Raises:
            asyncio.CancelledError: Propagated after the worker is killed and retired.
        """

        structlog.contextvars.bind_contextvars(job_id=worker.job_id)
        return_code: int | None = None
        try:
            try:
                await asyncio.gather(
                    self._supervisor_drain(worker.process.stdout, stream_name="stdout"),
                    self._supervisor_drain(
                        worker.process.stderr,
                        stream_name="stderr",
                        collected_chunks=worker.stderr_chunks,
                    ),
                )
            except Exception:
                logger.exception("worker output drain failed, killing worker")
                self._supervisor_kill(worker)
            return_code = await worker.process.wait()
        except asyncio.CancelledError:
            self._supervisor_kill(worker)
            raise
        finally:
            self._supervisor_retire(worker, return_code)

    def _supervisor_retire(self, worker: _LiveWorker, return_code: int | None) -> None:
        """Remove a worker from the live table and resolve its completion future.

        Args:
            worker: Live worker state.
            return_code: Process exit code, None when the monitor was cancelled.

        Returns:
            None: The exit report is delivered through the future.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        self._live_workers.pop(worker.job_id, None)
        self._monitor_tasks.pop(worker.job_id, None)
        worker_exit = WorkerExit(
            job_id=worker.job_id,
            return_code=return_code,
            cancel_requested=worker.cancel_requested,
            diagnostic_output="".join(worker.stderr_chunks),
        )
        worker.stderr_chunks.clear()
        logger.info(
            "worker exited",
            job_id=worker.job_id,
            return_code=return_code,
            cancel_requested=worker.cancel_requested,
        )
        exit_future = self._exit_futures.get(worker.job_id)
        if exit_future is not None and not exit_future.done():
            exit_future.set_result(worker_exit)

    @staticmethod
    def _supervisor_kill(worker: _LiveWorker) -> None:
        """Send SIGKILL to a worker that may already have exited.

        Args:
            worker: Live worker state.

        Returns:
            None: The signal is sent as side effect.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        if worker.process.returncode is not None:
            return
        try:
            worker.process.kill()
        except ProcessLookupError:
            logger.debug("worker exited before kill", job_id=worker.job_id)

    @staticmethod
    async def _supervisor_drain(
        stream: asyncio.StreamReader | None,
        stream_name: str,
        collected_chunks: list[str] | None = None,
    ) -> None:
        """Read a worker stream in fixed-size chunks until end of file.

        Complete lines go to the log; a line longer than the log limit is logged
        in truncated pieces. Reading never depends on line length.

        Args:
            stream: Worker output stream.
            stream_name: `stdout` or `stderr`; stderr lines log at warning level.
            collected_chunks: Optional buffer receiving all decoded text.

        Returns:
            None: Text is logged and optionally accumulated.

        Raises:
            OSError: Raised when the pipe cannot be read.
        """

        if stream is None:
            return

        emit = logger.warning if stream_name == "stderr" else logger.info
        decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        pending_text = ""
        while True:
            chunk = await stream.read(_STREAM_CHUNK_BYTES)
            text = decoder.decode(chunk, final=not chunk)
            if collected_chunks is not None and text:
                collected_chunks.append(text)

            *complete_lines, pending_text = (pending_text + text).split("\n")
            if len(pending_text) > _LOG_LINE_LIMIT_CHARS:
                complete_lines.append(pending_text)
                pending_text = ""
            if not chunk and pending_text:
                complete_lines.append(pending_text)
                pending_text = ""

            for line in complete_lines:
                stripped_line = line.rstrip()
                if stripped_line:
                    emit("worker output", stream=stream_name, line=stripped_line[:_LOG_LINE_LIMIT_CHARS])
            if not chunk:
                return
