"""Recurring retention sweep that purges stale artifacts from the store."""

from __future__ import annotations

import asyncio

import structlog

from scrape_jobs.storage import ArtifactStorePort

logger = structlog.get_logger(__name__)


class ArtifactRetentionSweeper:
    """Background task deleting artifacts older than the retention threshold.

    The sweep acts on the artifact store only and ignores job state; an
    artifact claimed by a completed job is purged like any other once stale.
    """

    def __init__(self, artifact_store: ArtifactStorePort, retention_seconds: float, interval_seconds: float):
        """Initialize sweeper configuration.

        Args:
            artifact_store: Store to purge.
            retention_seconds: Artifacts strictly older than this are deleted.
            interval_seconds: Delay between sweeps.

        Raises:
            ValueError: Raised when dependencies or durations are invalid.
        """

        if artifact_store is None:
            raise ValueError("artifact_store must not be None")
        if retention_seconds < 0:
            raise ValueError("retention_seconds must not be negative")
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self._artifact_store = artifact_store
        self._retention_seconds = retention_seconds
        self._interval_seconds = interval_seconds
        self._sweep_task: asyncio.Task[None] | None = None

    def sweeper_run_once(self) -> list[str]:
        """Run one retention pass.

        Returns:
            list[str]: Names of purged artifacts.

        Raises:
            OSError: Raised when the store directory cannot be listed.
        """

        return self._artifact_store.store_purge_older_than(max_age_seconds=self._retention_seconds)

    def sweeper_start(self) -> None:
        """Schedule the recurring sweep on the running event loop.

        Returns:
            None: The sweep runs as a background task.

        Raises:
            RuntimeError: Raised when no event loop is running.
        """

        if self.sweeper_is_running():
            return
        self._sweep_task = asyncio.create_task(self._sweeper_loop(), name="artifact-retention-sweeper")
        logger.info(
            "retention sweeper started",
            retention_seconds=self._retention_seconds,
            interval_seconds=self._interval_seconds,
        )

    async def sweeper_stop(self) -> None:
        """Cancel the recurring sweep and wait for it to finish.

        Returns:
            None: Stop has no return value.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

        sweep_task = self._sweep_task
        self._sweep_task = None
        if sweep_task is None:
            return
        sweep_task.cancel()
        try:
            await sweep_task
        except asyncio.CancelledError:
            logger.info("retention sweeper stopped")

    def sweeper_is_running(self) -> bool:
        """Return whether the recurring sweep task is active.

        Returns:
            bool: True while the background task runs.

        Raises:
            RuntimeError: This operation does not raise runtime errors.
        """

        return self._sweep_task is not None and not self._sweep_task.done()

    async def _sweeper_loop(self) -> None:
        """Sleep for one interval, sweep, repeat until cancelled.

        Returns:
            None: Runs until cancelled.

        Raises:
            asyncio.CancelledError: Raised when the sweeper is stopped.
        """

        while True:
            await asyncio.sleep(self._interval_seconds)
            try:
                self.sweeper_run_once()
            except Exception:
                logger.exception("retention sweep failed")
