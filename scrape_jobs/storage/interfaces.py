"""Typed interfaces for artifact storage responsibilities."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import BinaryIO, Protocol

from scrape_jobs.domain import HealthStatus


@dataclass(frozen=True)
class ArtifactRecord:
    """One result file held by the artifact store.

    Attributes:
        filename: File name inside the store directory, the artifact identity.
        path: Absolute file path.
        modified_at_utc: Last modification timestamp.
        size_bytes: File size in bytes.
    """

    filename: str
    path: Path
    modified_at_utc: datetime
    size_bytes: int


@dataclass(frozen=True)
class OpenedArtifact:
    """Artifact opened for reading; the open handle outlives a later unlink.

    Attributes:
        filename: File name inside the store directory.
        size_bytes: File size in bytes at open time.
        stream: Binary read handle, closed by the consumer.
    """

    filename: str
    size_bytes: int
    stream: BinaryIO


class ArtifactStorePort(Protocol):
    """Port definition for the directory that holds worker result files."""

    def store_directory(self) -> Path:
        """Return the directory workers write result files into.

        Returns:
            Path: Absolute store directory.

        Raises:
            RuntimeError: Raised when the directory is unavailable.
        """

    def store_find_latest(self, name_pattern: str) -> ArtifactRecord | None:
        """Return the most recently modified artifact matching a glob pattern.

        Args:
            name_pattern: Glob pattern, for example `*.csv`.

        Returns:
            ArtifactRecord | None: Latest artifact or None when nothing matches.

        Raises:
            OSError: Raised when the directory cannot be listed.
        """

    def store_open(self, filename: str) -> OpenedArtifact:
        """Open one artifact for reading.

        Args:
            filename: Artifact file name.

        Returns:
            OpenedArtifact: Open artifact handle.

        Raises:
            FileNotFoundError: Raised when the artifact no longer exists.
            ValueError: Raised when filename addresses a path outside the store.
        """

    def store_delete(self, filename: str) -> bool:
        """Delete one artifact; deleting a missing file is a no-op.

        Args:
            filename: Artifact file name.

        Returns:
            bool: True when a file was removed, False when it was already gone.

        Raises:
            ValueError: Raised when filename addresses a path outside the store.
        """

    def store_purge_older_than(self, max_age_seconds: float, now: datetime | None = None) -> list[str]:
        """Delete every matching artifact older than the given age.

        Args:
            max_age_seconds: Retention threshold in seconds.
            now: Optional reference time, defaults to current UTC time.

        Returns:
            list[str]: Names of purged artifacts.

        Raises:
            RuntimeError: Per-file failures are logged, not raised.
        """

    def store_check_health(self) -> HealthStatus:
        """Verify the store directory exists and is writable.

        Returns:
            HealthStatus: Health payload.

        Raises:
            ConnectionError: Raised when the directory is unusable.
        """
