"""Filesystem-backed artifact store for worker result files."""

from __future__ import annotations

from datetime import datetime, timezone
import os
from pathlib import Path

import structlog

from scrape_jobs.domain import HealthStatus

from .interfaces import ArtifactRecord, ArtifactStorePort, OpenedArtifact

logger = structlog.get_logger(__name__)


class FilesystemArtifactStore(ArtifactStorePort):
    """Artifact store backed by one flat directory shared with the worker."""

    def __init__(self, directory: str | Path, name_pattern: str = "*.csv"):
        """Initialize the store and create its directory when missing.

        Args:
            directory: Store directory path.
            name_pattern: Glob pattern selecting artifacts handled by retention purges.

        Raises:
            ValueError: Raised when directory or pattern is blank.
            OSError: Raised when the directory cannot be created.
        """

        if not str(directory).strip():
            raise ValueError("directory must not be blank")
        if not name_pattern.strip():
            raise ValueError("name_pattern must not be blank")

        self._directory = Path(directory).resolve()
        self._name_pattern = name_pattern.strip()
        self._directory.mkdir(parents=True, exist_ok=True)

    def store_directory(self) -> Path:
        """Return the absolute store directory.

        Returns:
            Path: Store directory.

        Raises:
            RuntimeError: This implementation does not raise runtime errors.
        """

        return self._directory

    def store_find_latest(self, name_pattern: str | None = None) -> ArtifactRecord | None:
        """Return the most recently modified artifact matching a glob pattern.

        Equal modification times break on the greater file name, so repeated
        calls over the same directory state pick the same artifact.

        Args:
            name_pattern: Glob pattern, defaults to the store pattern.

        Returns:
            ArtifactRecord | None: Latest artifact or None when nothing matches.

        Raises:
            OSError: Raised when the directory cannot be listed.
        """

        candidates = self._store_list_matching(name_pattern or self._name_pattern)
        if not candidates:
            return None
        return max(candidates, key=lambda record: (record.modified_at_utc, record.filename))

    def store_open(self, filename: str) -> OpenedArtifact:
        """Open one artifact for reading.

        Args:
            filename: Artifact file name.

        Returns:
            OpenedArtifact: Open artifact handle with its size.

        Raises:
            FileNotFoundError: Raised when the artifact no longer exists.
            ValueError: Raised when filename addresses a path outside the store.
        """

        artifact_path = self._store_resolve_path(filename)
        stream = artifact_path.open("rb")
        return OpenedArtifact(
            filename=artifact_path.name,
            size_bytes=os.fstat(stream.fileno()).st_size,
            stream=stream,
        )

    def store_delete(self, filename: str) -> bool:
        """Delete one artifact; a file that is already gone is not an error.

        Args:
            filename: Artifact file name.

        Returns:
            bool: True when a file was removed, False when it was already gone.

        Raises:
            ValueError: Raised when filename addresses a path outside the store.
            OSError: Raised for failures other than a missing file.
        """

        artifact_path = self._store_resolve_path(filename)
        try:
            artifact_path.unlink()
        except FileNotFoundError:
            return False
        logger.info("artifact deleted", artifact=filename)
        return True

    def store_purge_older_than(self, max_age_seconds: float, now: datetime | None = None) -> list[str]:
        """Delete every matching artifact whose age exceeds the threshold.

        Args:
            max_age_seconds: Retention threshold in seconds.
            now: Optional reference time, defaults to current UTC time.

        Returns:
            list[str]: Names of purged artifacts.

        Raises:
            ValueError: Raised when max_age_seconds is negative.
        """

        if max_age_seconds < 0:
            raise ValueError("max_age_seconds must not be negative")

        reference_time = now or datetime.now(timezone.utc)
        purged_filenames: list[str] = []
        for artifact in self._store_list_matching(self._name_pattern):
            age_seconds = (reference_time - artifact.modified_at_utc).total_seconds()
            if age_seconds <= max_age_seconds:
                continue
            try:
                if self.store_delete(artifact.filename):
                    purged_filenames.append(artifact.filename)
            except OSError as error:
                logger.warning("artifact purge failed", artifact=artifact.filename, error=str(error))

        if purged_filenames:
            logger.info("artifacts purged", count=len(purged_filenames), artifacts=purged_filenames)
        return purged_filenames

    def store_check_health(self) -> HealthStatus:
        """Verify the store directory exists and is writable.

        Returns:
            HealthStatus: Health payload with status and diagnostic detail.

        Raises:
            ConnectionError: Raised when the directory is missing or read-only.
        """

        if not self._directory.is_dir():
            raise ConnectionError(f"artifact directory missing: {self._directory}")
        if not os.access(self._directory, os.W_OK | os.X_OK):
            raise ConnectionError(f"artifact directory not writable: {self._directory}")
        return HealthStatus(status="ok", detail="artifact directory writable")

    def _store_resolve_path(self, filename: str) -> Path:
        """Map an artifact name onto a path directly inside the store directory.

        Args:
            filename: Artifact file name.

        Returns:
            Path: Absolute artifact path.

        Raises:
            ValueError: Raised when filename is blank or not a bare file name.
        """

        normalized_filename = filename.strip()
        if not normalized_filename:
            raise ValueError("filename must not be blank")
        if normalized_filename in {".", ".."} or Path(normalized_filename).name != normalized_filename:
            raise ValueError(f"invalid artifact filename={normalized_filename}")
        if os.sep in normalized_filename or (os.altsep and os.altsep in normalized_filename):
            raise ValueError(f"invalid artifact filename={normalized_filename}")
        return self._directory / normalized_filename

    def _store_list_matching(self, name_pattern: str) -> list[ArtifactRecord]:
        """List artifacts matching a glob pattern in directory order.

        Files that disappear between listing and stat are skipped.

        Args:
            name_pattern: Glob pattern.

        Returns:
            list[ArtifactRecord]: Matching artifacts.

        Raises:
            OSError: Raised when the directory cannot be listed.
        """

        records: list[ArtifactRecord] = []
        for artifact_path in sorted(self._directory.glob(name_pattern)):
            record = self._store_stat(artifact_path)
            if record is not None:
                records.append(record)
        return records

    @staticmethod
    def _store_stat(artifact_path: Path) -> ArtifactRecord | None:
        """Build an artifact record from a path, None when it is not a regular file.

        Args:
            artifact_path: Candidate artifact path.

        Returns:
            ArtifactRecord | None: Record or None when absent.

        Raises:
            RuntimeError: This helper does not raise runtime errors.
        """

        try:
            stat_result = artifact_path.stat()
        except FileNotFoundError:
            return None
        if not artifact_path.is_file():
            return None
        return ArtifactRecord(
            filename=artifact_path.name,
            path=artifact_path,
            modified_at_utc=datetime.fromtimestamp(stat_result.st_mtime, tz=timezone.utc),
            size_bytes=stat_result.st_size,
        )
