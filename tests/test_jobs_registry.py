"""Regression tests for in-memory job registry transitions and invariants."""

import pytest

from scrape_jobs.domain import JobStatus
from scrape_jobs.jobs import InMemoryJobRegistry, JobAlreadyTerminalError


def test_jobs_registry_create_inserts_running_record() -> None:
    """Insert a running record retrievable by its identifier.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when created record is unexpected.
    """

    registry = InMemoryJobRegistry()

    record = registry.registry_create_running(target="https://example.test/maps")

    assert record.status is JobStatus.RUNNING
    assert record.target == "https://example.test/maps"
    assert record.ended_at_utc is None
    assert registry.registry_get(record.job_id) == record
    assert registry.registry_get("unknown-id") is None


def test_jobs_registry_rejects_blank_target() -> None:
    """Reject blank targets."""

    with pytest.raises(ValueError, match="target must not be blank"):
        InMemoryJobRegistry().registry_create_running(target="  ")


def test_jobs_registry_finalize_happens_exactly_once() -> None:
    """Refuse a second terminal transition and keep the first outcome.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when terminal state is overwritten.
    """

    registry = InMemoryJobRegistry()
    record = registry.registry_create_running(target="https://example.test/maps")

    completed_record = registry.registry_finalize(
        job_id=record.job_id,
        status=JobStatus.COMPLETED,
        result_artifact="result-123.csv",
    )

    assert completed_record.status is JobStatus.COMPLETED
    assert completed_record.ended_at_utc is not None

    for status in (JobStatus.CANCELLED, JobStatus.FAILED, JobStatus.COMPLETED):
        with pytest.raises(JobAlreadyTerminalError):
            registry.registry_finalize(
                job_id=record.job_id,
                status=status,
                result_artifact="other.csv" if status is JobStatus.COMPLETED else None,
                error_detail="boom" if status is JobStatus.FAILED else None,
            )

    assert registry.registry_get(record.job_id) == completed_record


@pytest.mark.parametrize(
    ("status", "result_artifact", "error_detail"),
    [
        (JobStatus.RUNNING, None, None),
        (JobStatus.COMPLETED, None, None),
        (JobStatus.COMPLETED, "result.csv", "boom"),
        (JobStatus.FAILED, None, None),
        (JobStatus.FAILED, "result.csv", "boom"),
        (JobStatus.CANCELLED, "result.csv", None),
        (JobStatus.CANCELLED, None, "boom"),
    ],
)
def test_jobs_registry_finalize_enforces_record_invariant(
    status: JobStatus,
    result_artifact: str | None,
    error_detail: str | None,
) -> None:
    """Reject payloads that break the one-of artifact/error invariant.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when an invalid payload is accepted.
    """

    registry = InMemoryJobRegistry()
    record = registry.registry_create_running(target="https://example.test/maps")

    with pytest.raises(ValueError):
        registry.registry_finalize(
            job_id=record.job_id,
            status=status,
            result_artifact=result_artifact,
            error_detail=error_detail,
        )

    assert registry.registry_get(record.job_id).status is JobStatus.RUNNING


def test_jobs_registry_finalize_unknown_job_raises_key_error() -> None:
    """Raise KeyError for identifiers never issued."""

    with pytest.raises(KeyError):
        InMemoryJobRegistry().registry_finalize(job_id="unknown-id", status=JobStatus.CANCELLED)


def test_jobs_registry_list_returns_newest_first_and_keeps_terminal_jobs() -> None:
    """List every record, terminal ones included, newest first."""

    registry = InMemoryJobRegistry()
    first_record = registry.registry_create_running(target="https://example.test/1")
    second_record = registry.registry_create_running(target="https://example.test/2")
    registry.registry_finalize(job_id=first_record.job_id, status=JobStatus.CANCELLED)

    listed_ids = [record.job_id for record in registry.registry_list()]

    assert set(listed_ids) == {first_record.job_id, second_record.job_id}
    if second_record.created_at_utc > first_record.created_at_utc:
        assert listed_ids == [second_record.job_id, first_record.job_id]
