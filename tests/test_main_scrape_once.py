"""Tests for the one-shot scrape runtime command."""

from __future__ import annotations

from pathlib import Path
import shlex
import sys

import pytest

from scrape_jobs.config import AppSettings
from scrape_jobs.domain import JobStatus
from scrape_jobs.main import main_run_single_scrape


def _write_worker(tmp_path: Path, body: str) -> str:
    """Write a worker script and return its shell command.

    Args:
        tmp_path: Pytest temp directory.
        body: Python source of the worker.

    Returns:
        str: Worker command line.

    Raises:
        OSError: Raised when the script cannot be written.
    """

    worker_script = tmp_path / "worker.py"
    worker_script.write_text(body, encoding="utf-8")
    return shlex.join([sys.executable, str(worker_script)])


@pytest.mark.asyncio
async def test_main_single_scrape_prints_completed_file(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Print status and result path of a completed one-shot job.

    Returns:
        None: Assertions validate behavior.

    Raises:
        AssertionError: Raised when output is unexpected.
    """

    worker_command = _write_worker(
        tmp_path,
        "import os, pathlib\n"
        "pathlib.Path(os.environ['SCRAPE_ARTIFACT_DIR'], 'out.csv').write_text('a\\n')\n",
    )
    settings = AppSettings(
        _env_file=None,
        artifact_directory=str(tmp_path / "artifacts"),
        worker_command=worker_command,
    )

    final_status = await main_run_single_scrape(settings=settings, query="bakeries")

    output = capsys.readouterr().out
    assert final_status is JobStatus.COMPLETED
    assert "STATUS: completed" in output
    assert "out.csv" in output


@pytest.mark.asyncio
async def test_main_single_scrape_prints_failure_detail(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    """Print the fallback error when the worker writes nothing."""

    settings = AppSettings(
        _env_file=None,
        artifact_directory=str(tmp_path / "artifacts"),
        worker_command=_write_worker(tmp_path, "raise SystemExit(0)\n"),
    )

    final_status = await main_run_single_scrape(settings=settings, query="bakeries")

    output = capsys.readouterr().out
    assert final_status is JobStatus.FAILED
    assert "ERROR: No CSV file generated" in output
