"""Main module entrypoint for local runtime execution.

This module validates startup configuration and launches the FastAPI service,
or runs one scrape job or one retention sweep without the HTTP surface.
"""

import argparse
import asyncio

import uvicorn

from scrape_jobs.bootstrap import bootstrap_create_application, bootstrap_create_components
from scrape_jobs.config import AppSettings, config_configure_logging, config_load_settings
from scrape_jobs.domain import JobStatus


def main() -> None:
    """Run selected runtime command with validated startup configuration.

    Returns:
        None: This function does not return a runtime value.

    Raises:
        SettingsLoadError: Raised when configuration validation fails.
        SystemExit: Raised with code 1 when a one-shot scrape does not complete.
    """

    argument_parser = argparse.ArgumentParser(description="Scrape job service runtime entrypoint")
    argument_parser.add_argument(
        "command",
        nargs="?",
        default="api",
        choices=("api", "scrape-once", "sweep-once"),
        help="Runtime command: `api` starts server, `scrape-once` runs one scrape job to completion, "
        "`sweep-once` runs one artifact retention pass",
        type=str,
    )
    argument_parser.add_argument(
        "--query",
        dest="query",
        type=str,
        help="Search term or URL for `scrape-once`",
    )
    parsed_arguments = argument_parser.parse_args()

    settings = config_load_settings()
    config_configure_logging(settings.log_level)

    if parsed_arguments.command == "scrape-once":
        if not (parsed_arguments.query or "").strip():
            argument_parser.error("--query is required for `scrape-once`")
        final_status = asyncio.run(main_run_single_scrape(settings=settings, query=parsed_arguments.query))
        if final_status is not JobStatus.COMPLETED:
            raise SystemExit(1)
        return

    if parsed_arguments.command == "sweep-once":
        components = bootstrap_create_components(settings)
        for filename in components.sweeper.sweeper_run_once():
            print("PURGED:", filename)
        return

    application = bootstrap_create_application(settings)
    uvicorn.run(
        application,
        host=settings.application_host,
        port=settings.application_port,
        log_config=None,
    )


async def main_run_single_scrape(settings: AppSettings, query: str) -> JobStatus:
    """Run one scrape job to its terminal state and print the outcome.

    Args:
        settings: Validated application settings.
        query: Search term or URL.

    Returns:
        JobStatus: Terminal job status.

    Raises:
        JobValidationError: Raised when query is blank.
    """

    components = bootstrap_create_components(settings)
    record = await components.orchestrator.job_create(query)
    final_record = await components.orchestrator.job_wait(record.job_id)
    print("STATUS:", final_record.status.value)
    if final_record.result_artifact:
        print("FILE:", components.artifact_store.store_directory() / final_record.result_artifact)
    if final_record.error_detail:
        print("ERROR:", final_record.error_detail)
    return final_record.status


if __name__ == "__main__":
    main()
