"""Application bootstrap wiring for startup validation and dependency assembly."""

from __future__ import annotations

from dataclasses import dataclass

from fastapi import FastAPI

from scrape_jobs.api import create_api_application
from scrape_jobs.config import AppSettings, config_load_settings
from scrape_jobs.jobs import (
    ArtifactRetentionSweeper,
    InMemoryJobRegistry,
    ScrapeJobOrchestrator,
    ScrapeOrchestratorConfig,
)
from scrape_jobs.storage import FilesystemArtifactStore
from scrape_jobs.workers import SubprocessWorkerSupervisor


@dataclass(frozen=True)
class ScrapeServiceComponents:
    """Wired runtime components shared by the HTTP and CLI surfaces.

    Attributes:
        artifact_store: Filesystem artifact store.
        supervisor: Subprocess worker supervisor.
        registry: In-memory job registry.
        orchestrator: Scrape job orchestrator.
        sweeper: Artifact retention sweeper.
    """

    artifact_store: FilesystemArtifactStore
    supervisor: SubprocessWorkerSupervisor
    registry: InMemoryJobRegistry
    orchestrator: ScrapeJobOrchestrator
    sweeper: ArtifactRetentionSweeper


def bootstrap_create_components(settings: AppSettings) -> ScrapeServiceComponents:
    """Build every runtime component from validated settings.

    Args:
        settings: Validated application settings.

    Returns:
        ScrapeServiceComponents: Fully wired components.

    Raises:
        ValueError: Raised when settings values cannot build a component.
        OSError: Raised when the artifact directory cannot be created.
    """

    artifact_store = FilesystemArtifactStore(
        directory=settings.artifact_directory,
        name_pattern=settings.artifact_pattern,
    )
    supervisor = SubprocessWorkerSupervisor(
        worker_argv=settings.settings_worker_argv(),
        artifact_directory=artifact_store.store_directory(),
    )
    registry = InMemoryJobRegistry()
    orchestrator = ScrapeJobOrchestrator(
        registry=registry,
        supervisor=supervisor,
        artifact_store=artifact_store,
        config=ScrapeOrchestratorConfig(
            search_url_template=settings.search_url_template,
            artifact_pattern=settings.artifact_pattern,
        ),
    )
    sweeper = ArtifactRetentionSweeper(
        artifact_store=artifact_store,
        retention_seconds=settings.artifact_retention_seconds,
        interval_seconds=settings.sweep_interval_seconds,
    )
    return ScrapeServiceComponents(
        artifact_store=artifact_store,
        supervisor=supervisor,
        registry=registry,
        orchestrator=orchestrator,
        sweeper=sweeper,
    )


def bootstrap_create_application(settings: AppSettings | None = None) -> FastAPI:
    """Assemble the runtime application after validating startup configuration.

    Args:
        settings: Optional pre-loaded settings; loaded from the environment when omitted.

    Returns:
        FastAPI: Fully initialized FastAPI application instance.

    Raises:
        SettingsLoadError: Raised when startup configuration validation fails.
    """

    resolved_settings = settings or config_load_settings()
    components = bootstrap_create_components(resolved_settings)
    return create_api_application(
        settings=resolved_settings,
        orchestrator=components.orchestrator,
        artifact_store=components.artifact_store,
        supervisor=components.supervisor,
        sweeper=components.sweeper,
    )
