"""Job layer package for scrape job lifecycle boundaries."""

from .errors import JobAlreadyTerminalError, JobError, JobNotFoundError, JobValidationError
from .interfaces import JobOrchestratorPort, JobRegistryPort
from .orchestrator import ScrapeJobOrchestrator, ScrapeOrchestratorConfig
from .registry import InMemoryJobRegistry
from .sweeper import ArtifactRetentionSweeper

__all__ = [
	"ArtifactRetentionSweeper",
	"InMemoryJobRegistry",
	"JobAlreadyTerminalError",
	"JobError",
	"JobNotFoundError",
	"JobOrchestratorPort",
	"JobRegistryPort",
	"JobValidationError",
	"ScrapeJobOrchestrator",
	"ScrapeOrchestratorConfig",
]
