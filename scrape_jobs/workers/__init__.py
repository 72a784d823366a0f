"""Worker layer package for external scraper process boundaries."""

from .errors import WorkerAlreadyRunningError, WorkerError, WorkerStartError
from .interfaces import WorkerExit, WorkerHandle, WorkerSupervisorPort, WorkerTerminationCallback
from .subprocess_supervisor import ARTIFACT_DIRECTORY_ENV, SubprocessWorkerSupervisor

__all__ = [
	"ARTIFACT_DIRECTORY_ENV",
	"SubprocessWorkerSupervisor",
	"WorkerAlreadyRunningError",
	"WorkerError",
	"WorkerExit",
	"WorkerHandle",
	"WorkerStartError",
	"WorkerSupervisorPort",
	"WorkerTerminationCallback",
]
