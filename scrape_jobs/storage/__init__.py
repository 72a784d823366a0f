"""Storage layer package for the artifact directory boundary."""

from .filesystem import FilesystemArtifactStore
from .interfaces import ArtifactRecord, ArtifactStorePort, OpenedArtifact

__all__ = [
	"ArtifactRecord",
	"ArtifactStorePort",
	"FilesystemArtifactStore",
	"OpenedArtifact",
]
