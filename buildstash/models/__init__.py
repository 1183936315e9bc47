"""buildstash data models — all Pydantic v2, all frozen (immutable)."""

from buildstash.models.builds import (
    FAILED_STATES,
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    BuildOutcome,
    BuildPlanEntry,
    BuildReport,
    BuildState,
    CleanupOutcome,
    DeployOutcome,
)
from buildstash.models.config import (
    ARCHIVE_EXTENSION,
    DIR_PLACEHOLDER,
    ArtifactsConfig,
    AssetConfig,
    RepositoryConfig,
    RepositoryOptions,
    UnitConfig,
)
from buildstash.models.requests import BuildRequest, CleanupRequest, DeployRequest

__all__ = [
    # config
    "ARCHIVE_EXTENSION",
    "DIR_PLACEHOLDER",
    "ArtifactsConfig",
    "AssetConfig",
    "RepositoryConfig",
    "RepositoryOptions",
    "UnitConfig",
    # builds
    "BuildState",
    "VALID_TRANSITIONS",
    "TERMINAL_STATES",
    "FAILED_STATES",
    "BuildPlanEntry",
    "BuildOutcome",
    "BuildReport",
    "DeployOutcome",
    "CleanupOutcome",
    # requests
    "BuildRequest",
    "DeployRequest",
    "CleanupRequest",
]
