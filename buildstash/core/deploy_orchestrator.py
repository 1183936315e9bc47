"""Deploy orchestrator — fetch artifacts and unpack them into place.

Deploys assume every artifact was already built and published. All unit
artifacts are checked before anything is unpacked, and any failure stops
the run.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from buildstash.core.archive import unpack
from buildstash.core.build_orchestrator import TEMP_PREFIX
from buildstash.core.errors import ArchiveError, NotFoundError
from buildstash.core.hasher import ContentHasher
from buildstash.core.namer import unit_artifact_name
from buildstash.core.reporting import LoggingReporter, Reporter
from buildstash.core.repository import RepositoryAdapter
from buildstash.core.selection import select_by_name
from buildstash.models.builds import DeployOutcome
from buildstash.models.config import ArtifactsConfig
from buildstash.models.requests import DeployRequest

logger = logging.getLogger(__name__)


class DeployOrchestrator:
    """Retrieves unit artifacts and plain assets and unpacks them.

    Parameters
    ----------
    config:
        The loaded artifacts configuration.
    repository:
        Where artifacts are fetched from.
    hasher:
        Content hasher used to name unit artifacts. Defaults to git.
    reporter:
        Receives per-step notifications. Defaults to logging.
    temp_dir:
        Directory for downloaded archives. Defaults to the system temp dir.
    """

    def __init__(
        self,
        config: ArtifactsConfig,
        repository: RepositoryAdapter,
        *,
        hasher: ContentHasher | None = None,
        reporter: Reporter | None = None,
        temp_dir: Path | None = None,
    ) -> None:
        self.config = config
        self.repository = repository
        self.hasher = hasher
        self.reporter = reporter or LoggingReporter()
        self.temp_dir = temp_dir

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def deploy_units(self, request: DeployRequest) -> list[DeployOutcome]:
        """Deploy the artifact matching each selected unit's current source.

        Raises ``NotFoundError`` before touching the filesystem if any
        artifact is missing. Any later error propagates and stops the
        remaining units.
        """
        units = select_by_name(self.config.artifacts, request.names)

        resolved: list[tuple[str, str, str]] = []
        for unit in units:
            artifact = unit_artifact_name(unit, self.config.project_root, self.hasher)
            if not self.repository.exists(artifact):
                raise NotFoundError(
                    f"Artifact {artifact} for {unit.name} not found in repository"
                )
            resolved.append((unit.name, artifact, unit.deploy_location))

        outcomes: list[DeployOutcome] = []
        for name, artifact, location in resolved:
            self.reporter.deploy_step(name, f"Found artifact {artifact}")
            outcomes.append(self._deploy_blob(name, artifact, location))
        return outcomes

    # ------------------------------------------------------------------
    # Assets
    # ------------------------------------------------------------------

    def deploy_assets(self, request: DeployRequest) -> list[DeployOutcome]:
        """Deploy each selected asset; its blob name comes straight from config."""
        outcomes: list[DeployOutcome] = []
        for asset in select_by_name(self.config.assets, request.names):
            if not self.repository.exists(asset.filename):
                raise NotFoundError(f"Asset {asset.filename} not found in repository")
            self.reporter.deploy_step(asset.name, f"Found asset {asset.filename}")
            outcomes.append(
                self._deploy_blob(asset.name, asset.filename, asset.deploy_location)
            )
        return outcomes

    # ------------------------------------------------------------------
    # Shared fetch / unpack / cleanup
    # ------------------------------------------------------------------

    def _deploy_blob(self, name: str, blob: str, location: str) -> DeployOutcome:
        deploy_path = self.config.project_root / location
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=TEMP_PREFIX, suffix=".tar.gz", dir=self.temp_dir
            )
        except OSError as exc:
            raise ArchiveError(f"Failed to create temporary file: {exc}") from exc
        os.close(fd)
        tmp_path = Path(tmp_name)

        try:
            self.repository.retrieve(blob, tmp_path)
            self.reporter.deploy_step(name, "Downloaded")
            try:
                deploy_path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise ArchiveError(
                    f"Failed to create deploy directory {deploy_path}: {exc}"
                ) from exc
            unpack(tmp_path, deploy_path)
            self.reporter.deploy_step(name, f"Extracted to {deploy_path}")
        finally:
            tmp_path.unlink(missing_ok=True)
        self.reporter.deploy_step(name, "Deleted temporary archive")

        logger.info("Deployed %s (%s) to %s", name, blob, deploy_path)
        return DeployOutcome(name=name, artifact_name=blob, deploy_path=str(deploy_path))
