"""Clear asset deploy locations before a redeploy.

Only the contents of each deploy directory are removed; the directory
itself stays. A directory that does not exist is reported as skipped.
"""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

from buildstash.core.errors import ArchiveError
from buildstash.core.selection import select_by_name
from buildstash.models.builds import CleanupOutcome
from buildstash.models.config import ArtifactsConfig
from buildstash.models.requests import CleanupRequest

logger = logging.getLogger(__name__)


def remove_contents(directory: Path) -> int:
    """Delete every entry inside ``directory``. Returns the number removed."""
    removed = 0
    for entry in sorted(directory.iterdir()):
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()
        removed += 1
    return removed


def clean_assets(config: ArtifactsConfig, request: CleanupRequest) -> list[CleanupOutcome]:
    """Clear the deploy location of each selected asset.

    Exclusions win over names. Filesystem errors other than a missing
    directory raise ``ArchiveError`` and stop the run.
    """
    outcomes: list[CleanupOutcome] = []
    for asset in select_by_name(config.assets, request.names, request.exclude):
        deploy_path = config.project_root / asset.deploy_location
        if not deploy_path.exists():
            logger.info("Deploy location for %s does not exist: %s", asset.name, deploy_path)
            outcomes.append(
                CleanupOutcome(name=asset.name, deploy_path=str(deploy_path), skipped=True)
            )
            continue

        try:
            removed = remove_contents(deploy_path)
        except OSError as exc:
            raise ArchiveError(
                f"Failed to clean up deploy directory {deploy_path}: {exc}"
            ) from exc

        logger.info("Removed %d entries from %s", removed, deploy_path)
        outcomes.append(
            CleanupOutcome(name=asset.name, deploy_path=str(deploy_path), removed_entries=removed)
        )
    return outcomes
