"""Progress reporting seam between the orchestrators and their caller.

The orchestrators never print. They notify a ``Reporter``; the CLI passes
a Rich-backed implementation, everything else gets ``LoggingReporter``.
"""

from __future__ import annotations

import logging
from typing import Protocol, runtime_checkable

from buildstash.models.builds import BuildPlanEntry

logger = logging.getLogger(__name__)


@runtime_checkable
class Reporter(Protocol):
    """Receives progress notifications from build and deploy runs."""

    def plan(self, entry: BuildPlanEntry) -> None:
        """A unit's build decision was made."""
        ...

    def build_started(self, unit_name: str) -> None:
        ...

    def build_failed(self, unit_name: str, error: str) -> None:
        ...

    def stored(self, unit_name: str, artifact_name: str, done: int, total: int) -> None:
        """An artifact was committed; ``done`` of ``total`` builds finished."""
        ...

    def store_failed(self, unit_name: str, error: str) -> None:
        ...

    def deploy_step(self, name: str, step: str) -> None:
        """A deploy step finished for a unit or asset (found, downloaded, ...)."""
        ...


class LoggingReporter:
    """Default reporter — forwards every notification to ``logging``."""

    def plan(self, entry: BuildPlanEntry) -> None:
        logger.info(
            "Build needed for %s: %s (%s)",
            entry.unit_name,
            "YES" if entry.build_needed else "NO",
            entry.artifact_name,
        )

    def build_started(self, unit_name: str) -> None:
        logger.info("Beginning build for %s", unit_name)

    def build_failed(self, unit_name: str, error: str) -> None:
        logger.warning("Build failed for %s: %s", unit_name, error)

    def stored(self, unit_name: str, artifact_name: str, done: int, total: int) -> None:
        logger.info("Saved %s to repository (%d/%d)", artifact_name, done, total)

    def store_failed(self, unit_name: str, error: str) -> None:
        logger.warning("Failed to store artifact for %s: %s", unit_name, error)

    def deploy_step(self, name: str, step: str) -> None:
        logger.info("%s: %s", name, step)
