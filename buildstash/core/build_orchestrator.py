"""Build orchestrator — build each unit at most once per fingerprint.

For every selected unit the orchestrator names its artifact, asks the
repository whether it exists, and only builds what is missing (or
everything, when forced). Builds run strictly one at a time in selection
order. A failed build or store is recorded and the batch moves on; the
caller decides the exit status from the returned ``BuildReport``.
"""

from __future__ import annotations

import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

from buildstash.core.archive import pack
from buildstash.core.build_machine import BuildStateMachine
from buildstash.core.errors import ArchiveError, BuildstashError, NotFoundError
from buildstash.core.hasher import ContentHasher
from buildstash.core.namer import unit_artifact_name
from buildstash.core.reporting import LoggingReporter, Reporter
from buildstash.core.repository import RepositoryAdapter
from buildstash.core.selection import select_by_name
from buildstash.models.builds import BuildPlanEntry, BuildReport, BuildState
from buildstash.models.config import ArtifactsConfig, UnitConfig
from buildstash.models.requests import BuildRequest

logger = logging.getLogger(__name__)

TEMP_PREFIX = "buildstash-"


# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------


@runtime_checkable
class CommandRunner(Protocol):
    """Runs an opaque shell command and returns its exit status."""

    def run(self, command: str, cwd: Path) -> int:
        ...


class ShellCommandRunner:
    """Runs commands through the shell, inheriting stdout and stderr."""

    def run(self, command: str, cwd: Path) -> int:
        logger.debug("Running command: (%s) %s", cwd, command)
        completed = subprocess.run(command, shell=True, cwd=cwd, check=False)
        return completed.returncode


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class BuildOrchestrator:
    """Decides, runs and stores unit builds.

    Parameters
    ----------
    config:
        The loaded artifacts configuration.
    repository:
        Where artifacts are checked for and stored.
    hasher:
        Content hasher for fingerprints. Defaults to git.
    runner:
        Executes build commands. Defaults to the shell.
    reporter:
        Receives progress notifications. Defaults to logging.
    temp_dir:
        Directory for temporary archives. Defaults to the system temp dir.
    """

    def __init__(
        self,
        config: ArtifactsConfig,
        repository: RepositoryAdapter,
        *,
        hasher: ContentHasher | None = None,
        runner: CommandRunner | None = None,
        reporter: Reporter | None = None,
        temp_dir: Path | None = None,
    ) -> None:
        self.config = config
        self.repository = repository
        self.hasher = hasher
        self.runner = runner or ShellCommandRunner()
        self.reporter = reporter or LoggingReporter()
        self.temp_dir = temp_dir

    # ------------------------------------------------------------------
    # Selection and planning
    # ------------------------------------------------------------------

    def select(self, request: BuildRequest) -> list[UnitConfig]:
        """Units matching the request, in configuration order."""
        return select_by_name(self.config.artifacts, request.names)

    def _exists(self, artifact_name: str) -> bool:
        try:
            return self.repository.exists(artifact_name)
        except NotFoundError:
            return False

    def plan(self, request: BuildRequest) -> list[BuildPlanEntry]:
        """Name every selected unit's artifact and decide whether to build it.

        Naming and backend errors propagate and abort the whole plan.
        """
        entries: list[BuildPlanEntry] = []
        for unit in self.select(request):
            artifact = unit_artifact_name(unit, self.config.project_root, self.hasher)
            exists = self._exists(artifact)
            entries.append(
                BuildPlanEntry(
                    unit_name=unit.name,
                    artifact_name=artifact,
                    exists=exists,
                    build_needed=request.force or not exists,
                )
            )
        return entries

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def run(self, request: BuildRequest) -> BuildReport:
        """Plan, then build and store every unit that needs it."""
        units = {u.name: u for u in self.select(request)}
        machine = BuildStateMachine(list(units))
        artifacts: dict[str, str] = {}

        for entry in self.plan(request):
            artifacts[entry.unit_name] = entry.artifact_name
            machine.set_artifact(entry.unit_name, entry.artifact_name)
            self.reporter.plan(entry)
            if entry.build_needed:
                machine.transition(entry.unit_name, BuildState.BUILD_PENDING)
            else:
                machine.transition(entry.unit_name, BuildState.EXISTS_SKIPPED)

        pending = machine.pending()
        total = len(pending)
        done = 0

        for name in pending:
            if self._build_one(units[name], artifacts[name], machine):
                done += 1
                self.reporter.stored(name, artifacts[name], done, total)

        report = machine.report()
        logger.info(
            "Build run finished: %d stored, %d skipped, %d failed",
            len(report.stored),
            len(report.skipped),
            len(report.failed),
        )
        return report

    def _build_one(self, unit: UnitConfig, artifact: str, machine: BuildStateMachine) -> bool:
        """Build, pack and store one unit. Returns True once stored."""
        machine.transition(unit.name, BuildState.BUILD_RUNNING)
        self.reporter.build_started(unit.name)

        error = self._execute(unit)
        if error:
            machine.transition(unit.name, BuildState.BUILD_FAILED, error=error)
            self.reporter.build_failed(unit.name, error)
            return False
        machine.transition(unit.name, BuildState.BUILD_SUCCEEDED)

        try:
            self._pack_and_store(unit, artifact)
        except BuildstashError as exc:
            machine.transition(unit.name, BuildState.STORE_FAILED, error=str(exc))
            self.reporter.store_failed(unit.name, str(exc))
            return False

        machine.transition(unit.name, BuildState.STORED)
        return True

    def _execute(self, unit: UnitConfig) -> str | None:
        """Run the unit's build command. Returns an error message on failure."""
        if not unit.command.strip():
            return "no build command configured"
        try:
            returncode = self.runner.run(unit.command, self.config.project_root)
        except OSError as exc:
            return f"could not start build command: {exc}"
        if returncode:
            return f"command exited with status {returncode}"
        return None

    def _pack_and_store(self, unit: UnitConfig, artifact: str) -> None:
        """Archive the unit's output directory and commit it under ``artifact``.

        The temporary archive is removed on every exit path.
        """
        output_dir = self.config.project_root / unit.output_directory
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=TEMP_PREFIX, suffix=".tar.gz", dir=self.temp_dir
            )
        except OSError as exc:
            raise ArchiveError(f"Failed to create temporary file: {exc}") from exc
        os.close(fd)
        tmp_path = Path(tmp_name)
        try:
            pack(output_dir, tmp_path)
            self.repository.store(tmp_path, artifact)
        finally:
            tmp_path.unlink(missing_ok=True)
            logger.debug("Removed temporary archive %s", tmp_path)
