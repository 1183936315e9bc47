"""Build state machine and result models for build, deploy and cleanup runs."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class BuildState(str, Enum):
    """Lifecycle of one unit within a single build invocation."""

    NOT_CHECKED = "not_checked"
    EXISTS_SKIPPED = "exists_skipped"
    BUILD_PENDING = "build_pending"
    BUILD_RUNNING = "build_running"
    BUILD_SUCCEEDED = "build_succeeded"
    BUILD_FAILED = "build_failed"
    STORED = "stored"
    STORE_FAILED = "store_failed"


# Valid state transitions — enforced by BuildStateMachine.
# Terminal states have no outgoing transitions.
VALID_TRANSITIONS: dict[BuildState, set[BuildState]] = {
    BuildState.NOT_CHECKED: {BuildState.EXISTS_SKIPPED, BuildState.BUILD_PENDING},
    BuildState.BUILD_PENDING: {BuildState.BUILD_RUNNING},
    BuildState.BUILD_RUNNING: {BuildState.BUILD_SUCCEEDED, BuildState.BUILD_FAILED},
    BuildState.BUILD_SUCCEEDED: {BuildState.STORED, BuildState.STORE_FAILED},
    BuildState.EXISTS_SKIPPED: set(),  # terminal
    BuildState.BUILD_FAILED: set(),  # terminal
    BuildState.STORED: set(),  # terminal
    BuildState.STORE_FAILED: set(),  # terminal
}

TERMINAL_STATES: frozenset[BuildState] = frozenset(
    state for state, targets in VALID_TRANSITIONS.items() if not targets
)

FAILED_STATES: frozenset[BuildState] = frozenset(
    {BuildState.BUILD_FAILED, BuildState.STORE_FAILED}
)


class BuildPlanEntry(BaseModel):
    """Whether one unit needs a build, decided before any build runs."""

    model_config = ConfigDict(frozen=True)

    unit_name: str
    artifact_name: str
    exists: bool
    build_needed: bool


class BuildOutcome(BaseModel):
    """Final state of one unit after a build invocation."""

    model_config = ConfigDict(frozen=True)

    unit_name: str
    artifact_name: str
    state: BuildState
    error: str | None = None

    @property
    def failed(self) -> bool:
        return self.state in FAILED_STATES


class BuildReport(BaseModel):
    """All outcomes of one build invocation, in selection order."""

    model_config = ConfigDict(frozen=True)

    outcomes: list[BuildOutcome] = []

    @property
    def failed(self) -> list[BuildOutcome]:
        return [o for o in self.outcomes if o.failed]

    @property
    def stored(self) -> list[BuildOutcome]:
        return [o for o in self.outcomes if o.state == BuildState.STORED]

    @property
    def skipped(self) -> list[BuildOutcome]:
        return [o for o in self.outcomes if o.state == BuildState.EXISTS_SKIPPED]

    @property
    def ok(self) -> bool:
        return not self.failed


class DeployOutcome(BaseModel):
    """One unit or asset successfully unpacked into its deploy location."""

    model_config = ConfigDict(frozen=True)

    name: str
    artifact_name: str
    deploy_path: str


class CleanupOutcome(BaseModel):
    """Result of clearing one asset deploy location."""

    model_config = ConfigDict(frozen=True)

    name: str
    deploy_path: str
    removed_entries: int = 0
    skipped: bool = False  # directory did not exist
