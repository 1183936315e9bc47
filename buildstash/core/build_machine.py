"""Per-unit build state machine.

Enforces:
- Valid state transitions only (VALID_TRANSITIONS table)
- Every unit starts NOT_CHECKED and ends in a terminal state
- Every transition is logged with its reason
"""

from __future__ import annotations

import logging

from buildstash.core.errors import BuildstashError
from buildstash.models.builds import (
    TERMINAL_STATES,
    VALID_TRANSITIONS,
    BuildOutcome,
    BuildReport,
    BuildState,
)

logger = logging.getLogger(__name__)


class InvalidTransitionError(BuildstashError):
    """Raised when a requested state transition is not valid."""


class BuildStateMachine:
    """Tracks the build state of each unit in one invocation.

    Parameters
    ----------
    unit_names:
        Units in selection order. Report order follows this order.
    """

    def __init__(self, unit_names: list[str]) -> None:
        self._states: dict[str, BuildState] = {
            name: BuildState.NOT_CHECKED for name in unit_names
        }
        self._artifacts: dict[str, str] = {}
        self._errors: dict[str, str] = {}

    def state(self, unit_name: str) -> BuildState:
        return self._states[unit_name]

    def set_artifact(self, unit_name: str, artifact_name: str) -> None:
        self._artifacts[unit_name] = artifact_name

    def transition(
        self, unit_name: str, target: BuildState, *, error: str | None = None
    ) -> None:
        """Move ``unit_name`` to ``target``, recording ``error`` if given."""
        current = self._states[unit_name]
        allowed = VALID_TRANSITIONS.get(current, set())
        if target not in allowed:
            raise InvalidTransitionError(
                f"Cannot transition {unit_name} from {current.value} to {target.value}. "
                f"Allowed: {sorted(s.value for s in allowed)}"
            )
        self._states[unit_name] = target
        if error:
            self._errors[unit_name] = error
        logger.debug("%s: %s -> %s", unit_name, current.value, target.value)

    def pending(self) -> list[str]:
        """Units waiting to be built, in selection order."""
        return [n for n, s in self._states.items() if s == BuildState.BUILD_PENDING]

    def report(self) -> BuildReport:
        """Freeze the current states into a ``BuildReport``.

        Every unit must have reached a terminal state.
        """
        unfinished = [n for n, s in self._states.items() if s not in TERMINAL_STATES]
        if unfinished:
            raise InvalidTransitionError(
                f"Units not in a terminal state: {', '.join(unfinished)}"
            )
        return BuildReport(
            outcomes=[
                BuildOutcome(
                    unit_name=name,
                    artifact_name=self._artifacts.get(name, ""),
                    state=state,
                    error=self._errors.get(name),
                )
                for name, state in self._states.items()
            ]
        )
