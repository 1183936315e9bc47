"""Per-invocation request objects passed into the orchestrators."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict


class BuildRequest(BaseModel):
    """Which units to consider for building, and whether to force rebuilds.

    An empty ``names`` tuple selects every configured unit.
    """

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...] = ()
    force: bool = False


class DeployRequest(BaseModel):
    """Which units or assets to deploy."""

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...] = ()


class CleanupRequest(BaseModel):
    """Which asset deploy locations to clear. Exclusions win over names."""

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...] = ()
    exclude: tuple[str, ...] = ()
