"""Per-invocation CLI state shared by every command through ``ctx.obj``."""

from __future__ import annotations

import logging

import typer
from rich.console import Console

from buildstash.config import BuildstashSettings
from buildstash.core.errors import BuildstashError
from buildstash.core.hasher import GitContentHasher
from buildstash.core.loader import load_artifacts_config
from buildstash.core.repository import RepositoryAdapter, create_repository
from buildstash.models.config import ArtifactsConfig
from buildstash.monitor.renderer import BuildstashRenderer, ConsoleReporter


def configure_logging(level: str) -> None:
    """Send log records to stderr at ``level``."""
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


class CliState:
    """Settings plus the collaborators built from them for one command.

    Parameters
    ----------
    settings:
        Settings after CLI overrides were applied.
    console:
        Console for command output.
    """

    def __init__(self, settings: BuildstashSettings, console: Console | None = None) -> None:
        self.settings = settings
        self.console = console or Console()
        self.renderer = BuildstashRenderer(self.console)

    def load_config(self) -> ArtifactsConfig:
        return load_artifacts_config(self.settings.artifacts_file)

    def repository(self, config: ArtifactsConfig) -> RepositoryAdapter:
        return create_repository(config, force_local=self.settings.force_local)

    def hasher(self) -> GitContentHasher:
        return GitContentHasher(self.settings.git_binary)

    def reporter(self) -> ConsoleReporter:
        return ConsoleReporter(self.console)

    def fail(self, exc: BuildstashError) -> typer.Exit:
        """Print ``exc`` and return the exit to raise."""
        self.renderer.print_error(str(exc))
        return typer.Exit(code=1)


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.obj
    if not isinstance(state, CliState):
        state = CliState(BuildstashSettings())
        ctx.obj = state
    return state
