"""Read-only listing commands: ``hash``, ``artifact-names``, ``hash-application``.

None of these touch the repository.
"""

from __future__ import annotations

from pathlib import Path

import typer

from buildstash.cli.state import get_state
from buildstash.core.errors import BuildstashError
from buildstash.core.hasher import fingerprint
from buildstash.core.namer import format_artifact_name
from buildstash.core.selection import parse_names, select_by_name
from buildstash.models.config import DIR_PLACEHOLDER


def hash_cmd(
    ctx: typer.Context,
    root: Path = typer.Argument(
        ..., help="Git working tree the directories are relative to (__DIR__ for the cwd)."
    ),
    directories: list[str] = typer.Argument(..., help="Directories to fingerprint."),
) -> None:
    """Print the fingerprint of one or more directories relative to a root."""
    state = get_state(ctx)
    if str(root) == DIR_PLACEHOLDER:
        root = Path.cwd()
    try:
        digest = fingerprint(root, directories, state.hasher())
    except BuildstashError as exc:
        raise state.fail(exc)
    state.console.print(digest, highlight=False)


def artifact_names_cmd(
    ctx: typer.Context,
    names: str = typer.Option(
        "", "--filter", "-f", help='Comma-separated unit names, e.g. -f "app1,app2".'
    ),
) -> None:
    """List the artifact name each unit would be stored under."""
    state = get_state(ctx)
    try:
        config = state.load_config()
        units = select_by_name(config.artifacts, parse_names(names))
        hasher = state.hasher()
        rows = [
            (
                unit.name,
                format_artifact_name(
                    unit.artifact_prefix,
                    fingerprint(config.project_root, unit.directories, hasher),
                ),
            )
            for unit in units
        ]
    except BuildstashError as exc:
        raise state.fail(exc)

    if not rows:
        state.console.print("No artifacts found")
        return
    state.renderer.print_pairs("Artifact Names", "Artifact Name", rows)


def hash_application_cmd(
    ctx: typer.Context,
    names: str = typer.Option(
        "", "--filter", "-f", help='Comma-separated unit names, e.g. -f "app1,app2".'
    ),
) -> None:
    """List the source fingerprint of each unit."""
    state = get_state(ctx)
    try:
        config = state.load_config()
        units = select_by_name(config.artifacts, parse_names(names))
        hasher = state.hasher()
        rows = [
            (unit.name, fingerprint(config.project_root, unit.directories, hasher))
            for unit in units
        ]
    except BuildstashError as exc:
        raise state.fail(exc)

    if not rows:
        state.console.print("No artifacts found")
        return
    state.renderer.print_pairs("Application Hashes", "Hash", rows)
