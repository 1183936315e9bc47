"""Main Typer application: global options and command registration.

Entry point: ``buildstash`` (configured via pyproject.toml console_scripts).
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError

from buildstash.cli.commands.build import do_builds_cmd, should_build_cmd
from buildstash.cli.commands.cleanup import do_cleanup_cmd
from buildstash.cli.commands.deploy import deploy_assets_cmd, do_deploys_cmd
from buildstash.cli.commands.listing import (
    artifact_names_cmd,
    hash_application_cmd,
    hash_cmd,
)
from buildstash.cli.state import CliState, configure_logging
from buildstash.config import BuildstashSettings

app = typer.Typer(
    name="buildstash",
    help="Buildstash: build once per source fingerprint, deploy from a shared repository.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    artifacts: Optional[Path] = typer.Option(
        None, "--artifacts", "-a", help="Path to the artifacts file. [default: ./artifacts.json]"
    ),
    local: bool = typer.Option(
        False, "--local", "-l", help="Use the local repository regardless of the artifacts file."
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Logging level (DEBUG, INFO, WARNING, ERROR)."
    ),
) -> None:
    """Load settings, apply CLI overrides and configure logging."""
    overrides: dict[str, object] = {}
    if artifacts is not None:
        overrides["artifacts_file"] = artifacts
    if local:
        overrides["force_local"] = True
    if log_level is not None:
        overrides["log_level"] = log_level

    try:
        settings = BuildstashSettings(**overrides)
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    configure_logging(settings.log_level)
    ctx.obj = CliState(settings)


# Register subcommands
app.command(name="hash", help="Print the fingerprint of directories under a root.")(hash_cmd)
app.command(name="artifact-names", help="List artifact names for each unit.")(artifact_names_cmd)
app.command(name="hash-application", help="List source fingerprints for each unit.")(
    hash_application_cmd
)
app.command(name="should-build", help="Show which units need a build.")(should_build_cmd)
app.command(name="do-builds", help="Build and store units with missing artifacts.")(
    do_builds_cmd
)
app.command(name="do-deploys", help="Deploy unit artifacts for the current source.")(
    do_deploys_cmd
)
app.command(name="deploy-assets", help="Deploy asset archives.")(deploy_assets_cmd)
app.command(name="do-cleanup", help="Empty asset deploy locations.")(do_cleanup_cmd)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
