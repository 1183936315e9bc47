"""Build commands: ``should-build`` and ``do-builds``."""

from __future__ import annotations

import typer

from buildstash.cli.state import get_state
from buildstash.core.build_orchestrator import BuildOrchestrator
from buildstash.core.errors import BuildstashError
from buildstash.core.selection import parse_names
from buildstash.models.requests import BuildRequest


def should_build_cmd(
    ctx: typer.Context,
    names: str = typer.Option(
        "", "--filter", "-f", help='Comma-separated unit names, e.g. -f "app1,app2".'
    ),
) -> None:
    """Show which units have no stored artifact for their current source."""
    state = get_state(ctx)
    try:
        config = state.load_config()
        orchestrator = BuildOrchestrator(
            config,
            state.repository(config),
            hasher=state.hasher(),
            temp_dir=state.settings.temp_dir,
        )
        entries = orchestrator.plan(BuildRequest(names=parse_names(names)))
    except BuildstashError as exc:
        raise state.fail(exc)

    if not entries:
        state.console.print("No artifacts found")
        return
    state.renderer.print_build_plan(entries)


def do_builds_cmd(
    ctx: typer.Context,
    names: str = typer.Option(
        "", "--filter", "-f", help='Comma-separated unit names, e.g. -f "app1,app2".'
    ),
    force: bool = typer.Option(
        False, "--force", help="Build even when the artifact already exists."
    ),
) -> None:
    """Build and store every unit whose artifact is missing from the repository."""
    state = get_state(ctx)
    request = BuildRequest(names=parse_names(names), force=force)
    try:
        config = state.load_config()
        orchestrator = BuildOrchestrator(
            config,
            state.repository(config),
            hasher=state.hasher(),
            reporter=state.reporter(),
            temp_dir=state.settings.temp_dir,
        )
        if not orchestrator.select(request):
            state.console.print("No artifacts found")
            return
        report = orchestrator.run(request)
    except BuildstashError as exc:
        raise state.fail(exc)

    state.console.print()
    state.renderer.print_build_report(report)
    if not report.ok:
        raise typer.Exit(code=1)
