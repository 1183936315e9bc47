"""Deploy commands: ``do-deploys`` and ``deploy-assets``."""

from __future__ import annotations

import typer

from buildstash.cli.state import get_state
from buildstash.core.deploy_orchestrator import DeployOrchestrator
from buildstash.core.errors import BuildstashError
from buildstash.core.selection import parse_names, select_by_name
from buildstash.models.requests import DeployRequest


def do_deploys_cmd(
    ctx: typer.Context,
    names: str = typer.Option(
        "", "--filter", "-f", help='Comma-separated unit names, e.g. -f "app1,app2".'
    ),
) -> None:
    """Fetch each unit's artifact for its current source and unpack it."""
    state = get_state(ctx)
    request = DeployRequest(names=parse_names(names))
    try:
        config = state.load_config()
        if not select_by_name(config.artifacts, request.names):
            state.console.print("No artifacts found")
            return
        orchestrator = DeployOrchestrator(
            config,
            state.repository(config),
            hasher=state.hasher(),
            reporter=state.reporter(),
            temp_dir=state.settings.temp_dir,
        )
        outcomes = orchestrator.deploy_units(request)
    except BuildstashError as exc:
        raise state.fail(exc)

    state.console.print(f"[green]Deployed {len(outcomes)} artifact(s).[/green]")


def deploy_assets_cmd(
    ctx: typer.Context,
    names: str = typer.Option(
        "", "--filter", "-f", help='Comma-separated asset names, e.g. -f "fonts,images".'
    ),
) -> None:
    """Fetch each configured asset archive and unpack it."""
    state = get_state(ctx)
    request = DeployRequest(names=parse_names(names))
    try:
        config = state.load_config()
        if not select_by_name(config.assets, request.names):
            state.console.print("No assets found")
            return
        orchestrator = DeployOrchestrator(
            config,
            state.repository(config),
            reporter=state.reporter(),
            temp_dir=state.settings.temp_dir,
        )
        outcomes = orchestrator.deploy_assets(request)
    except BuildstashError as exc:
        raise state.fail(exc)

    state.console.print(f"[green]Deployed {len(outcomes)} asset(s).[/green]")
