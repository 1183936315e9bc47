"""``do-cleanup``: empty asset deploy locations."""

from __future__ import annotations

import typer

from buildstash.cli.state import get_state
from buildstash.core.cleanup import clean_assets
from buildstash.core.errors import BuildstashError
from buildstash.core.selection import parse_names, select_by_name
from buildstash.models.requests import CleanupRequest


def do_cleanup_cmd(
    ctx: typer.Context,
    names: str = typer.Option(
        "", "--filter", "-f", help='Comma-separated asset names, e.g. -f "fonts,images".'
    ),
    exclude: str = typer.Option(
        "", "--exclude", "-e", help="Comma-separated asset names to leave alone."
    ),
) -> None:
    """Remove the contents of each selected asset's deploy location."""
    state = get_state(ctx)
    request = CleanupRequest(names=parse_names(names), exclude=parse_names(exclude))
    try:
        config = state.load_config()
        if not select_by_name(config.assets, request.names, request.exclude):
            state.console.print("No assets found")
            return
        outcomes = clean_assets(config, request)
    except BuildstashError as exc:
        raise state.fail(exc)

    state.renderer.print_cleanup(outcomes)
