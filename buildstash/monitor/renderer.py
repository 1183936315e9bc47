"""Rich terminal rendering for buildstash commands.

Color scheme
------------
- green     : stored / not needed / deployed
- yellow    : build needed
- bold red  : failed
- dim       : skipped
"""

from __future__ import annotations

from collections.abc import Iterable

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from buildstash.models.builds import (
    BuildPlanEntry,
    BuildReport,
    BuildState,
    CleanupOutcome,
)

_PROGRESS_WIDTH = 28

_STATE_LABELS: dict[BuildState, str] = {
    BuildState.NOT_CHECKED: "[dim]NOT CHECKED[/dim]",
    BuildState.EXISTS_SKIPPED: "[dim]EXISTS[/dim]",
    BuildState.BUILD_PENDING: "[yellow]PENDING[/yellow]",
    BuildState.BUILD_RUNNING: "[yellow]RUNNING[/yellow]",
    BuildState.BUILD_SUCCEEDED: "[green]BUILT[/green]",
    BuildState.BUILD_FAILED: "[bold red]BUILD FAILED[/bold red]",
    BuildState.STORED: "[green]STORED[/green]",
    BuildState.STORE_FAILED: "[bold red]STORE FAILED[/bold red]",
}


def yes_no(flag: bool) -> str:
    return "YES" if flag else "NO"


def progress_bar(done: int, total: int, width: int = _PROGRESS_WIDTH) -> str:
    """Render ``done/total`` as ``[=====>------]  42%``."""
    fraction = done / total if total else 1.0
    filled = int(fraction * width)
    bar = "=" * filled
    if filled < width:
        bar += ">" + "-" * (width - filled - 1)
    return f"{done}/{total} [{bar}] {int(fraction * 100):3d}%"


class BuildstashRenderer:
    """Prints command results with Rich.

    Parameters
    ----------
    console:
        Rich Console instance. A new one is created if not provided.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def print_pairs(self, title: str, value_header: str, rows: Iterable[tuple[str, str]]) -> None:
        """Two-column table: unit name and one value per unit."""
        table = Table(title=title, title_justify="left")
        table.add_column("Application", style="cyan")
        table.add_column(value_header)
        for name, value in rows:
            table.add_row(escape(name), escape(value))
        self.console.print(table)

    def print_build_plan(self, entries: list[BuildPlanEntry]) -> None:
        table = Table(title="Build Needed", title_justify="left")
        table.add_column("Application", style="cyan")
        table.add_column("Build Needed", justify="center")
        for entry in entries:
            label = (
                "[yellow]YES[/yellow]" if entry.build_needed else "[green]NO[/green]"
            )
            table.add_row(escape(entry.unit_name), label)
        self.console.print(table)

    def print_build_report(self, report: BuildReport) -> None:
        table = Table(title="Build Summary", title_justify="left")
        table.add_column("Application", style="cyan")
        table.add_column("Artifact")
        table.add_column("Result", justify="center")
        for outcome in report.outcomes:
            table.add_row(
                escape(outcome.unit_name),
                escape(outcome.artifact_name),
                _STATE_LABELS[outcome.state],
            )
        self.console.print(table)
        for outcome in report.failed:
            self.console.print(
                f"[bold red]{escape(outcome.unit_name)}:[/bold red] "
                f"{escape(outcome.error or '')}"
            )

    def print_cleanup(self, outcomes: list[CleanupOutcome]) -> None:
        for outcome in outcomes:
            self.console.print(f"Cleaning up deploy location for {escape(outcome.name)}")
            if outcome.skipped:
                self.console.print(
                    f"[dim] - Directory does not exist: {escape(outcome.deploy_path)}[/dim]"
                )
            else:
                self.console.print(
                    f"[green] - Successfully cleaned up {escape(outcome.deploy_path)}[/green]"
                )

    def print_error(self, message: str) -> None:
        self.console.print(f"[bold red]Error:[/bold red] {escape(message)}")


class ConsoleReporter:
    """``Reporter`` that prints build and deploy progress to a Rich console."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def plan(self, entry: BuildPlanEntry) -> None:
        self.console.print(
            f"Doing build for [cyan]{escape(entry.unit_name)}[/cyan] - {yes_no(entry.build_needed)}"
        )

    def build_started(self, unit_name: str) -> None:
        header = f"Beginning build for {unit_name} application"
        self.console.print()
        self.console.print(f"[bold]{escape(header)}[/bold]")
        self.console.print("-" * len(header))

    def build_failed(self, unit_name: str, error: str) -> None:
        self.console.print(
            f"[bold red]Build failed for {escape(unit_name)}:[/bold red] {escape(error)}"
        )

    def stored(self, unit_name: str, artifact_name: str, done: int, total: int) -> None:
        self.console.print(f"[green]Build succeeded for {escape(unit_name)}[/green]")
        self.console.print(progress_bar(done, total), highlight=False)
        self.console.print(f"-- Saved {escape(artifact_name)} to repository.")

    def store_failed(self, unit_name: str, error: str) -> None:
        self.console.print(
            f"[bold red]Failed to store artifact for {escape(unit_name)}:[/bold red] "
            f"{escape(error)}"
        )

    def deploy_step(self, name: str, step: str) -> None:
        self.console.print(f"[cyan]{escape(name)}[/cyan] - {escape(step)}")
