from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from photomirror.models import SyncStats


def render_summary(stats: SyncStats, inventory_size: int,
                   console: Optional[Console] = None, partial: bool = False):
    """
    Print the end-of-run summary: counters, then any per-item failures.
    """
    console = console or Console()

    if partial:
        console.print(
            "⚠️  [yellow]Remote listing stopped early; the library may be larger "
            "than what was synced.[/yellow]"
        )

    table = Table(title="📊 Sync Summary")
    table.add_column("Result", style="bold")
    table.add_column("Count", justify="right")
    table.add_row("Remote items", str(inventory_size))
    table.add_row("Downloaded", f"[green]{stats.downloaded}[/green]")
    table.add_row("Skipped", str(stats.skipped))
    table.add_row("Deleted", f"[cyan]{stats.deleted}[/cyan]")
    table.add_row("Errors", f"[red]{stats.errors}[/red]" if stats.errors else "0")
    console.print(table)

    for failure in stats.failures:
        console.print(f"❌ [red]{failure.kind}[/red] {escape(failure.name)}: {escape(failure.reason)}", highlight=False)

    if not stats.errors and not partial:
        console.print("✅ [bold green]Local directory matches the remote library.[/bold green]")
