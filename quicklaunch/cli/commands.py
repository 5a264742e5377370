"""CLI commands for quicklaunch."""

import json
from datetime import datetime

import typer
from rich.table import Table

from quicklaunch import __logo__
from quicklaunch.cli.core import app, console, launcher_context, require_plugin
from quicklaunch.frecency.models import RescanReport
from quicklaunch.utils.helpers import truncate_string


def _format_time(ts: float) -> str:
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


@app.command()
def search(
    text: str = typer.Argument("", help="Search text; empty lists by frecency alone"),
    plugin: str = typer.Option("apps", "--plugin", "-p", help="Database to search"),
    limit: int | None = typer.Option(None, "--limit", "-n", min=1, help="Maximum results"),
) -> None:
    """Search a database, best match first."""
    with launcher_context() as ctx:
        require_plugin(ctx, plugin)
        hits = ctx.search(plugin, text, limit)

    if not hits:
        console.print("No matches.")
        return

    table = Table(title=f"{plugin}: {text!r}")
    table.add_column("ID", justify="right")
    table.add_column("Name")
    table.add_column("Score", justify="right")
    for hit in hits:
        table.add_row(str(hit.id), truncate_string(hit.item.sort_string(), 60), f"{hit.score:.3f}")
    console.print(table)


@app.command()
def record(
    item_id: int = typer.Argument(..., help="Item id as shown by search"),
    plugin: str = typer.Option("apps", "--plugin", "-p"),
    weight: float = typer.Option(1.0, "--weight", "-w", help="Launch weight"),
) -> None:
    """Record a launch of an item."""
    with launcher_context() as ctx:
        require_plugin(ctx, plugin)
        if not ctx.record_launch(plugin, item_id, weight):
            console.print(f"[red]No item with id {item_id} in {plugin}[/red]")
            raise typer.Exit(1)
        hit = ctx.get(plugin, item_id)

    name = hit.item.sort_string() if hit else str(item_id)
    console.print(f"[green]✓[/green] Recorded launch of {name}")


@app.command()
def show(
    item_id: int = typer.Argument(..., help="Item id as shown by search"),
    plugin: str = typer.Option("apps", "--plugin", "-p"),
) -> None:
    """Show one stored item."""
    with launcher_context() as ctx:
        require_plugin(ctx, plugin)
        hit = ctx.get(plugin, item_id)

    if hit is None:
        console.print(f"[red]No item with id {item_id} in {plugin}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold]{hit.item.sort_string()}[/bold]")
    console.print(f"id: {hit.id}")
    console.print(f"score: {hit.score:.3f}")
    console.print(json.dumps(hit.item.model_dump(mode="json"), indent=2))


def _report_row(table: Table, name: str, report: RescanReport | None) -> None:
    if report is None:
        table.add_row(name, "-", "-", "-", "-", "[yellow]already running[/yellow]")
        return
    table.add_row(
        name,
        str(report.scanned),
        str(report.merge.kept),
        str(report.merge.added),
        str(report.merge.removed),
        str(len(report.errors)),
    )


@app.command()
def rescan(
    plugin: str | None = typer.Option(None, "--plugin", "-p", help="Only rescan this database"),
) -> None:
    """Rescan item sources and merge them into the databases."""
    with launcher_context() as ctx:
        if plugin is not None:
            require_plugin(ctx, plugin)
            results = {plugin: ctx.rescan(plugin)}
        else:
            results = ctx.rescan_all()

    table = Table(title="Rescan")
    table.add_column("Plugin")
    table.add_column("Scanned", justify="right")
    table.add_column("Kept", justify="right")
    table.add_column("Added", justify="right")
    table.add_column("Removed", justify="right")
    table.add_column("Errors", justify="right")
    for name, report in results.items():
        _report_row(table, name, report)
    console.print(table)


@app.command()
def stats() -> None:
    """Show database status."""
    with launcher_context() as ctx:
        rows = ctx.stats()

    if not rows:
        console.print("No plugins enabled.")
        return

    table = Table(title="Frecency Databases")
    table.add_column("Plugin")
    table.add_column("Records", justify="right")
    table.add_column("Reference time")
    table.add_column("Half-life (h)", justify="right")
    table.add_column("Path")
    for row in rows:
        table.add_row(
            str(row["name"]),
            str(row["records"]),
            _format_time(row["reference_time"]),
            f"{row['half_life'] / 3600:g}",
            str(row.get("path") or ""),
        )
    console.print(table)


@app.command()
def rebaseline() -> None:
    """Move every database's reference time to now."""
    with launcher_context() as ctx:
        moved = ctx.rebaseline()

    for name, changed in moved.items():
        status = "[green]rebaselined[/green]" if changed else "[dim]unchanged[/dim]"
        console.print(f"{name}: {status}")


@app.command("config-init")
def config_init() -> None:
    """Write a default configuration file."""
    from quicklaunch.config.loader import get_config_path, save_config
    from quicklaunch.config.schema import Config

    config_path = get_config_path()

    if config_path.exists():
        console.print(f"[yellow]Config already exists at {config_path}[/yellow]")
        if not typer.confirm("Overwrite?"):
            raise typer.Exit()

    save_config(Config())
    console.print(f"[green]✓[/green] Created config at {config_path}")
    console.print(f"\n{__logo__} quicklaunch is ready!")
    console.print("Next: [cyan]quicklaunch rescan[/cyan] then [cyan]quicklaunch search firefox[/cyan]")
