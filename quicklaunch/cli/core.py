"""Shared CLI application context and setup helpers."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

import typer
from loguru import logger
from rich.console import Console

from quicklaunch import __logo__, __version__

if TYPE_CHECKING:
    from quicklaunch.app.context import LauncherContext

app = typer.Typer(
    name="quicklaunch",
    help=f"{__logo__} quicklaunch - frecency-ranked launcher database",
    no_args_is_help=True,
)

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"{__logo__} quicklaunch v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(None, "--version", "-V", callback=version_callback, is_eager=True),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """quicklaunch - frecency-ranked launcher database."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING")


@contextmanager
def launcher_context() -> Iterator[LauncherContext]:
    """Build a context from the saved config and close it afterwards."""
    from quicklaunch.app.context import LauncherContext
    from quicklaunch.config.loader import load_config
    from quicklaunch.frecency.errors import StorageIOError, StorageLockError

    try:
        ctx = LauncherContext(load_config())
    except (StorageIOError, StorageLockError) as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1) from e
    try:
        yield ctx
    finally:
        ctx.close()


def require_plugin(ctx: LauncherContext, plugin: str) -> None:
    if plugin not in ctx.plugins:
        enabled = ", ".join(ctx.plugins) or "none"
        console.print(f"[red]Plugin '{plugin}' is not enabled (enabled: {enabled})[/red]")
        raise typer.Exit(1)
