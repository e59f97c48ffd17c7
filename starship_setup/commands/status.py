"""Compare the installed build with the latest available one."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from starship_setup.core.config import SetupConfig
from starship_setup.core.errors import SetupError
from starship_setup.core.github import ArtifactResolver
from starship_setup.core.layout import LayoutMigrator
from starship_setup.core.paths import InstallPaths
from starship_setup.core.version import VersionRecord


def _get_context_objects(ctx: click.Context) -> tuple[SetupConfig, Console]:
    """Extract context objects from Click context."""
    return ctx.obj["config"], ctx.obj["console"]


@click.command("status", short_help="Show installed and latest versions.")
@click.option(
    "--dir",
    "install_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Installation directory (defaults to the configured one)",
)
@click.pass_context
def status(ctx: click.Context, install_dir: Path | None) -> None:
    """Show the installed version and whether an update is available.

    Nothing on disk is changed.
    """
    config, console = _get_context_objects(ctx)
    paths = InstallPaths((install_dir or config.default_install_dir).expanduser())

    installed = VersionRecord(paths.version_file).read() if paths.is_installed() else None
    legacy = LayoutMigrator(paths.root, lambda _: False).pending() if paths.root.is_dir() else []

    try:
        with ArtifactResolver(config) as resolver:
            latest = resolver.resolve_run().version
    except SetupError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        ctx.exit(1)

    table = Table(title="Starship Installation", show_header=True)
    table.add_column("Item", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Directory", str(paths.root))
    table.add_row("Installed", installed or "not installed")
    table.add_row("Latest", latest)
    table.add_row("Legacy files", ", ".join(legacy_path.relative for _, legacy_path in legacy) or "none")
    console.print(table)

    if installed == latest:
        console.print("[green]The latest version is already installed.[/green]")
    else:
        console.print("[yellow]An update is available. Run starship-setup to install it.[/yellow]")
