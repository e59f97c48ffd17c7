"""Steam / Steam Deck setup instructions."""

from __future__ import annotations

from pathlib import Path

import click
from rich.console import Console

from starship_setup.core.config import SetupConfig
from starship_setup.core.paths import InstallPaths


def _get_context_objects(ctx: click.Context) -> tuple[SetupConfig, Console]:
    """Extract context objects from Click context."""
    return ctx.obj["config"], ctx.obj["console"]


def print_instructions(console: Console, paths: InstallPaths) -> None:
    """Print the manual steps that follow a successful install."""
    c = "cyan"
    console.print(f"[{c}]Installation complete![/{c}]")
    console.print("\n[yellow]Follow these steps to set up and run the game from Steam:[/yellow]")
    console.print(f'\n1. Add "[{c}]{paths.binary_file}[/{c}]" to [{c}]Steam[/{c}].')
    console.print(f"   - Use the [{c}]SteamGridDB Decky plugin[/{c}] to set the artwork, or set it manually.")
    console.print(f"\n2. In [{c}]Steam Input[/{c}] for the newly added game, set the layout to:")
    console.print('   "[blue]Gamepad with Mouse Trackpad[/blue]".')
    console.print(f"   - Edit the layout and set the [{c}]right trackpad click[/{c}] to [{c}]left mouse click[/{c}].")
    console.print("\n3. Configure additional buttons in the layout (optional):")
    console.print(
        f'   - Assign "[{c}]Select/View[/{c}]" to keyboard key [{c}]F1[/{c}] '
        f"using a [{c}]long press activation[/{c}]."
    )
    console.print(f"   - Alternatively, use one of the rear buttons for the [{c}]F1 key[/{c}].")
    console.print(f"   - Assign [{c}]F11[/{c}] to a back key for full-screen mode toggle.")
    console.print("\n4. Run the game for the first time to configure the graphic settings:")
    console.print(
        f"   - Use the [{c}]F1[/{c}] action button (configured earlier) to open the "
        f"[{c}]Enhancements Menu[/{c}]."
    )
    console.print(f"   - In the [{c}]Graphics[/{c}] section:")
    console.print(
        f"     - Set [{c}]FPS[/{c}] to [{c}]30[/{c}] (Linux build currently crashes with higher FPS)."
    )
    console.print(f"     - Set [{c}]MSAA[/{c}] to [{c}]2x[/{c}] or [{c}]4x[/{c}].")
    console.print(f"   - In [{c}]Graphics/Resolution Editor[/{c}]:")
    console.print(f"     - Enable [{c}]Advanced settings[/{c}].")
    console.print(f"     - Enable [{c}]Set fixed vertical resolution[/{c}] and set it to [{c}]800[/{c}].")
    console.print(f"     - Set [{c}]Force aspect ratio[/{c}] to [{c}]16:10 (8:5)[/{c}].")
    console.print("\n[green]You're all set! Enjoy the game![/green]")


@click.command("instructions", short_help="Show Steam setup instructions.")
@click.option(
    "--dir",
    "install_dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Installation directory (defaults to the configured one)",
)
@click.pass_context
def instructions(ctx: click.Context, install_dir: Path | None) -> None:
    """Show the Steam and Steam Deck setup steps for an installation."""
    config, console = _get_context_objects(ctx)
    root = (install_dir or config.default_install_dir).expanduser()
    print_instructions(console, InstallPaths(root))
