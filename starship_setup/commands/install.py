"""Interactive install / update command."""

from __future__ import annotations

from pathlib import Path

import click
import structlog
from rich.console import Console
from rich.markup import escape

from starship_setup.commands.instructions import print_instructions
from starship_setup.core.config import SetupConfig
from starship_setup.core.errors import SetupError
from starship_setup.core.paths import InstallPaths
from starship_setup.core.prompts import Operator
from starship_setup.core.workflow import SetupOutcome, SetupWorkflow

logger = structlog.get_logger()


def _get_context_objects(ctx: click.Context) -> tuple[SetupConfig, Console, Operator]:
    """Extract context objects from Click context."""
    config = ctx.obj["config"]
    console = ctx.obj["console"]
    operator = ctx.obj.get("operator") or Operator(console)
    return config, console, operator


def choose_install_dir(operator: Operator, default: Path) -> Path:
    """Ask for the installation directory, offering ``default``."""
    operator.say(
        "[yellow]Please specify the installation directory. Press Enter to use the default: "
        f'"[/yellow][cyan]{default}[/cyan][yellow]".[/yellow]'
    )
    answer = operator.ask(f"Installation Directory [{default}]: ", default=str(default))
    return Path(answer).expanduser()


@click.command("install", short_help="Install or update the game.")
@click.pass_context
def install(ctx: click.Context) -> None:
    """Install the latest build, or update an existing installation.

    Resolves the latest successful build, waits for the artifacts to be
    downloaded manually, verifies the ROM, generates the ROM archive with
    Torch and finally prints the Steam setup steps.
    """
    config, console, operator = _get_context_objects(ctx)

    try:
        root = choose_install_dir(operator, config.default_install_dir)
        paths = InstallPaths.create(root)
        operator.say(f'[green]Installation directory set to:[/green] "[cyan]{paths.root}[/cyan]".')

        workflow = SetupWorkflow(config, paths, operator)
        try:
            outcome = workflow.run()
        finally:
            workflow.resolver.close()
            workflow.packer.close()
    except (SetupError, OSError, EOFError) as e:
        message = "Operation canceled by the user." if isinstance(e, EOFError) else str(e)
        console.print(f"[red]Error: {escape(message)}[/red]")
        logger.debug("setup_failed", error_type=type(e).__name__, error=message)
        ctx.exit(1)

    if outcome is not SetupOutcome.up_to_date:
        print_instructions(console, paths)
