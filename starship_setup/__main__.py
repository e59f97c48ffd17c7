"""Main entry point for starship-setup CLI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Any

import click
import structlog
from rich.console import Console

from starship_setup import __version__
from starship_setup.commands.install import install
from starship_setup.commands.instructions import instructions
from starship_setup.commands.status import status
from starship_setup.core.config import SetupConfig


def configure_logging(level: str = "WARNING") -> None:
    """Configure structured logging."""
    logging.basicConfig(level=getattr(logging, level), format="%(message)s", stream=sys.stderr)
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


configure_logging()

logger = structlog.get_logger()


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="starship-setup")
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, path_type=Path),
    help="Configuration file path",
)
@click.option("--debug", "-d", is_flag=True, help="Enable debug output")
@click.pass_context
def main(ctx: click.Context, config: Path | None, debug: bool) -> None:
    """Install or update Starship (Star Fox 64 PC port) on Linux.

    Without a command, runs the interactive installer.
    """
    ctx.ensure_object(dict)

    try:
        app_config = SetupConfig.load(config)
    except Exception as e:
        logger.error("Failed to load configuration", error=str(e))
        sys.exit(1)

    if debug:
        app_config.log_level = "DEBUG"
    logging.getLogger().setLevel(app_config.log_level)

    ctx.obj.setdefault("config", app_config)
    ctx.obj.setdefault("console", Console())
    ctx.obj["debug"] = debug

    logger.debug("CLI initialized", config=app_config.model_dump(mode="json"))

    if ctx.invoked_subcommand is None:
        ctx.invoke(install)


main.add_command(install)
main.add_command(instructions)
main.add_command(status)


def handle_exception(exc_type: type[BaseException], exc_value: BaseException, exc_traceback: Any) -> None:
    """Handle uncaught exceptions."""
    if issubclass(exc_type, KeyboardInterrupt):
        logger.info("Operation cancelled by user")
        sys.exit(1)

    logger.error(
        "Uncaught exception",
        exc_info=(exc_type, exc_value, exc_traceback),
    )
    sys.exit(1)


if __name__ == "__main__":
    sys.excepthook = handle_exception

    try:
        main()
    except Exception as e:
        logger.error("CLI execution failed", error=str(e))
        sys.exit(1)
