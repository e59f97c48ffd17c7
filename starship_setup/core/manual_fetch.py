"""Operator-driven download of authenticated artifacts."""

from __future__ import annotations

from pathlib import Path

import structlog

from starship_setup.core.errors import ManualFetchError
from starship_setup.core.github import ResolvedBuild
from starship_setup.core.paths import InstallPaths
from starship_setup.core.prompts import CANCEL_HINT, Operator

logger = structlog.get_logger()


class ManualFetchGate:
    """Wait until the operator has staged both artifact bundles.

    Args:
        paths: Installation layout
        operator: Terminal interaction
    """

    def __init__(self, paths: InstallPaths, operator: Operator) -> None:
        self.paths = paths
        self.operator = operator

    def _bundles(self, build: ResolvedBuild) -> list[tuple[str, str, Path]]:
        return [
            ("Linux binary artifact", build.binary_download_url, self.paths.staged_binary_bundle),
            ("O2R artifact", build.data_download_url, self.paths.staged_data_bundle),
        ]

    def bundles_present(self) -> bool:
        return self.paths.staged_binary_bundle.is_file() and self.paths.staged_data_bundle.is_file()

    def prepare(self) -> None:
        """Create the staging directory and drop stale bundles."""
        self.paths.staging_dir.mkdir(parents=True, exist_ok=True)
        for bundle in (self.paths.staged_binary_bundle, self.paths.staged_data_bundle):
            if bundle.exists():
                bundle.unlink()
                logger.debug("stale_bundle_removed", path=str(bundle))

    def _show_missing(self, build: ResolvedBuild) -> None:
        for label, url, path in self._bundles(build):
            if not path.is_file():
                self.operator.say(f'[red]{label} not found at "[/red][cyan]{path}[/cyan][red]".[/red]')
                self.operator.say(f"Please download it from: [cyan]{url}[/cyan]")

    def wait(self, build: ResolvedBuild) -> None:
        """Show the download links and block until both bundles are staged.

        Raises:
            ManualFetchError: If the operator cancels
        """
        say = self.operator.say
        say("[blue]GitHub authentication is required to download artifacts directly.[/blue]")
        say(
            "[yellow]Please manually download the following files and place them in the "
            f'"{self.paths.staging_dir}" folder.[/yellow]'
        )
        say(f"Linux binary artifact: [cyan]{build.binary_download_url}[/cyan]")
        say(f"O2R artifact: [cyan]{build.data_download_url}[/cyan]")

        self.prepare()

        gate = self.operator.gate(
            self.bundles_present,
            "Press Enter after placing the required files to appropriate folder, "
            f"or {CANCEL_HINT}: ",
            on_waiting=lambda: self._show_missing(build),
            cancel_error=ManualFetchError,
            name="manual_fetch",
        )
        gate.wait()

        say("[green]Both files have been downloaded successfully.[/green]")
        logger.info("bundles_staged", staging_dir=str(self.paths.staging_dir))
