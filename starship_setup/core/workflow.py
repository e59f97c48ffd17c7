"""End-to-end install / update sequence."""

from __future__ import annotations

from enum import Enum

import structlog

from starship_setup.core.config import SetupConfig
from starship_setup.core.github import ArtifactResolver
from starship_setup.core.installer import InstallManager
from starship_setup.core.manual_fetch import ManualFetchGate
from starship_setup.core.packer import PackerInvoker
from starship_setup.core.paths import InstallPaths
from starship_setup.core.prompts import Operator
from starship_setup.core.version import VersionRecord

logger = structlog.get_logger()


class SetupOutcome(Enum):
    """How a setup run ended."""

    installed = "installed"
    updated = "updated"
    up_to_date = "up_to_date"


class SetupWorkflow:
    """Resolve, fetch, install, pack and record a build.

    Every step runs in order on the calling thread; the only suspension
    points are operator prompts.

    Args:
        config: Application configuration
        paths: Installation layout
        operator: Terminal interaction
        resolver: Build resolver, created from ``config`` when None
        packer: Packer invoker, created from ``config`` when None
    """

    def __init__(
        self,
        config: SetupConfig,
        paths: InstallPaths,
        operator: Operator,
        resolver: ArtifactResolver | None = None,
        packer: PackerInvoker | None = None,
    ) -> None:
        self.config = config
        self.paths = paths
        self.operator = operator
        self.resolver = resolver or ArtifactResolver(config)
        self.version_record = VersionRecord(paths.version_file)
        self.installer = InstallManager(config, paths, operator)
        self.fetch_gate = ManualFetchGate(paths, operator)
        self.packer = packer or PackerInvoker(config, paths, operator, self.installer.migrator)

    def run(self) -> SetupOutcome:
        """Run the whole sequence.

        Returns:
            The outcome; ``up_to_date`` means nothing was changed

        Raises:
            SetupError: On any fatal failure or cancellation
        """
        updating = self.paths.is_installed()
        if updating:
            self.operator.say("[yellow]Updating existing installation...[/yellow]")
        else:
            self.operator.say("[yellow]First time installation...[/yellow]")

        resolved = self.resolver.resolve_run()
        if updating and self.version_record.matches(resolved.version):
            self.operator.say("[green]The latest version is already installed. Nothing to do.[/green]")
            logger.info("already_up_to_date", version=resolved.version)
            return SetupOutcome.up_to_date

        build = self.resolver.resolve_artifacts(resolved)

        self.fetch_gate.wait(build)
        self.installer.install_artifacts()

        self.operator.say("Generating O2R from ROM file...")
        rom = self.installer.acquire_rom()
        self.packer.generate(rom)

        self.version_record.write(build.version)
        self.operator.say("[green]Everything done.[/green]")

        outcome = SetupOutcome.updated if updating else SetupOutcome.installed
        logger.info("setup_finished", outcome=outcome.value, version=build.version)
        return outcome
