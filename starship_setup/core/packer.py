"""Torch invocation producing the ROM archive.

Torch is always fetched from its latest release. It runs inside the
packer working directory, next to the ``config.yml`` and ``assets``
folder shipped with the binary artifact, and writes ``sf64.o2r`` there.
"""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import httpx
import structlog

from starship_setup import __version__
from starship_setup.core.config import SetupConfig
from starship_setup.core.errors import InstallError, PackerError
from starship_setup.core.layout import LayoutMigrator, LayoutStage
from starship_setup.core.paths import InstallPaths
from starship_setup.core.prompts import Operator
from starship_setup.core.utils import make_executable, remove_path, replace_path

logger = structlog.get_logger()

Runner = Callable[..., "subprocess.CompletedProcess[Any]"]


class PackerInvoker:
    """Generate the ROM archive from a verified ROM.

    Args:
        config: Application configuration
        paths: Installation layout
        operator: Terminal interaction
        migrator: Legacy layout cleanup
        client: Optional preconfigured HTTP client for the Torch download
        runner: Subprocess runner, ``subprocess.run`` by default
    """

    def __init__(
        self,
        config: SetupConfig,
        paths: InstallPaths,
        operator: Operator,
        migrator: LayoutMigrator,
        client: httpx.Client | None = None,
        runner: Runner | None = None,
    ) -> None:
        self.config = config
        self.paths = paths
        self.operator = operator
        self.migrator = migrator
        self.runner = runner or subprocess.run
        self._client = client

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.config.packer.timeout,
                follow_redirects=True,
                headers={"User-Agent": f"starship-setup/{__version__}"},
            )
        return self._client

    def download(self) -> Path:
        """Download the latest Torch binary into the packer directory.

        Raises:
            PackerError: If the download fails
        """
        url = self.config.packer.download_url
        target = self.paths.packer_binary
        size = 0
        try:
            with self.client.stream("GET", url) as response:
                response.raise_for_status()
                with open(target, "wb") as f:
                    for chunk in response.iter_bytes():
                        f.write(chunk)
                        size += len(chunk)
        except httpx.HTTPError as e:
            remove_path(target)
            raise PackerError(f"failed to download Torch from {url}: {e}") from e
        except OSError as e:
            if target.is_file():
                target.unlink()
            raise PackerError(f"failed to write Torch to {target}: {e}") from e

        make_executable(target)
        logger.info("packer_downloaded", path=str(target), size=size)
        self.operator.say(f"[green]Downloaded latest TORCH to {target}.[/green]")
        return target

    def prepare(self, rom_file: Path) -> Path:
        """Set up the packer directory and return the ROM copy to pack.

        Raises:
            InstallError: If the staged config or assets are missing
            PackerError: If Torch cannot be downloaded
        """
        self.migrator.apply(LayoutStage.packer_prepared)
        self.paths.packer_dir.mkdir(parents=True, exist_ok=True)

        rom_copy = self.paths.packer_input(rom_file)
        shutil.copy2(rom_file, rom_copy)
        logger.debug("rom_copied", source=str(rom_file), destination=str(rom_copy))

        try:
            self.download()
        except PackerError:
            remove_path(rom_copy)
            raise

        staged = (
            (self.paths.staged_packer_config, self.paths.packer_config, "config.yml"),
            (self.paths.staged_assets_dir, self.paths.packer_assets_dir, "assets"),
        )
        for source, destination, label in staged:
            if not source.exists():
                raise InstallError(f"{source} not found!")
            replace_path(source, destination)
            self.operator.say(f'[green]Moved "{label}" to {self.paths.packer_dir}.[/green]')

        remove_path(self.paths.packer_include_dir)
        return rom_copy

    def command(self, rom_copy: Path) -> Sequence[str]:
        return [str(self.paths.packer_binary), self.config.packer.mode, str(rom_copy)]

    def run(self, rom_copy: Path) -> None:
        """Run Torch and relocate its output.

        Raises:
            PackerError: If Torch fails or produces no output
        """
        cmd = self.command(rom_copy)
        self.operator.say(
            f'[yellow]Executing "[/yellow][cyan]{" ".join(cmd)}[/cyan][yellow]" to generate ROM O2R...[/yellow]'
        )

        try:
            result = self.runner(cmd, cwd=self.paths.packer_dir, stdout=subprocess.DEVNULL, check=False)
        except OSError as e:
            remove_path(rom_copy)
            raise PackerError(f"torch-latest failed to execute: {e}") from e

        logger.info("packer_finished", returncode=result.returncode)
        if result.returncode != 0:
            remove_path(rom_copy)
            raise PackerError(f"torch-latest failed to execute (exit status {result.returncode}).")

        output = self.paths.packer_output
        if not output.is_file():
            remove_path(rom_copy)
            raise PackerError("torch failed to generate O2R file.")

        self.operator.say("[green]torch-latest executed successfully. Copying generated O2R...[/green]")
        replace_path(output, self.paths.rom_archive)
        remove_path(rom_copy)
        self.migrator.apply(LayoutStage.packer_completed)
        logger.info("rom_archive_installed", path=str(self.paths.rom_archive))

    def generate(self, rom_file: Path) -> Path:
        """Produce the ROM archive from a verified ROM.

        Returns:
            The installed ROM archive
        """
        rom_copy = self.prepare(rom_file)
        self.run(rom_copy)
        return self.paths.rom_archive

    def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            self._client.close()
