"""Placement of downloaded artifacts and ROM acquisition."""

from __future__ import annotations

import zipfile
from pathlib import Path

import structlog

from starship_setup.core.checksum import verify_file_digest
from starship_setup.core.config import SetupConfig
from starship_setup.core.errors import ChecksumMismatch, InstallError
from starship_setup.core.layout import LayoutMigrator, LayoutStage
from starship_setup.core.paths import InstallPaths
from starship_setup.core.prompts import CANCEL_HINT, Operator
from starship_setup.core.utils import make_executable, replace_path

logger = structlog.get_logger()


class InstallManager:
    """Install staged artifacts into the installation directory.

    Nothing is rolled back on failure: files moved before an error stay
    where they were moved.

    Args:
        config: Application configuration
        paths: Installation layout
        operator: Terminal interaction
        migrator: Legacy layout cleanup, built from ``paths`` when None
    """

    def __init__(
        self,
        config: SetupConfig,
        paths: InstallPaths,
        operator: Operator,
        migrator: LayoutMigrator | None = None,
    ) -> None:
        self.config = config
        self.paths = paths
        self.operator = operator
        self.migrator = migrator or LayoutMigrator(paths.root, self.confirm_removal)

    def confirm_removal(self, path: Path) -> bool:
        """Ask whether a retired folder may be deleted."""
        self.operator.say(f'The folder "[cyan]{path}[/cyan]" is no longer used or needed.')
        return self.operator.confirm("Would you like to delete it? (y/n): ")

    def _unpack(self, bundle: Path, label: str) -> None:
        if not bundle.is_file():
            raise InstallError(f'{label} not found at "{bundle}".')
        try:
            with zipfile.ZipFile(bundle) as archive:
                archive.extractall(self.paths.staging_dir)
        except zipfile.BadZipFile as e:
            raise InstallError(f'{label} at "{bundle}" is not a valid zip archive.') from e
        logger.debug("bundle_unpacked", bundle=str(bundle))

    def _place(self, source: Path, destination: Path, label: str) -> Path:
        if not source.exists():
            raise InstallError(f'{label} not found at "{source}".')
        placed = replace_path(source, destination)
        logger.info("artifact_placed", artifact=label, path=str(placed))
        return placed

    def install_binary(self) -> None:
        """Unpack the binary bundle and place the AppImage and controller database."""
        self._unpack(self.paths.staged_binary_bundle, "Linux binary artifact")
        if not self.paths.staged_binary.is_file():
            raise InstallError(f'Game binary not found at "{self.paths.staged_binary}".')

        self.paths.staged_binary_bundle.unlink()
        binary = self._place(self.paths.staged_binary, self.paths.binary_file, "Game binary")
        make_executable(binary)
        self._place(
            self.paths.staged_controller_db,
            self.paths.controller_db_file,
            "Controller database",
        )

    def install_data(self) -> None:
        """Unpack the data bundle and place the game data archive."""
        self._unpack(self.paths.staged_data_bundle, "O2R artifact")
        self._place(self.paths.staged_data_archive, self.paths.data_archive, "O2R archive")
        self.paths.staged_data_bundle.unlink()

    def install_artifacts(self) -> None:
        """Place every staged artifact and drop the superseded data archive."""
        self.install_binary()
        self.install_data()
        self.migrator.apply(LayoutStage.artifacts_placed)
        self.operator.say("[green]Download was successful.[/green]")

    def find_rom(self) -> Path | None:
        """First ROM file in the ROM directory, by name."""
        if not self.paths.rom_dir.is_dir():
            return None
        candidates = sorted(
            p for p in self.paths.rom_dir.glob(f"*{self.config.rom_extension}") if p.is_file()
        )
        return candidates[0] if candidates else None

    def acquire_rom(self) -> Path:
        """Wait until a ROM with the expected digest is in place.

        A missing or mismatching ROM is reported and the operator may fix it
        and retry as many times as needed.

        Returns:
            The verified ROM file

        Raises:
            OperationCancelled: If the operator cancels
        """
        self.paths.rom_dir.mkdir(parents=True, exist_ok=True)
        expected = self.config.rom_sha1
        found: list[Path] = []
        prompt = [f"Press Enter to continue, or {CANCEL_HINT}: "]

        def rom_ready() -> bool:
            rom = self.find_rom()
            if rom is None:
                self.operator.say(
                    f'[yellow]No {self.config.rom_extension} files found in "{self.paths.rom_dir}".[/yellow]'
                )
                self.operator.say(f'Please place the ROM file in "[cyan]{self.paths.rom_dir}[/cyan]".')
                prompt[0] = f"Press Enter to continue, or {CANCEL_HINT}: "
                return False

            try:
                verify_file_digest(rom, expected)
            except ChecksumMismatch as e:
                logger.warning("rom_checksum_mismatch", path=str(rom), expected=e.expected, actual=e.actual)
                self.operator.say("[red]ROM file SHA-1 does not match the expected value.[/red]")
                self.operator.say(f"[yellow]Expected: {e.expected}[/yellow]")
                self.operator.say(f"[red]Found: {e.actual}[/red]")
                prompt[0] = f"Replace the file and try again, or {CANCEL_HINT}: "
                return False

            found.append(rom)
            return True

        gate = self.operator.gate(rom_ready, lambda: prompt[0], name="rom")
        gate.wait()

        rom = found[-1]
        self.operator.say("[green]ROM file verified successfully. SHA-1 matches.[/green]")
        logger.info("rom_verified", path=str(rom))

        for removed in self.migrator.apply(LayoutStage.rom_verified):
            self.operator.say(f'[yellow]Folder "[cyan]{removed}[/cyan]" has been deleted.[/yellow]')
        for _, legacy in self.migrator.pending(LayoutStage.rom_verified):
            self.operator.say(
                f'[yellow]Folder "[cyan]{self.paths.root / legacy.relative}[/cyan]" was not deleted.[/yellow]'
            )

        return rom
