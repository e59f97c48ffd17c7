"""Installation directory layout.

Every file the installer reads or writes is a fixed suffix of the
installation root. InstallPaths is built once from the root and passed to
each component.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import structlog

from starship_setup.core.errors import DirectoryError

logger = structlog.get_logger()


@dataclass(frozen=True)
class InstallPaths:
    """Paths of an installation rooted at ``root``."""

    root: Path

    # Installed artifacts
    @property
    def binary_file(self) -> Path:
        return self.root / "starship.AppImage"

    @property
    def controller_db_file(self) -> Path:
        return self.root / "gamecontrollerdb.txt"

    @property
    def version_file(self) -> Path:
        return self.root / "VERSION"

    @property
    def data_archive(self) -> Path:
        return self.root / "starship.o2r"

    @property
    def rom_archive(self) -> Path:
        return self.root / "sf64.o2r"

    @property
    def rom_dir(self) -> Path:
        return self.root / "rom"

    # Packer working area
    @property
    def packer_dir(self) -> Path:
        return self.root / "generate-o2r"

    @property
    def packer_binary(self) -> Path:
        return self.packer_dir / "torch-latest"

    @property
    def packer_output(self) -> Path:
        return self.packer_dir / "sf64.o2r"

    @property
    def packer_config(self) -> Path:
        return self.packer_dir / "config.yml"

    @property
    def packer_assets_dir(self) -> Path:
        return self.packer_dir / "assets"

    @property
    def packer_include_dir(self) -> Path:
        return self.packer_dir / "include"

    # Staging area for manual downloads
    @property
    def staging_dir(self) -> Path:
        return self.root / "downloads"

    @property
    def staged_binary_bundle(self) -> Path:
        return self.staging_dir / "Starship-linux.zip"

    @property
    def staged_data_bundle(self) -> Path:
        return self.staging_dir / "starship.o2r.zip"

    @property
    def staged_binary(self) -> Path:
        return self.staging_dir / "starship.appimage"

    @property
    def staged_controller_db(self) -> Path:
        return self.staging_dir / "gamecontrollerdb.txt"

    @property
    def staged_data_archive(self) -> Path:
        return self.staging_dir / "starship.o2r"

    @property
    def staged_packer_config(self) -> Path:
        return self.staging_dir / "config.yml"

    @property
    def staged_assets_dir(self) -> Path:
        return self.staging_dir / "assets"

    def packer_input(self, rom_file: Path) -> Path:
        """Location of the ROM copy handed to the packer."""
        return self.packer_dir / rom_file.name

    def is_installed(self) -> bool:
        """Whether a previous installation left its binary behind."""
        return self.binary_file.is_file()

    @classmethod
    def create(cls, root: Path) -> InstallPaths:
        """Create the installation root and return its layout.

        Raises:
            DirectoryError: If the directory cannot be created or is not a directory
        """
        root = root.expanduser()
        try:
            root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DirectoryError(
                f"failed to create or access the installation directory: {root} ({e})"
            ) from e

        if not root.is_dir():
            raise DirectoryError(
                f"failed to create or access the installation directory: {root}"
            )

        logger.debug("install_root_ready", root=str(root))
        return cls(root.resolve())
