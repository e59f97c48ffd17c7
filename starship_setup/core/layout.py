"""Versioned installation layout and legacy cleanup.

Older releases of the port shipped OTR archives and generated them in a
``generate-otr`` directory; earlier installer revisions also kept a clone
of the game sources. Each layout change is described by a LayoutMigration
listing the paths it retired and the install stage after which they may be
removed. LayoutMigrator applies those removals as the install reaches each
stage.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

import structlog

from starship_setup.core.utils import remove_path

logger = structlog.get_logger()


class LayoutStage(Enum):
    """Points of the install after which legacy paths become removable."""

    artifacts_placed = "artifacts_placed"
    rom_verified = "rom_verified"
    packer_prepared = "packer_prepared"
    packer_completed = "packer_completed"


@dataclass(frozen=True)
class LegacyPath:
    """A path retired by a layout migration."""

    relative: str
    stage: LayoutStage
    description: str
    confirm: bool = False


@dataclass(frozen=True)
class LayoutMigration:
    """Transition between two layout versions."""

    from_version: int
    to_version: int
    description: str
    legacy_paths: tuple[LegacyPath, ...]


OTR_TO_O2R = LayoutMigration(
    from_version=1,
    to_version=2,
    description="OTR archives replaced by O2R archives",
    legacy_paths=(
        LegacyPath("starship.otr", LayoutStage.artifacts_placed, "legacy game data archive"),
        LegacyPath("generate-otr", LayoutStage.packer_prepared, "legacy OTR generation folder"),
        LegacyPath("sf64.otr", LayoutStage.packer_completed, "legacy ROM archive"),
    ),
)

SOURCES_RETIRED = LayoutMigration(
    from_version=2,
    to_version=3,
    description="Game sources checkout no longer needed",
    legacy_paths=(
        LegacyPath("sources", LayoutStage.rom_verified, "game sources folder", confirm=True),
    ),
)

MIGRATIONS: tuple[LayoutMigration, ...] = (OTR_TO_O2R, SOURCES_RETIRED)
CURRENT_LAYOUT_VERSION = MIGRATIONS[-1].to_version


class LayoutMigrator:
    """Remove legacy paths of an installation stage by stage.

    Args:
        root: Installation root
        confirm: Asked before removing paths flagged ``confirm``; receives the
            path and returns True to delete it
        migrations: Migrations to apply, oldest first
    """

    def __init__(
        self,
        root: Path,
        confirm: Callable[[Path], bool],
        migrations: tuple[LayoutMigration, ...] = MIGRATIONS,
    ) -> None:
        self.root = root
        self.confirm = confirm
        self.migrations = migrations

    def pending(self, stage: LayoutStage | None = None) -> list[tuple[LayoutMigration, LegacyPath]]:
        """Legacy paths present on disk, optionally restricted to one stage."""
        found = []
        for migration in self.migrations:
            for legacy in migration.legacy_paths:
                if stage is not None and legacy.stage is not stage:
                    continue
                path = self.root / legacy.relative
                if path.exists() or path.is_symlink():
                    found.append((migration, legacy))
        return found

    def apply(self, stage: LayoutStage) -> list[Path]:
        """Remove the legacy paths retired at ``stage``.

        Returns:
            Paths that were removed
        """
        removed: list[Path] = []
        for migration, legacy in self.pending(stage):
            path = self.root / legacy.relative
            if legacy.confirm and not self.confirm(path):
                logger.info("legacy_path_kept", path=str(path), layout=migration.to_version)
                continue

            remove_path(path)
            removed.append(path)
            logger.info(
                "legacy_path_removed",
                path=str(path),
                description=legacy.description,
                layout=migration.to_version,
            )

        return removed
