"""Persisted record of the last successfully installed build."""

from __future__ import annotations

from pathlib import Path

import structlog

logger = structlog.get_logger()


class VersionRecord:
    """Single-line version file.

    The stored value is opaque and only ever compared for equality.

    Args:
        path: Location of the version file
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def read(self) -> str | None:
        """Return the recorded version, or None if nothing is recorded."""
        if not self.path.is_file():
            return None

        value = self.path.read_text(encoding="utf-8").strip()
        return value or None

    def matches(self, version: str) -> bool:
        """Check whether the recorded version equals ``version``."""
        return self.read() == version

    def write(self, version: str) -> None:
        """Overwrite the record with ``version``."""
        self.path.write_text(f"{version}\n", encoding="utf-8")
        logger.info("version_recorded", path=str(self.path), version=version)
