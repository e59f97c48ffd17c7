"""Starship Setup - installer for the Starship (Star Fox 64 PC) port on Linux.

Resolves the latest successful build from GitHub Actions, guides the
manual download of its artifacts, verifies the ROM and runs Torch to
generate the ROM archive.

Key modules:
- core: Workflow, configuration, paths and the individual install steps
- commands: CLI command implementations
"""

__version__ = "0.3.0"
__author__ = "Starship Setup Contributors"

from starship_setup.core.errors import (  # noqa: E402
    ChecksumMismatch,
    DirectoryError,
    InstallError,
    ManualFetchError,
    OperationCancelled,
    PackerError,
    ResolutionError,
    SetupError,
)

__all__ = [
    "__version__",
    "__author__",
    "SetupError",
    "DirectoryError",
    "ResolutionError",
    "OperationCancelled",
    "ManualFetchError",
    "ChecksumMismatch",
    "InstallError",
    "PackerError",
]
