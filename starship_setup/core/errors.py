"""Error taxonomy for starship-setup.

Every failure the installer can report derives from SetupError so the CLI
can turn it into a single red line and exit status 1.
"""

from __future__ import annotations

from pathlib import Path


class SetupError(Exception):
    """Base class for all installer failures."""


class DirectoryError(SetupError):
    """Raised when the installation root cannot be created or accessed."""


class ResolutionError(SetupError):
    """Raised when CI metadata is unobtainable or of a disallowed kind."""


class OperationCancelled(SetupError):
    """Raised when the operator cancels at an interactive prompt."""


class ManualFetchError(OperationCancelled):
    """Raised when the operator cancels while artifacts are being fetched."""


class InstallError(SetupError):
    """Raised when an expected bundle or staged file is missing."""


class PackerError(SetupError):
    """Raised when the packer cannot be fetched, fails, or produces nothing."""


class ChecksumMismatch(SetupError):
    """Raised when a file digest differs from the expected value.

    Attributes:
        expected: Expected hex digest
        actual: Digest computed from the file
        path: File that was verified
    """

    def __init__(
        self,
        message: str,
        *,
        expected: str,
        actual: str,
        path: Path | None = None,
    ):
        self.expected = expected
        self.actual = actual
        self.path = path
        super().__init__(message)
