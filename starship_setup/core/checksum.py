"""File digest verification for user-supplied game data."""

from __future__ import annotations

import hashlib
from pathlib import Path

import structlog

from starship_setup.core.errors import ChecksumMismatch
from starship_setup.core.utils import chunked_read

logger = structlog.get_logger()


def compute_file_digest(path: Path, algorithm: str = "sha1") -> str:
    """Compute the lowercase hex digest of a file.

    Args:
        path: File to hash
        algorithm: hashlib algorithm name

    Returns:
        Lowercase hex digest
    """
    hasher = hashlib.new(algorithm)
    with open(path, "rb") as f:
        for chunk in chunked_read(f):
            hasher.update(chunk)
    return hasher.hexdigest()


def verify_file_digest(path: Path, expected: str, algorithm: str = "sha1") -> str:
    """Verify a file against an expected hex digest.

    Args:
        path: File to verify
        expected: Expected hex digest (case-insensitive)
        algorithm: hashlib algorithm name

    Returns:
        The computed digest

    Raises:
        ChecksumMismatch: If the digest does not match
    """
    actual = compute_file_digest(path, algorithm)
    expected = expected.lower()
    if actual != expected:
        raise ChecksumMismatch(
            f"{algorithm.upper()} mismatch for {path.name}: "
            f"expected {expected}, got {actual}",
            expected=expected,
            actual=actual,
            path=path,
        )

    logger.debug("digest_verified", path=str(path), algorithm=algorithm)
    return actual
