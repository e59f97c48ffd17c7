"""Shared utilities for starship-setup."""

from __future__ import annotations

import shutil
import stat
from collections.abc import Iterator
from pathlib import Path
from typing import BinaryIO


def chunked_read(
    stream: BinaryIO,
    chunk_size: int = 65536
) -> Iterator[bytes]:
    """Read stream in chunks.

    Args:
        stream: Binary stream to read from
        chunk_size: Size of each chunk in bytes

    Yields:
        Data chunks as bytes

    Raises:
        ValueError: If chunk_size is not positive

    Example:
        >>> import io
        >>> stream = io.BytesIO(b"hello world")
        >>> list(chunked_read(stream, chunk_size=5))
        [b'hello', b' worl', b'd']
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")

    while True:
        chunk = stream.read(chunk_size)
        if not chunk:
            break
        yield chunk


def validate_hash_string(hash_str: str, length: int | None = None) -> bool:
    """Validate hex hash string.

    Args:
        hash_str: Hash string to validate
        length: Required number of hex characters, if any

    Returns:
        True if valid hex string, False otherwise

    Example:
        >>> validate_hash_string("deadbeef")
        True
        >>> validate_hash_string("deadbeef", length=40)
        False
        >>> validate_hash_string("invalid")
        False
    """
    if not hash_str or hash_str != hash_str.strip() or ' ' in hash_str or '\t' in hash_str:
        return False
    if length is not None and len(hash_str) != length:
        return False
    try:
        bytes.fromhex(hash_str)
        return True
    except ValueError:
        return False


def make_executable(path: Path) -> None:
    """Add user, group and other execute bits to a file."""
    mode = path.stat().st_mode
    path.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)


def remove_path(path: Path) -> bool:
    """Remove a file or directory tree if it exists.

    Returns:
        True if something was removed
    """
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
        return True
    if path.exists() or path.is_symlink():
        path.unlink()
        return True
    return False


def replace_path(source: Path, destination: Path) -> Path:
    """Move source onto destination, removing whatever was there first."""
    remove_path(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    return Path(shutil.move(str(source), str(destination)))
