"""Pytest configuration and shared fixtures for starship_setup tests."""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from rich.console import Console

from starship_setup.core.config import SetupConfig
from starship_setup.core.paths import InstallPaths
from starship_setup.core.prompts import Operator
from helpers import ROM_BYTES, ROM_SHA1, ScriptedInput


@pytest.fixture
def config(tmp_path: Path) -> SetupConfig:
    """Configuration pointing at a temporary install directory."""
    return SetupConfig(default_install_dir=tmp_path / "StarFox64PC", rom_sha1=ROM_SHA1)


@pytest.fixture
def paths(tmp_path: Path) -> InstallPaths:
    """Freshly created installation layout."""
    return InstallPaths.create(tmp_path / "StarFox64PC")


@pytest.fixture
def output() -> io.StringIO:
    """Buffer receiving console output."""
    return io.StringIO()


@pytest.fixture
def console(output: io.StringIO) -> Console:
    """Console writing plain text to a buffer."""
    return Console(file=output, width=400, no_color=True, highlight=False)


@pytest.fixture
def scripted() -> ScriptedInput:
    """Input source with no answers; tests append lines as needed."""
    return ScriptedInput()


@pytest.fixture
def operator(console: Console, scripted: ScriptedInput) -> Operator:
    return Operator(console, scripted)


@pytest.fixture
def rom_file(paths: InstallPaths) -> Path:
    """Valid ROM placed in the ROM directory."""
    paths.rom_dir.mkdir(parents=True, exist_ok=True)
    rom = paths.rom_dir / "sf64.z64"
    rom.write_bytes(ROM_BYTES)
    return rom
