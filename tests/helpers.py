"""Builders shared by the starship_setup tests."""

from __future__ import annotations

import hashlib
import subprocess
import zipfile
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Any

import httpx

from starship_setup.core.paths import InstallPaths

ROM_BYTES = b"STARFOX64" * 1024
ROM_SHA1 = hashlib.sha1(ROM_BYTES).hexdigest()

RUNS_URL = "https://api.github.com/repos/HarbourMasters/Starship/actions/runs"
RUN_HTML_URL = "https://github.com/HarbourMasters/Starship/actions/runs/1001"
ARTIFACTS_URL = "https://api.github.com/repos/HarbourMasters/Starship/actions/runs/1001/artifacts"
TORCH_URL = "https://github.com/HarbourMasters/Torch/releases/latest/download/torch"


class ScriptedInput:
    """Input source answering prompts from a fixed list of lines.

    Runs out with EOFError, like a closed terminal.
    """

    def __init__(self, lines: Iterable[str] = (), on_prompt: Callable[[int], None] | None = None):
        self.lines = list(lines)
        self.prompts: list[str] = []
        self.on_prompt = on_prompt

    def __call__(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.on_prompt is not None:
            self.on_prompt(len(self.prompts))
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)


def make_run(**overrides: Any) -> dict[str, Any]:
    """Workflow run payload as returned by the runs listing."""
    run = {
        "id": 1001,
        "status": "completed",
        "conclusion": "success",
        "event": "push",
        "created_at": "2025-01-01T12:00:00Z",
        "run_number": 42,
        "head_sha": "abc1234def56789000000000000000000000000",
        "html_url": RUN_HTML_URL,
        "artifacts_url": ARTIFACTS_URL,
    }
    run.update(overrides)
    return run


def make_artifacts(names: dict[str, int] | None = None) -> dict[str, Any]:
    """Artifact listing payload."""
    names = names if names is not None else {"Starship-linux": 501, "starship.o2r": 502}
    return {
        "total_count": len(names),
        "artifacts": [{"id": artifact_id, "name": name} for name, artifact_id in names.items()],
    }


def github_transport(
    runs: list[dict[str, Any]],
    artifacts: dict[str, Any] | None = None,
    torch: bytes = b"#!/bin/sh\n",
    calls: list[httpx.Request] | None = None,
) -> httpx.MockTransport:
    """Mock transport serving the runs listing, artifacts and Torch."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        url = str(request.url.copy_with(query=None))
        if url == RUNS_URL:
            return httpx.Response(200, json={"total_count": len(runs), "workflow_runs": runs})
        if url == ARTIFACTS_URL:
            return httpx.Response(200, json=artifacts if artifacts is not None else make_artifacts())
        if url == TORCH_URL:
            return httpx.Response(200, content=torch)
        return httpx.Response(404, json={"message": "Not Found"})

    return httpx.MockTransport(handler)


def write_zip(path: Path, members: dict[str, bytes]) -> Path:
    """Write a zip archive with the given members."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, data in members.items():
            archive.writestr(name, data)
    return path


def stage_bundles(paths: InstallPaths) -> None:
    """Place both artifact bundles in the staging directory."""
    write_zip(
        paths.staged_binary_bundle,
        {
            "starship.appimage": b"\x7fELF appimage",
            "gamecontrollerdb.txt": b"# controller mappings\n",
            "config.yml": b"sf64:\n  path: assets\n",
            "assets/yaml/us/rev1/ast_common.yaml": b"{}\n",
        },
    )
    write_zip(paths.staged_data_bundle, {"starship.o2r": b"O2R game data"})


def fake_torch(paths: InstallPaths, returncode: int = 0, produce: bool = True, calls: list | None = None):
    """Subprocess runner standing in for Torch."""

    def run(cmd, cwd=None, stdout=None, check=False):
        if calls is not None:
            calls.append({"cmd": list(cmd), "cwd": Path(cwd), "stdout": stdout})
        if produce and returncode == 0:
            (Path(cwd) / "sf64.o2r").write_bytes(b"O2R rom data")
        return subprocess.CompletedProcess(cmd, returncode)

    return run


def snapshot(root: Path) -> dict[str, bytes | None]:
    """Relative path -> content (None for directories) of a tree."""
    return {
        str(p.relative_to(root)): (p.read_bytes() if p.is_file() else None)
        for p in sorted(root.rglob("*"))
    }
