"""GitHub Actions build resolution.

Finds the most recent successful run of the build workflow on a branch,
derives the version string that identifies it, and looks up the ids of
the artifacts the installer needs. Artifact downloads themselves require
a signed-in browser session, so only their URLs are produced here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Any

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from starship_setup import __version__
from starship_setup.core.config import GitHubConfig, SetupConfig
from starship_setup.core.errors import ResolutionError

logger = structlog.get_logger()


class WorkflowRun(BaseModel):
    """One workflow run from the runs listing."""

    id: int | None = Field(default=None, description="Run ID")
    status: str = Field(description="Run status (queued, in_progress, completed)")
    conclusion: str | None = Field(default=None, description="Run conclusion")
    event: str = Field(description="Trigger event")
    created_at: datetime = Field(description="Creation timestamp")
    run_number: int = Field(description="Sequence number within the workflow")
    head_sha: str = Field(description="Commit the run built")
    html_url: str = Field(description="Run page URL")
    artifacts_url: str = Field(description="Artifacts listing URL")

    model_config = ConfigDict(extra="ignore")

    @property
    def succeeded(self) -> bool:
        return self.status == "completed" and self.conclusion == "success"


class WorkflowArtifact(BaseModel):
    """One artifact of a workflow run."""

    id: int = Field(description="Artifact ID")
    name: str = Field(description="Artifact name")

    model_config = ConfigDict(extra="ignore")


@dataclass
class ResolvedRun:
    """Latest successful run and the version string derived from it."""

    version: str
    run: WorkflowRun


@dataclass
class ResolvedBuild:
    """Resolved run plus the ids of the artifacts to install."""

    version: str
    run: WorkflowRun
    binary_artifact_id: int
    data_artifact_id: int

    def artifact_url(self, artifact_id: int) -> str:
        return f"{self.run.html_url}/artifacts/{artifact_id}"

    @property
    def binary_download_url(self) -> str:
        return self.artifact_url(self.binary_artifact_id)

    @property
    def data_download_url(self) -> str:
        return self.artifact_url(self.data_artifact_id)


def build_version_string(
    run: WorkflowRun,
    *,
    product: str,
    arch: str,
    os_tag: str,
    branch: str,
    tz: tzinfo | None = None,
) -> str:
    """Derive the version identifier of a run.

    The date is the calendar date of ``created_at`` in ``tz`` (local time
    when None).

    Example:
        starship-x86_64-linux-2025-01-01-main-42-abc1234
    """
    created = run.created_at.astimezone(tz)
    return (
        f"{product}-{arch}-{os_tag}-{created.strftime('%Y-%m-%d')}-"
        f"{branch}-{run.run_number}-{run.head_sha[:7]}"
    )


def select_latest_successful(runs: list[WorkflowRun]) -> WorkflowRun:
    """Return the first completed and successful run.

    Raises:
        ResolutionError: If no run qualifies
    """
    for run in runs:
        if run.succeeded:
            return run
    raise ResolutionError("unable to get the latest version: no successful run found")


class ArtifactResolver:
    """Resolve the latest installable build from GitHub Actions.

    Args:
        config: Application configuration
        client: Optional preconfigured HTTP client
        tz: Timezone for the version date, local time when None
    """

    def __init__(
        self,
        config: SetupConfig | None = None,
        client: httpx.Client | None = None,
        tz: tzinfo | None = None,
    ) -> None:
        self.config = config or SetupConfig()
        self.tz = tz
        self._client = client

    @property
    def github(self) -> GitHubConfig:
        return self.config.github

    @property
    def client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=self.github.timeout,
                follow_redirects=True,
                headers={
                    "User-Agent": f"starship-setup/{__version__}",
                    "Accept": "application/vnd.github+json",
                },
            )
        return self._client

    def _get_json(self, url: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            response = self.client.get(url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise ResolutionError(f"GitHub API request failed: {e}") from e
        except ValueError as e:
            raise ResolutionError(f"GitHub API returned invalid JSON from {url}") from e

        if not isinstance(data, dict):
            raise ResolutionError(f"GitHub API returned unexpected payload from {url}")
        return data

    def fetch_runs(self) -> list[WorkflowRun]:
        """Fetch the most recent runs of the configured branch."""
        data = self._get_json(
            self.github.runs_url,
            params={"branch": self.github.branch, "per_page": self.github.per_page},
        )
        try:
            runs = [WorkflowRun.model_validate(item) for item in data.get("workflow_runs", [])]
        except ValidationError as e:
            raise ResolutionError(f"unexpected workflow run data: {e}") from e

        logger.debug("runs_fetched", count=len(runs), branch=self.github.branch)
        return runs

    def resolve_run(self) -> ResolvedRun:
        """Select the latest successful run and derive its version.

        Raises:
            ResolutionError: If no run qualifies or its event is not allowed
        """
        run = select_latest_successful(self.fetch_runs())

        if run.event not in self.github.allowed_events:
            raise ResolutionError(
                f"latest action run type is not supported ({run.event}). "
                "Please check and try again later."
            )

        version = build_version_string(
            run,
            product=self.config.product,
            arch=self.config.arch,
            os_tag=self.config.os_tag,
            branch=self.github.branch,
            tz=self.tz,
        )
        logger.info("run_resolved", version=version, run_number=run.run_number, trigger=run.event)
        return ResolvedRun(version=version, run=run)

    def fetch_artifacts(self, run: WorkflowRun) -> list[WorkflowArtifact]:
        """Fetch the artifact list of a run."""
        data = self._get_json(run.artifacts_url)
        try:
            return [WorkflowArtifact.model_validate(item) for item in data.get("artifacts", [])]
        except ValidationError as e:
            raise ResolutionError(f"unexpected artifact data: {e}") from e

    def resolve_artifacts(self, resolved: ResolvedRun) -> ResolvedBuild:
        """Look up the binary and data artifact ids of a resolved run.

        Raises:
            ResolutionError: If either artifact is missing
        """
        by_name = {artifact.name: artifact.id for artifact in self.fetch_artifacts(resolved.run)}

        binary_id = by_name.get(self.github.binary_artifact)
        if binary_id is None:
            raise ResolutionError(
                f"unable to get Linux binary artifact download ID ({self.github.binary_artifact})."
            )

        data_id = by_name.get(self.github.data_artifact)
        if data_id is None:
            raise ResolutionError(
                f"unable to get O2R artifact download ID ({self.github.data_artifact})."
            )

        logger.debug("artifacts_resolved", binary_id=binary_id, data_id=data_id)
        return ResolvedBuild(
            version=resolved.version,
            run=resolved.run,
            binary_artifact_id=binary_id,
            data_artifact_id=data_id,
        )

    def resolve(self) -> ResolvedBuild:
        """Resolve the latest run and its artifacts."""
        return self.resolve_artifacts(self.resolve_run())

    def close(self) -> None:
        """Close HTTP client."""
        if self._client:
            self._client.close()

    def __enter__(self) -> ArtifactResolver:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()
