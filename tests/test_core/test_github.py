"""Tests for starship_setup.core.github module."""

from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import patch

import httpx
import pytest
import structlog
from structlog.testing import LogCapture

from starship_setup.core.config import GitHubConfig, SetupConfig
from starship_setup.core.errors import ResolutionError
from starship_setup.core.github import (
    ArtifactResolver,
    ResolvedBuild,
    WorkflowRun,
    build_version_string,
    select_latest_successful,
)
from helpers import (
    ARTIFACTS_URL,
    RUN_HTML_URL,
    github_transport,
    make_artifacts,
    make_run,
)


def _resolver(runs, artifacts=None, calls=None, config=None) -> ArtifactResolver:
    client = httpx.Client(transport=github_transport(runs, artifacts, calls=calls))
    return ArtifactResolver(config or SetupConfig(), client=client, tz=UTC)


class TestWorkflowRun:
    """Test WorkflowRun model."""

    def test_parse(self):
        run = WorkflowRun.model_validate(make_run(extra_field="ignored"))

        assert run.status == "completed"
        assert run.conclusion == "success"
        assert run.created_at == datetime(2025, 1, 1, 12, 0, tzinfo=UTC)
        assert run.run_number == 42
        assert run.succeeded

    def test_in_progress_has_no_conclusion(self):
        run = WorkflowRun.model_validate(make_run(status="in_progress", conclusion=None))
        assert not run.succeeded

    def test_failed(self):
        assert not WorkflowRun.model_validate(make_run(conclusion="failure")).succeeded


class TestBuildVersionString:
    """Test version string derivation."""

    def test_format(self):
        run = WorkflowRun.model_validate(make_run())
        version = build_version_string(
            run, product="starship", arch="x86_64", os_tag="linux", branch="main", tz=UTC
        )
        assert version == "starship-x86_64-linux-2025-01-01-main-42-abc1234"

    def test_date_follows_timezone(self):
        run = WorkflowRun.model_validate(make_run(created_at="2025-01-01T23:30:00Z"))

        utc = build_version_string(run, product="starship", arch="x86_64", os_tag="linux", branch="main", tz=UTC)
        ahead = build_version_string(
            run, product="starship", arch="x86_64", os_tag="linux", branch="main",
            tz=timezone(timedelta(hours=2)),
        )

        assert "-2025-01-01-" in utc
        assert "-2025-01-02-" in ahead

    def test_deterministic(self):
        run = WorkflowRun.model_validate(make_run())
        kwargs = dict(product="starship", arch="x86_64", os_tag="linux", branch="main", tz=UTC)
        assert build_version_string(run, **kwargs) == build_version_string(run, **kwargs)


class TestSelectLatestSuccessful:
    """Test run selection."""

    def test_first_successful_wins(self):
        runs = [
            WorkflowRun.model_validate(make_run(run_number=45, status="in_progress", conclusion=None)),
            WorkflowRun.model_validate(make_run(run_number=44, conclusion="failure")),
            WorkflowRun.model_validate(make_run(run_number=43)),
            WorkflowRun.model_validate(make_run(run_number=42)),
        ]
        assert select_latest_successful(runs).run_number == 43

    def test_none_successful(self):
        runs = [WorkflowRun.model_validate(make_run(conclusion="cancelled"))]
        with pytest.raises(ResolutionError):
            select_latest_successful(runs)

    def test_empty(self):
        with pytest.raises(ResolutionError):
            select_latest_successful([])


class TestArtifactResolver:
    """Test ArtifactResolver class."""

    def test_resolve_run(self):
        resolved = _resolver([make_run()]).resolve_run()

        assert resolved.version == "starship-x86_64-linux-2025-01-01-main-42-abc1234"
        assert resolved.run.html_url == RUN_HTML_URL

    def test_resolve_run_logs_through_stdlib_logger(self):
        """The run summary goes through the same BoundLogger the CLI configures."""
        capture = LogCapture()
        log = structlog.wrap_logger(None, processors=[capture], wrapper_class=structlog.stdlib.BoundLogger)

        with patch("starship_setup.core.github.logger", log):
            resolved = _resolver([make_run()]).resolve_run()

        entry = next(e for e in capture.entries if e["event"] == "run_resolved")
        assert entry["version"] == resolved.version
        assert entry["trigger"] == "push"
        assert entry["run_number"] == 42

    def test_runs_query_parameters(self):
        calls = []
        config = SetupConfig(github=GitHubConfig(branch="develop", per_page=30))
        _resolver([make_run()], calls=calls, config=config).resolve_run()

        params = calls[0].url.params
        assert params["branch"] == "develop"
        assert params["per_page"] == "30"

    def test_version_uses_config(self):
        config = SetupConfig(arch="aarch64", github=GitHubConfig(branch="develop"))
        resolved = _resolver([make_run()], config=config).resolve_run()
        assert resolved.version == "starship-aarch64-linux-2025-01-01-develop-42-abc1234"

    def test_pull_request_rejected(self):
        runs = [make_run(event="pull_request", run_number=43), make_run(run_number=42)]

        with pytest.raises(ResolutionError, match="pull_request"):
            _resolver(runs).resolve_run()

    def test_pull_request_skipped_only_if_not_successful(self):
        runs = [
            make_run(event="pull_request", run_number=43, conclusion="failure"),
            make_run(run_number=42),
        ]
        assert _resolver(runs).resolve_run().run.run_number == 42

    def test_other_events_configurable(self):
        runs = [make_run(event="workflow_dispatch")]

        with pytest.raises(ResolutionError):
            _resolver(runs).resolve_run()

        config = SetupConfig(github=GitHubConfig(allowed_events=["push", "workflow_dispatch"]))
        assert _resolver(runs, config=config).resolve_run().run.event == "workflow_dispatch"

    def test_no_successful_run(self):
        with pytest.raises(ResolutionError, match="no successful run"):
            _resolver([make_run(conclusion="failure")]).resolve_run()

    def test_http_error(self):
        def handler(request):
            return httpx.Response(403, json={"message": "API rate limit exceeded"})

        client = httpx.Client(transport=httpx.MockTransport(handler))
        with pytest.raises(ResolutionError, match="request failed"):
            ArtifactResolver(SetupConfig(), client=client).resolve_run()

    def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("no network", request=request)

        client = httpx.Client(transport=httpx.MockTransport(handler))
        with pytest.raises(ResolutionError):
            ArtifactResolver(SetupConfig(), client=client).resolve_run()

    def test_invalid_json(self):
        client = httpx.Client(transport=httpx.MockTransport(lambda r: httpx.Response(200, text="<html>")))
        with pytest.raises(ResolutionError, match="invalid JSON"):
            ArtifactResolver(SetupConfig(), client=client).resolve_run()

    def test_malformed_run(self):
        run = make_run()
        del run["run_number"]
        with pytest.raises(ResolutionError):
            _resolver([run]).resolve_run()

    def test_resolve_artifacts(self):
        resolver = _resolver([make_run()])
        build = resolver.resolve_artifacts(resolver.resolve_run())

        assert isinstance(build, ResolvedBuild)
        assert build.binary_artifact_id == 501
        assert build.data_artifact_id == 502
        assert build.binary_download_url == f"{RUN_HTML_URL}/artifacts/501"
        assert build.data_download_url == f"{RUN_HTML_URL}/artifacts/502"

    def test_resolve_requests_artifacts_url(self):
        calls = []
        _resolver([make_run()], calls=calls).resolve()
        assert str(calls[1].url) == ARTIFACTS_URL

    @pytest.mark.parametrize("present", [{"starship.o2r": 502}, {"Starship-linux": 501}, {}])
    def test_missing_artifact(self, present):
        resolver = _resolver([make_run()], artifacts=make_artifacts(present))
        with pytest.raises(ResolutionError, match="artifact download ID"):
            resolver.resolve()

    def test_context_manager_closes_client(self):
        client = httpx.Client(transport=github_transport([make_run()]))
        with ArtifactResolver(SetupConfig(), client=client) as resolver:
            resolver.resolve_run()
        assert client.is_closed

    def test_default_client_headers(self):
        resolver = ArtifactResolver(SetupConfig())
        try:
            assert resolver.client.headers["Accept"] == "application/vnd.github+json"
            assert resolver.client.headers["User-Agent"].startswith("starship-setup/")
        finally:
            resolver.close()
