"""
Tests for the install pipeline.

Most tests replace collaborators with mocks. TestEndToEnd wires the real
components together against a mocked upstream and a temporary prefix.
"""

import hashlib
from dataclasses import replace
from pathlib import Path
from unittest.mock import Mock

import pytest
import responses

from gotoolkit.core.exceptions import (
    ChecksumUnavailableError,
    InstallError,
    ManagedByThirdPartyError,
    NetworkError,
    PostInstallMismatchError,
)
from gotoolkit.core.platform import PlatformKey
from gotoolkit.toolchain.checker import CheckResult, VersionChecker
from gotoolkit.toolchain.installer import Installer, ManagedInstallDetector
from gotoolkit.toolchain.pipeline import EnsureLatestPipeline, PipelineState
from gotoolkit.toolchain.target import InstallTarget
from gotoolkit.toolchain.verifier import PostInstallReport

LINUX = PlatformKey("linux", "amd64")
ARTIFACT_BYTES = b"go toolchain archive"
ARTIFACT_DIGEST = hashlib.sha256(ARTIFACT_BYTES).hexdigest()


def _checker(local="go1.21.11", latest="go1.22.5", latest_error=None):
    probe = Mock()
    probe.probe.return_value = local
    resolver = Mock()
    resolver.resolve.return_value = latest
    resolver.resolve.side_effect = latest_error
    return VersionChecker(probe, resolver)


def _fetcher(digest=ARTIFACT_DIGEST):
    fetcher = Mock()

    def fetch_artifact(descriptor, workspace):
        path = Path(workspace) / descriptor.filename
        path.write_bytes(ARTIFACT_BYTES)
        return path

    fetcher.fetch_artifact.side_effect = fetch_artifact
    fetcher.fetch_checksum.return_value = digest
    return fetcher


@pytest.fixture
def target(tmp_path):
    return InstallTarget(prefix=tmp_path / "prefix")


@pytest.fixture
def make_pipeline(settings, target):
    def factory(checker=None, fetcher=None, installer=None, detector=None, **kwargs):
        if installer is None:
            installer = Mock()
            installer.install.return_value = target
        post_verifier = kwargs.pop("post_verifier", None)
        if post_verifier is None:
            post_verifier = Mock()
            post_verifier.verify.return_value = PostInstallReport(
                "go1.22.5", target.binary, target.binary
            )
        return EnsureLatestPipeline(
            kwargs.pop("pipeline_settings", settings),
            checker=checker or _checker(),
            fetcher=fetcher or _fetcher(),
            installer=installer,
            detector=detector or Mock(),
            post_verifier=post_verifier,
            platform_detector=lambda: LINUX,
            target_resolver=lambda s: target,
            search_paths=[],
        )

    return factory


class TestDecision:
    """Test the no-op decisions after the version check."""

    def test_up_to_date_is_idempotent(self, make_pipeline):
        fetcher = _fetcher()
        checker = _checker(local="go1.22.5", latest="go1.22.5")
        pipeline = make_pipeline(checker=checker, fetcher=fetcher)

        first = pipeline.run()
        second = pipeline.run()

        for result in (first, second):
            assert result.state is PipelineState.UP_TO_DATE
            assert result.exit_code == 0
        fetcher.fetch_artifact.assert_not_called()

    def test_newer_local_takes_no_action(self, make_pipeline):
        fetcher = _fetcher()
        pipeline = make_pipeline(
            checker=_checker(local="go1.23.1", latest="go1.22.5"), fetcher=fetcher
        )

        result = pipeline.run()

        assert result.state is PipelineState.NEWER_LOCAL
        assert result.exit_code == 0
        fetcher.fetch_artifact.assert_not_called()

    def test_network_error(self, make_pipeline):
        pipeline = make_pipeline(checker=_checker(latest_error=NetworkError("down")))

        result = pipeline.run()

        assert result.state is PipelineState.FAILED
        assert result.exit_code == 2
        assert result.failed_state is PipelineState.COMPARING


class TestDryRun:
    """Test dry-run planning."""

    def test_plans_without_mutation(self, make_pipeline, settings, caplog):
        fetcher = _fetcher()
        installer = Mock()
        pipeline = make_pipeline(
            fetcher=fetcher,
            installer=installer,
            pipeline_settings=replace(settings, dry_run=True),
        )

        with caplog.at_level("INFO"):
            result = pipeline.run()

        assert result.state is PipelineState.PLANNED
        assert result.exit_code == 0
        assert result.plan.artifact.filename == "go1.22.5.linux-amd64.tar.gz"
        fetcher.fetch_artifact.assert_not_called()
        fetcher.fetch_checksum.assert_not_called()
        installer.install.assert_not_called()
        assert "[DRY RUN] Would download: " in caplog.text
        assert "[DRY RUN] Would fetch checksum: " in caplog.text
        assert "[DRY RUN] Would install via: tar" in caplog.text
        assert "[DRY RUN] Would ensure PATH includes: " in caplog.text

    @responses.activate
    def test_fresh_machine_prints_full_plan(self, settings, tmp_path, caplog):
        responses.add(responses.GET, settings.version_text_url, body="go1.22.5\n")
        target = InstallTarget(prefix=tmp_path / "prefix")
        pipeline = EnsureLatestPipeline(
            replace(settings, dry_run=True),
            installer=Installer(),
            detector=ManagedInstallDetector(probes=[]),
            platform_detector=lambda: PlatformKey("darwin", "arm64"),
            target_resolver=lambda s: target,
            search_paths=[tmp_path / "empty"],
        )

        with caplog.at_level("INFO"):
            result = pipeline.run()

        url = "https://go.example/dl/go1.22.5.darwin-arm64.tar.gz"
        assert result.state is PipelineState.PLANNED
        assert result.exit_code == 0
        assert result.check.result is CheckResult.NOT_INSTALLED
        assert f"[DRY RUN] Would download: {url}" in caplog.text
        assert f"[DRY RUN] Would fetch checksum: {url}.sha256" in caplog.text
        assert (
            f"[DRY RUN] Would install via: tar into {target.install_dir}"
            in caplog.text
        )
        assert f"[DRY RUN] Would ensure PATH includes: {target.bin_dir}" in caplog.text
        assert [call.request.url for call in responses.calls] == [
            settings.version_text_url
        ]
        assert not target.prefix.exists()


class TestFailures:
    """Test failure exit codes and that nothing installs after a failure."""

    def test_checksum_mismatch_never_installs(self, make_pipeline):
        installer = Mock()
        pipeline = make_pipeline(fetcher=_fetcher(digest="0" * 64), installer=installer)

        result = pipeline.run()

        assert result.exit_code == 3
        assert result.failed_state is PipelineState.VERIFYING_CHECKSUM
        assert result.error.actual == ARTIFACT_DIGEST
        installer.install.assert_not_called()

    def test_checksum_unavailable_never_installs(self, make_pipeline):
        fetcher = _fetcher()
        fetcher.fetch_checksum.side_effect = ChecksumUnavailableError("go.tar.gz", [])
        installer = Mock()
        pipeline = make_pipeline(fetcher=fetcher, installer=installer)

        result = pipeline.run()

        assert result.exit_code == 2
        installer.install.assert_not_called()

    def test_workspace_removed_after_failure(self, make_pipeline):
        fetcher = _fetcher(digest="0" * 64)
        make_pipeline(fetcher=fetcher).run()

        workspace = fetcher.fetch_artifact.call_args[0][1]
        assert not Path(workspace).exists()

    def test_managed_install_aborts(self, make_pipeline):
        detector = Mock()
        detector.ensure_not_managed.side_effect = ManagedByThirdPartyError(
            "Homebrew", "brew upgrade go"
        )
        fetcher = _fetcher()

        result = make_pipeline(detector=detector, fetcher=fetcher).run()

        assert result.exit_code == 1
        fetcher.fetch_artifact.assert_not_called()

    def test_install_error(self, make_pipeline):
        installer = Mock()
        installer.install.side_effect = InstallError("extraction failed")

        result = make_pipeline(installer=installer).run()

        assert result.exit_code == 4
        assert result.failed_state is PipelineState.INSTALLING

    def test_post_install_mismatch_logs_candidates(self, make_pipeline, caplog):
        post_verifier = Mock()
        post_verifier.verify.side_effect = PostInstallMismatchError(
            "installed Go (go1.21.0) != expected (go1.22.5)",
            [Path("/usr/bin/go")],
        )

        with caplog.at_level("ERROR"):
            result = make_pipeline(post_verifier=post_verifier).run()

        assert result.exit_code == 5
        assert "/usr/bin/go" in caplog.text


class TestEndToEnd:
    """Run the real components against a mocked upstream."""

    @responses.activate
    def test_fresh_install(self, settings, tmp_path, go_tarball):
        archive = go_tarball(tmp_path / "upstream.tar.gz", "go1.22.5")
        payload = archive.read_bytes()
        digest = hashlib.sha256(payload).hexdigest()
        base = "https://go.example/dl/go1.22.5.linux-amd64.tar.gz"

        responses.add(responses.GET, settings.version_text_url, body="go1.22.5\n")
        responses.add(responses.GET, base, body=payload)
        responses.add(responses.GET, base + ".sha256", body=digest)

        target = InstallTarget(prefix=tmp_path / "prefix")
        pipeline = EnsureLatestPipeline(
            settings,
            installer=Installer(),
            detector=ManagedInstallDetector(probes=[]),
            platform_detector=lambda: LINUX,
            target_resolver=lambda s: target,
            search_paths=[tmp_path / "empty"],
        )

        result = pipeline.run()

        assert result.state is PipelineState.DONE, result.error
        assert result.exit_code == 0
        assert target.binary.is_file()
        assert result.report.installed_version == "go1.22.5"
        assert result.report.path_hint is not None
