"""
Install pipeline orchestration.

Drives the state machine that brings the local toolchain up to the latest
stable release::

    Resolving -> Comparing -> {UpToDate | NewerLocal | Installing}
      -> Downloading -> VerifyingChecksum -> Installing
      -> VerifyingPostInstall -> {Done | Failed}

Every stage either completes or raises a GoToolkitError; the first error ends
the run with that error's exit code. Nothing is retried here: the only
fallbacks are the version source chain and the checksum mirror chain inside
the resolver and the fetcher.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from gotoolkit.core.config import Settings
from gotoolkit.core.exceptions import (
    EXIT_OK,
    ChecksumMismatchError,
    GoToolkitError,
    NetworkError,
    PostInstallMismatchError,
)
from gotoolkit.core.filesystem import split_search_path, temporary_directory
from gotoolkit.core.platform import PlatformKey, detect_platform
from gotoolkit.core.verification import compute_file_hash, verify_file_hash
from gotoolkit.toolchain.artifacts import (
    ArtifactDescriptor,
    ArtifactFetcher,
    build_artifact,
)
from gotoolkit.toolchain.checker import CheckOutcome, CheckResult, VersionChecker
from gotoolkit.toolchain.installer import Installer, ManagedInstallDetector
from gotoolkit.toolchain.probe import LocalVersionProbe
from gotoolkit.toolchain.resolver import RemoteVersionResolver
from gotoolkit.toolchain.target import InstallTarget, resolve_install_target
from gotoolkit.toolchain.verifier import PostInstallReport, PostInstallVerifier

logger = logging.getLogger(__name__)


class PipelineState(Enum):
    """States of the install pipeline."""

    RESOLVING = "resolving"
    COMPARING = "comparing"
    UP_TO_DATE = "up_to_date"
    NEWER_LOCAL = "newer_local"
    PLANNING = "planning"
    PLANNED = "planned"
    DOWNLOADING = "downloading"
    VERIFYING_CHECKSUM = "verifying_checksum"
    INSTALLING = "installing"
    VERIFYING_POST_INSTALL = "verifying_post_install"
    DONE = "done"
    FAILED = "failed"


@dataclass
class InstallPlan:
    """What an install would do; printed instead of executed on dry runs."""

    artifact: ArtifactDescriptor
    target: InstallTarget

    def describe(self) -> List[str]:
        return [
            f"Would download: {self.artifact.url}",
            f"Would fetch checksum: {self.artifact.checksum_url}",
            f"Would install via: {self.artifact.install_method} "
            f"into {self.target.install_dir}",
            f"Would ensure PATH includes: {self.target.bin_dir}",
        ]


@dataclass
class PipelineResult:
    """Final state of a pipeline run."""

    state: PipelineState
    exit_code: int
    check: Optional[CheckOutcome] = None
    plan: Optional[InstallPlan] = None
    report: Optional[PostInstallReport] = None
    error: Optional[GoToolkitError] = None
    failed_state: Optional[PipelineState] = None
    """State the pipeline was in when it failed"""

    @property
    def success(self) -> bool:
        return self.exit_code == EXIT_OK


class EnsureLatestPipeline:
    """
    Ensure the latest stable Go toolchain is installed.

    Collaborators are injectable so each stage can be replaced in tests;
    by default they are built from the settings and the process PATH.

    Example:
        >>> pipeline = EnsureLatestPipeline(load_settings())
        >>> result = pipeline.run()
        >>> sys.exit(result.exit_code)
    """

    def __init__(
        self,
        settings: Settings,
        checker: Optional[VersionChecker] = None,
        fetcher: Optional[ArtifactFetcher] = None,
        installer: Optional[Installer] = None,
        detector: Optional[ManagedInstallDetector] = None,
        post_verifier: Optional[PostInstallVerifier] = None,
        platform_detector: Callable[[], PlatformKey] = detect_platform,
        target_resolver: Optional[Callable[[Settings], InstallTarget]] = None,
        search_paths: Optional[Sequence[Path]] = None,
    ):
        self.settings = settings
        self.search_paths = (
            list(search_paths) if search_paths is not None else split_search_path()
        )
        self.checker = checker or VersionChecker(
            LocalVersionProbe(self.search_paths),
            RemoteVersionResolver.from_settings(settings),
        )
        self.fetcher = fetcher or ArtifactFetcher(settings)
        self.installer = installer or Installer()
        self.detector = detector or ManagedInstallDetector()
        self.post_verifier = post_verifier or PostInstallVerifier(self.search_paths)
        self.platform_detector = platform_detector
        self.target_resolver = target_resolver or resolve_install_target
        self.state = PipelineState.RESOLVING

    def _transition(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline state: {self.state.value} -> {state.value}")
        self.state = state

    def run(self) -> PipelineResult:
        """
        Run the pipeline to completion.

        Returns:
            PipelineResult; never raises GoToolkitError
        """
        self.state = PipelineState.RESOLVING
        try:
            return self._run()
        except GoToolkitError as e:
            failed_state = self.state
            self._transition(PipelineState.FAILED)
            lines = str(e).splitlines() or [type(e).__name__]
            logger.error(f"Error: {lines[0]}")
            for line in lines[1:]:
                logger.error(line)
            if isinstance(e, PostInstallMismatchError) and e.candidates:
                logger.error("PATH order may prefer a different Go. Binaries found:")
                for candidate in e.candidates:
                    logger.error(f"  {candidate}")
            return PipelineResult(
                state=PipelineState.FAILED,
                exit_code=e.exit_code,
                error=e,
                failed_state=failed_state,
            )

    def _run(self) -> PipelineResult:
        outcome = self.checker.check()
        self._transition(PipelineState.COMPARING)

        early = self._decide(outcome)
        if early is not None:
            return early

        latest = outcome.latest_version
        self._transition(PipelineState.PLANNING)
        platform_key = self.platform_detector()
        target = self.target_resolver(self.settings)
        self.detector.ensure_not_managed(
            platform_key, force=self.settings.force_direct_install
        )
        artifact = build_artifact(latest, platform_key, target, self.settings)
        plan = InstallPlan(artifact=artifact, target=target)

        if self.settings.dry_run:
            for line in plan.describe():
                logger.info(f"[DRY RUN] {line}")
            self._transition(PipelineState.PLANNED)
            return PipelineResult(
                state=PipelineState.PLANNED, exit_code=EXIT_OK, check=outcome, plan=plan
            )

        with temporary_directory(prefix="gotoolkit_install_") as workspace:
            self._transition(PipelineState.DOWNLOADING)
            artifact_path = self.fetcher.fetch_artifact(artifact, workspace)

            self._transition(PipelineState.VERIFYING_CHECKSUM)
            expected = self.fetcher.fetch_checksum(artifact)
            if not verify_file_hash(artifact_path, expected):
                raise ChecksumMismatchError(
                    artifact.filename, expected, compute_file_hash(artifact_path)
                )
            logger.info("Checksum verified.")

            self._transition(PipelineState.INSTALLING)
            installed_target = self.installer.install(artifact_path, artifact, target)

        self._transition(PipelineState.VERIFYING_POST_INSTALL)
        report = self.post_verifier.verify(installed_target, latest)

        logger.info(f"Go is now up to date: {report.installed_version}")
        if report.path_hint:
            logger.info(report.path_hint)

        self._transition(PipelineState.DONE)
        return PipelineResult(
            state=PipelineState.DONE,
            exit_code=EXIT_OK,
            check=outcome,
            plan=InstallPlan(artifact=artifact, target=installed_target),
            report=report,
        )

    def _decide(self, outcome: CheckOutcome) -> Optional[PipelineResult]:
        """Act on the version check; returns a result when nothing is to be done."""
        local, latest = outcome.local_version, outcome.latest_version

        if outcome.result is CheckResult.NETWORK_ERROR or latest is None:
            raise NetworkError("failed to determine latest Go version (network error)")

        if outcome.result is CheckResult.UP_TO_DATE:
            logger.info(f"Go is already up to date ({local}). Nothing to do.")
            self._transition(PipelineState.UP_TO_DATE)
            return PipelineResult(
                state=PipelineState.UP_TO_DATE, exit_code=EXIT_OK, check=outcome
            )

        if outcome.result is CheckResult.LOCAL_NEWER_OR_PRERELEASE:
            logger.info(
                f"Local Go appears newer/pre-release ({local}) than latest stable "
                f"({latest}). No action taken."
            )
            self._transition(PipelineState.NEWER_LOCAL)
            return PipelineResult(
                state=PipelineState.NEWER_LOCAL, exit_code=EXIT_OK, check=outcome
            )

        if outcome.result is CheckResult.NOT_INSTALLED:
            logger.info(f"Go not detected locally. Will install latest: {latest}")
        elif outcome.result is CheckResult.UPDATE_AVAILABLE:
            logger.info(f"Update available: {local} -> {latest}")
        else:
            logger.info(
                f"Checker returned parsing error. Proceeding to install/repair to {latest}."
            )
        return None
