"""
Go toolchain management.

Version resolution and comparison, artifact download, installation and
post-install verification.
"""

from .version import SemanticVersion, compare_versions, strip_vendor_prefix
from .resolver import RemoteVersionResolver
from .probe import LocalVersionProbe
from .checker import CheckOutcome, CheckResult, VersionChecker
from .target import InstallTarget, resolve_install_target
from .artifacts import ArtifactDescriptor, ArtifactFetcher, build_artifact
from .installer import Installer, ManagedInstallDetector
from .verifier import PostInstallReport, PostInstallVerifier
from .pipeline import EnsureLatestPipeline, PipelineResult, PipelineState

__all__ = [
    "SemanticVersion",
    "compare_versions",
    "strip_vendor_prefix",
    "RemoteVersionResolver",
    "LocalVersionProbe",
    "CheckOutcome",
    "CheckResult",
    "VersionChecker",
    "InstallTarget",
    "resolve_install_target",
    "ArtifactDescriptor",
    "ArtifactFetcher",
    "build_artifact",
    "Installer",
    "ManagedInstallDetector",
    "PostInstallReport",
    "PostInstallVerifier",
    "EnsureLatestPipeline",
    "PipelineResult",
    "PipelineState",
]
