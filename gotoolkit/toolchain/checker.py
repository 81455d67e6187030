"""
Version check phase.

Combines the local probe, the remote resolver and the comparator into a
single CheckResult. The order matters: an absent toolchain is reported before
any network access, and an unreadable local version before resolution.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from gotoolkit.core.exceptions import (
    NetworkError,
    ToolchainNotInstalledError,
    VersionParseError,
)
from gotoolkit.toolchain.probe import LocalVersionProbe
from gotoolkit.toolchain.resolver import RemoteVersionResolver
from gotoolkit.toolchain.version import compare_versions, strip_vendor_prefix

logger = logging.getLogger(__name__)


class CheckResult(Enum):
    """Decision of the version check, with the ``check`` exit code as value."""

    UP_TO_DATE = 0
    UPDATE_AVAILABLE = 2
    LOCAL_NEWER_OR_PRERELEASE = 3
    NETWORK_ERROR = 4
    NOT_INSTALLED = 5
    PARSE_ERROR = 6

    @property
    def exit_code(self) -> int:
        return self.value


EXIT_UNEXPECTED = 1


@dataclass
class CheckOutcome:
    """Result of the version check phase."""

    result: CheckResult
    local_version: Optional[str] = None
    """Installed release name, if it could be read"""

    latest_version: Optional[str] = None
    """Latest stable release name, if it could be resolved"""

    error: Optional[str] = None

    def status_line(self) -> str:
        """Human-readable one-line status."""
        local, latest = self.local_version, self.latest_version
        if self.result is CheckResult.UP_TO_DATE:
            return f"Up to date: {local}"
        if self.result is CheckResult.UPDATE_AVAILABLE:
            return f"Update available: {local} -> {latest}"
        if self.result is CheckResult.LOCAL_NEWER_OR_PRERELEASE:
            return f"Local version newer than latest stable: {local} (latest: {latest})"
        return f"Error: {self.error}"


class VersionChecker:
    """
    Decide whether the local toolchain is current.

    Example:
        >>> checker = VersionChecker(LocalVersionProbe(), resolver)
        >>> outcome = checker.check()
        >>> outcome.result
        <CheckResult.UP_TO_DATE: 0>
    """

    def __init__(self, probe: LocalVersionProbe, resolver: RemoteVersionResolver):
        self.probe = probe
        self.resolver = resolver

    def resolve_latest(self) -> Optional[str]:
        """Resolve the latest release, returning None on network failure."""
        try:
            return self.resolver.resolve()
        except NetworkError as e:
            logger.debug(f"Latest version resolution failed: {e}")
            return None

    def check(self, resolve_when_missing: bool = True) -> CheckOutcome:
        """
        Run the version check.

        Args:
            resolve_when_missing: Also resolve the latest version when the
                local toolchain is missing or unreadable, so the install
                phase can act on the outcome without a second round of
                requests

        Returns:
            CheckOutcome
        """
        try:
            local = self.probe.probe()
        except ToolchainNotInstalledError as e:
            return CheckOutcome(
                CheckResult.NOT_INSTALLED,
                latest_version=self.resolve_latest() if resolve_when_missing else None,
                error=str(e),
            )
        except VersionParseError as e:
            return CheckOutcome(
                CheckResult.PARSE_ERROR,
                latest_version=self.resolve_latest() if resolve_when_missing else None,
                error=f"Could not determine local Go version: {e}",
            )

        latest = self.resolve_latest()
        if latest is None:
            return CheckOutcome(
                CheckResult.NETWORK_ERROR,
                local_version=local,
                error="Could not determine latest Go version (network error)",
            )

        comparison = compare_versions(
            strip_vendor_prefix(local), strip_vendor_prefix(latest)
        )
        if comparison < 0:
            result = CheckResult.UPDATE_AVAILABLE
        elif comparison > 0:
            result = CheckResult.LOCAL_NEWER_OR_PRERELEASE
        else:
            result = CheckResult.UP_TO_DATE

        return CheckOutcome(result, local_version=local, latest_version=latest)
