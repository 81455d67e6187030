"""
Post-install verification.

Runs the freshly installed binary directly (never whatever ``go`` happens to
be first on PATH) and requires it to report exactly the release that was
installed. Separately reports, as advice only, when the caller's PATH
resolves ``go`` to a different binary.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from gotoolkit.core.exceptions import (
    BinaryMissingError,
    PostInstallMismatchError,
    VersionParseError,
)
from gotoolkit.core.filesystem import find_all_executables, is_executable
from gotoolkit.toolchain.probe import EXECUTABLE_NAME, read_binary_version
from gotoolkit.toolchain.target import InstallTarget
from gotoolkit.toolchain.version import strip_vendor_prefix

logger = logging.getLogger(__name__)


@dataclass
class PostInstallReport:
    """Outcome of a successful post-install verification."""

    installed_version: str
    """Release name reported by the installed binary"""

    binary: Path
    """The binary that was verified"""

    resolved_binary: Optional[Path] = None
    """First ``go`` on the caller's search path, if any"""

    @property
    def path_shadowed(self) -> bool:
        """True when PATH resolves go to a different binary."""
        return self.resolved_binary is not None and self.resolved_binary != self.binary

    @property
    def path_hint(self) -> Optional[str]:
        if self.resolved_binary is None:
            return (
                f"'{EXECUTABLE_NAME}' is not on your PATH. "
                f"Consider adding {self.binary.parent} to PATH."
            )
        if self.path_shadowed:
            return (
                f"Note: Your shell resolves '{EXECUTABLE_NAME}' to "
                f"{self.resolved_binary}, not {self.binary}. Consider adjusting PATH."
            )
        return None


class PostInstallVerifier:
    """
    Verify the installed toolchain reports the expected version.

    Args:
        search_paths: The caller's search path, used for the PATH advisory
            and for listing candidates on mismatch (default: $PATH)
        timeout: Seconds to wait for ``go version``
    """

    def __init__(
        self, search_paths: Optional[Sequence[Path]] = None, timeout: float = 15
    ):
        self.search_paths = search_paths
        self.timeout = timeout

    def candidates(self) -> List[Path]:
        return find_all_executables(EXECUTABLE_NAME, self.search_paths)

    def verify(self, target: InstallTarget, expected_version: str) -> PostInstallReport:
        """
        Verify the binary installed at the target.

        Args:
            target: Where the toolchain was installed
            expected_version: Release that was installed (e.g. 'go1.22.5')

        Returns:
            PostInstallReport

        Raises:
            BinaryMissingError: If the binary is missing or not executable
            PostInstallMismatchError: If it reports another version or its
                version cannot be read
        """
        binary = target.binary
        if not is_executable(binary):
            raise BinaryMissingError(
                f"expected installed binary not found at {binary}"
            )

        try:
            installed = read_binary_version(binary, self.timeout)
        except VersionParseError as e:
            raise PostInstallMismatchError(
                f"post-install could not read Go version: {e}"
            ) from e

        if strip_vendor_prefix(installed) != strip_vendor_prefix(expected_version):
            candidates = self.candidates()
            raise PostInstallMismatchError(
                f"installed Go ({installed}) != expected ({expected_version})",
                candidates,
            )

        found = self.candidates()
        report = PostInstallReport(
            installed_version=installed,
            binary=binary,
            resolved_binary=found[0] if found else None,
        )
        logger.debug(f"Verified {binary} reports {installed}")
        return report
