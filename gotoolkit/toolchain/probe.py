"""
Local toolchain detection.

Finds ``go`` on the search path and reads the version it reports. A missing
executable is a normal state (NotInstalled); an executable whose output has
no recognizable version is a ParseError.
"""

import logging
import re
import subprocess
from pathlib import Path
from typing import Optional, Sequence

from gotoolkit.core.exceptions import ToolchainNotInstalledError, VersionParseError
from gotoolkit.core.filesystem import find_executable

logger = logging.getLogger(__name__)

EXECUTABLE_NAME = "go"

VERSION_TOKEN_PATTERN = re.compile(r"go[0-9]+\.[0-9]+(\.[0-9]+)?(-[A-Za-z0-9._-]+)?")


def extract_version_token(output: str) -> Optional[str]:
    """
    Extract the first release name from ``go version`` output.

    Example:
        >>> extract_version_token("go version go1.22.5 linux/amd64")
        'go1.22.5'
    """
    match = VERSION_TOKEN_PATTERN.search(output)
    return match.group(0) if match else None


def read_binary_version(binary: Path, timeout: float = 15) -> str:
    """
    Run ``<binary> version`` and extract the reported release name.

    Args:
        binary: Path to the go executable
        timeout: Seconds to wait for the command

    Returns:
        Release name (e.g. 'go1.22.5')

    Raises:
        VersionParseError: If the command fails or its output has no version
    """
    try:
        result = subprocess.run(
            [str(binary), "version"],
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        raise VersionParseError(f"could not run '{binary} version': {e}") from e

    output = (result.stdout or "") + (result.stderr or "")
    if result.returncode != 0:
        raise VersionParseError(
            f"'{binary} version' exited with status {result.returncode}", output
        )

    version = extract_version_token(output)
    if not version:
        raise VersionParseError(
            f"could not parse '{binary} version' output: {output.strip()[:200]}",
            output,
        )
    return version


class LocalVersionProbe:
    """
    Detect the installed toolchain and its version.

    Args:
        search_paths: Directories to search (default: $PATH at probe time)
        timeout: Seconds to wait for ``go version``
    """

    def __init__(
        self, search_paths: Optional[Sequence[Path]] = None, timeout: float = 15
    ):
        self.search_paths = search_paths
        self.timeout = timeout

    def locate(self) -> Optional[Path]:
        return find_executable(EXECUTABLE_NAME, self.search_paths)

    def probe(self) -> str:
        """
        Return the installed release name.

        Raises:
            ToolchainNotInstalledError: If go is not on the search path
            VersionParseError: If its version cannot be determined
        """
        binary = self.locate()
        if binary is None:
            raise ToolchainNotInstalledError(EXECUTABLE_NAME)

        version = read_binary_version(binary, self.timeout)
        logger.debug(f"Local toolchain {binary} reports {version}")
        return version
