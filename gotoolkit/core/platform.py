"""
Platform detection for gotoolkit.

Maps the host kernel name and machine architecture onto the naming scheme
used by upstream Go release artifacts (``go1.22.5.linux-amd64.tar.gz``).

Unknown kernels and architectures raise UnsupportedPlatformError.

Usage:
    from gotoolkit.core.platform import detect_platform

    key = detect_platform()
    print(key.artifact_suffix())  # 'linux-amd64'
"""

import logging
import platform
from dataclasses import dataclass
from typing import Optional

from gotoolkit.core.exceptions import UnsupportedPlatformError

logger = logging.getLogger(__name__)

SUPPORTED_OS = {
    "darwin": "darwin",
    "linux": "linux",
}

ARCH_SYNONYMS = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "arm64": "arm64",
    "aarch64": "arm64",
    "riscv64": "riscv64",
    "ppc64le": "ppc64le",
}


@dataclass(frozen=True)
class PlatformKey:
    """
    Host platform in upstream artifact naming.

    Attributes:
        os: 'darwin' or 'linux'
        arch: 'amd64', 'arm64', 'riscv64' or 'ppc64le'
    """

    os: str
    arch: str

    @property
    def is_macos(self) -> bool:
        return self.os == "darwin"

    def artifact_suffix(self) -> str:
        """
        Get the platform part of an artifact filename.

        Example:
            >>> PlatformKey("darwin", "arm64").artifact_suffix()
            'darwin-arm64'
        """
        return f"{self.os}-{self.arch}"

    def __str__(self) -> str:
        return self.artifact_suffix()


def normalize_os(system: str) -> str:
    """
    Map a kernel name (``uname -s``) to an artifact OS tag.

    Raises:
        UnsupportedPlatformError: If the kernel is not supported
    """
    os_name = SUPPORTED_OS.get(system.strip().lower())
    if os_name is None:
        raise UnsupportedPlatformError("OS", system or "unknown")
    return os_name


def normalize_arch(machine: str) -> str:
    """
    Map a machine name (``uname -m``) to an artifact architecture tag.

    Raises:
        UnsupportedPlatformError: If the architecture is not recognized
    """
    arch = ARCH_SYNONYMS.get(machine.strip().lower())
    if arch is None:
        raise UnsupportedPlatformError("architecture", machine or "unknown")
    return arch


def detect_platform(
    system: Optional[str] = None, machine: Optional[str] = None
) -> PlatformKey:
    """
    Detect the host platform.

    Args:
        system: Kernel name override (default: platform.system())
        machine: Machine name override (default: platform.machine())

    Returns:
        PlatformKey for the host

    Raises:
        UnsupportedPlatformError: If OS or architecture is unsupported

    Example:
        >>> detect_platform("Darwin", "arm64")
        PlatformKey(os='darwin', arch='arm64')
    """
    system = platform.system() if system is None else system
    machine = platform.machine() if machine is None else machine

    key = PlatformKey(os=normalize_os(system), arch=normalize_arch(machine))
    logger.debug(f"Detected platform {key} from {system}/{machine}")
    return key
