"""
Core functionality for gotoolkit.

This package contains the foundational modules that the toolchain
components depend on.
"""

from .exceptions import (
    EXIT_OK,
    EXIT_ENVIRONMENT,
    EXIT_NETWORK,
    EXIT_CHECKSUM,
    EXIT_INSTALL,
    EXIT_POST_INSTALL,
    GoToolkitError,
    ConfigurationError,
    MissingCommandError,
    NetworkError,
    VersionParseError,
    ToolchainNotInstalledError,
    UnsupportedPlatformError,
    DownloadError,
    ChecksumUnavailableError,
    ChecksumMismatchError,
    ManagedByThirdPartyError,
    InstallError,
    PostInstallMismatchError,
    BinaryMissingError,
)

from .config import (
    Settings,
    load_settings,
    load_yaml_config,
    env_flag,
)

from .platform import (
    PlatformKey,
    detect_platform,
)

from .verification import (
    compute_file_hash,
    extract_leading_digest,
    verify_file_hash,
)

__all__ = [
    # Exit codes
    "EXIT_OK",
    "EXIT_ENVIRONMENT",
    "EXIT_NETWORK",
    "EXIT_CHECKSUM",
    "EXIT_INSTALL",
    "EXIT_POST_INSTALL",
    # Exceptions
    "GoToolkitError",
    "ConfigurationError",
    "MissingCommandError",
    "NetworkError",
    "VersionParseError",
    "ToolchainNotInstalledError",
    "UnsupportedPlatformError",
    "DownloadError",
    "ChecksumUnavailableError",
    "ChecksumMismatchError",
    "ManagedByThirdPartyError",
    "InstallError",
    "PostInstallMismatchError",
    "BinaryMissingError",
    # Config
    "Settings",
    "load_settings",
    "load_yaml_config",
    "env_flag",
    # Platform
    "PlatformKey",
    "detect_platform",
    # Verification
    "compute_file_hash",
    "extract_leading_digest",
    "verify_file_hash",
]
