"""
Centralized exception hierarchy for gotoolkit.

Every failure kind the version check and the install pipeline can report is
a distinct class here. Each class carries the process exit code that the
``ensure`` command reports for it, so callers can branch without parsing text.
"""

from typing import Optional


# ============================================================================
# Exit Codes (ensure pipeline)
# ============================================================================

EXIT_OK = 0
EXIT_ENVIRONMENT = 1
EXIT_NETWORK = 2
EXIT_CHECKSUM = 3
EXIT_INSTALL = 4
EXIT_POST_INSTALL = 5


# ============================================================================
# Base Exceptions
# ============================================================================


class GoToolkitError(Exception):
    """Base exception for all gotoolkit errors."""

    exit_code = EXIT_ENVIRONMENT


class ConfigurationError(GoToolkitError):
    """Invalid configuration file or setting."""

    pass


class MissingCommandError(GoToolkitError):
    """Raised when a required external command is not available."""

    def __init__(self, command: str):
        self.command = command
        super().__init__(f"required command not found: {command}")


# ============================================================================
# Version Resolution Exceptions
# ============================================================================


class NetworkError(GoToolkitError):
    """Raised when no remote source could provide the latest version."""

    exit_code = EXIT_NETWORK


class VersionParseError(GoToolkitError):
    """Raised when a version string cannot be extracted from tool output."""

    exit_code = EXIT_NETWORK

    def __init__(self, message: str, output: str = ""):
        self.output = output
        super().__init__(message)


class ToolchainNotInstalledError(GoToolkitError):
    """Raised when no toolchain executable is found on the search path."""

    def __init__(self, executable: str = "go"):
        self.executable = executable
        super().__init__(f"{executable} is not installed or not in PATH")


# ============================================================================
# Platform Exceptions
# ============================================================================


class UnsupportedPlatformError(GoToolkitError):
    """Raised when the host OS or architecture has no matching artifact."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"unsupported {kind}: {value}")


# ============================================================================
# Artifact Exceptions
# ============================================================================


class DownloadError(GoToolkitError):
    """Raised when the installer artifact cannot be downloaded."""

    exit_code = EXIT_NETWORK


class ChecksumUnavailableError(GoToolkitError):
    """Raised when no checksum source returned a well-formed digest."""

    exit_code = EXIT_NETWORK

    def __init__(self, filename: str, sources: list):
        self.filename = filename
        self.sources = list(sources)
        super().__init__(
            f"unable to obtain a valid SHA256 for {filename} from any source"
        )


class ChecksumMismatchError(GoToolkitError):
    """Raised when the artifact digest differs from the published one."""

    exit_code = EXIT_CHECKSUM

    def __init__(self, filename: str, expected: str, actual: str):
        self.filename = filename
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"checksum verification failed for {filename}\n"
            f"Expected: {expected}\n"
            f"Actual:   {actual}"
        )


# ============================================================================
# Install Exceptions
# ============================================================================


class ManagedByThirdPartyError(GoToolkitError):
    """Raised when another package manager owns the toolchain installation."""

    def __init__(self, manager: str, suggestion: str):
        self.manager = manager
        self.suggestion = suggestion
        super().__init__(
            f"Detected {manager}-managed Go. Consider: {suggestion}  "
            f"(or set FORCE_DIRECT_INSTALL=1 to proceed with a direct install)."
        )


class InstallError(GoToolkitError):
    """Raised when extraction or the package installer fails."""

    exit_code = EXIT_INSTALL


# ============================================================================
# Post-install Exceptions
# ============================================================================


class PostInstallMismatchError(GoToolkitError):
    """Raised when the installed binary reports an unexpected version."""

    exit_code = EXIT_POST_INSTALL

    def __init__(self, message: str, candidates: Optional[list] = None):
        self.candidates = list(candidates or [])
        super().__init__(message)


class BinaryMissingError(PostInstallMismatchError):
    """Raised when the expected binary is absent or not executable."""

    pass
