"""
Toolchain installation.

Two install methods are supported:

- **Tarball**: remove ``<prefix>/go`` and extract the archive into the prefix.
  Without sudo the extraction runs in-process; with sudo it runs
  ``sudo tar --no-same-owner``. Archive ownership is never applied in
  either case.
- **Package**: on elevated macOS runs, hand the ``.pkg`` to the system
  ``installer`` targeting ``/``. The package always installs to
  ``/usr/local/go``.

Before installing, ManagedInstallDetector looks for a Go owned by another
package manager (Homebrew, asdf). Replacing such an installation behind the
manager's back is refused unless explicitly forced.
"""

import logging
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from gotoolkit.core.exceptions import (
    InstallError,
    ManagedByThirdPartyError,
    MissingCommandError,
)
from gotoolkit.core.filesystem import (
    FilesystemError,
    extract_tarball,
    find_executable,
    safe_rmtree,
)
from gotoolkit.core.platform import PlatformKey
from gotoolkit.toolchain.artifacts import METHOD_PKG, ArtifactDescriptor
from gotoolkit.toolchain.target import SYSTEM_PREFIX, InstallTarget

logger = logging.getLogger(__name__)

COMMAND_TIMEOUT = 60

Which = Callable[[str], Optional[Path]]


def _run(cmd: List[str], timeout: Optional[float] = COMMAND_TIMEOUT):
    return subprocess.run(
        cmd, capture_output=True, text=True, timeout=timeout, check=False
    )


# ============================================================================
# Third-party Package Managers
# ============================================================================


@dataclass(frozen=True)
class ManagedInstall:
    """A Go installation owned by another package manager."""

    manager: str
    suggestion: str


class PackageManagerProbe(ABC):
    """Detects whether one package manager owns the Go installation."""

    name = ""
    executable = ""
    suggestion = ""
    platforms: Sequence[str] = ()

    def applies_to(self, platform_key: PlatformKey) -> bool:
        return platform_key.os in self.platforms

    @abstractmethod
    def manages_go(self, executable: Path) -> bool:
        """Return True if this manager owns the Go installation."""
        pass

    def detect(self, platform_key: PlatformKey, which: Which) -> Optional[ManagedInstall]:
        if not self.applies_to(platform_key):
            return None

        executable = which(self.executable)
        if executable is None:
            return None

        try:
            managed = self.manages_go(executable)
        except (OSError, subprocess.TimeoutExpired) as e:
            logger.debug(f"{self.name} probe failed: {e}")
            return None

        if managed:
            return ManagedInstall(self.name, self.suggestion)
        return None


class HomebrewProbe(PackageManagerProbe):
    name = "Homebrew"
    executable = "brew"
    suggestion = "brew upgrade go"
    platforms = ("darwin",)

    def manages_go(self, executable: Path) -> bool:
        result = _run([str(executable), "list", "--versions", "go"])
        return result.returncode == 0 and bool(result.stdout.strip())


class AsdfProbe(PackageManagerProbe):
    name = "asdf"
    executable = "asdf"
    suggestion = "asdf install golang latest && asdf global golang latest"
    platforms = ("darwin", "linux")

    def manages_go(self, executable: Path) -> bool:
        plugins = _run([str(executable), "plugin", "list"])
        if plugins.returncode != 0:
            return False
        if "golang" not in [line.strip() for line in plugins.stdout.splitlines()]:
            return False
        return _run([str(executable), "list", "golang"]).returncode == 0


DEFAULT_PROBES: List[PackageManagerProbe] = [HomebrewProbe(), AsdfProbe()]


class ManagedInstallDetector:
    """
    Detect Go installations owned by third-party package managers.

    Example:
        >>> detector = ManagedInstallDetector()
        >>> detector.ensure_not_managed(PlatformKey("darwin", "arm64"), force=False)
    """

    def __init__(
        self,
        probes: Optional[Sequence[PackageManagerProbe]] = None,
        which: Optional[Which] = None,
    ):
        self.probes = list(DEFAULT_PROBES if probes is None else probes)
        self.which = which or find_executable

    def detect(self, platform_key: PlatformKey) -> Optional[ManagedInstall]:
        for probe in self.probes:
            managed = probe.detect(platform_key, self.which)
            if managed:
                return managed
        return None

    def ensure_not_managed(self, platform_key: PlatformKey, force: bool) -> None:
        """
        Refuse to continue when another manager owns Go, unless forced.

        Raises:
            ManagedByThirdPartyError: If a managed install is found and force
                is False
        """
        managed = self.detect(platform_key)
        if managed is None:
            return

        error = ManagedByThirdPartyError(managed.manager, managed.suggestion)
        if not force:
            raise error
        logger.warning(f"{error} Proceeding because a direct install was forced.")


# ============================================================================
# Installer
# ============================================================================


class Installer:
    """
    Install a verified artifact into the target prefix.

    Args:
        which: Executable lookup (default: PATH search)
    """

    def __init__(self, which: Optional[Which] = None):
        self.which = which or find_executable

    def install(
        self, artifact_path: Path, descriptor: ArtifactDescriptor, target: InstallTarget
    ) -> InstallTarget:
        """
        Install the artifact.

        Args:
            artifact_path: Verified artifact file
            descriptor: Artifact description (selects the install method)
            target: Resolved install target

        Returns:
            The target the toolchain actually landed in

        Raises:
            InstallError: If installation fails or preconditions are not met
            MissingCommandError: If a required system command is missing
        """
        if descriptor.install_method == METHOD_PKG:
            return self._install_pkg(artifact_path, target)
        return self._install_tarball(artifact_path, target)

    def _require(self, command: str) -> Path:
        path = self.which(command)
        if path is None:
            raise MissingCommandError(command)
        return path

    def _elevated(self, cmd: List[str], target: InstallTarget) -> List[str]:
        if target.use_sudo:
            return [str(self._require("sudo"))] + cmd
        return cmd

    def _install_pkg(self, artifact_path: Path, target: InstallTarget) -> InstallTarget:
        if not target.elevated:
            raise InstallError("pkg install requires sudo or root")

        installer = self._require("installer")
        logger.info(
            f"Installing Go with installer: {artifact_path.name} (may prompt for sudo)"
        )
        cmd = self._elevated(
            [str(installer), "-pkg", str(artifact_path), "-target", "/"], target
        )
        try:
            result = _run(cmd, timeout=None)
        except OSError as e:
            raise InstallError(f"pkg installation failed: {e}") from e
        if result.returncode != 0:
            raise InstallError(f"pkg installation failed: {result.stderr.strip()}")

        return InstallTarget(prefix=SYSTEM_PREFIX, use_sudo=target.use_sudo, elevated=True)

    def _install_tarball(
        self, artifact_path: Path, target: InstallTarget
    ) -> InstallTarget:
        logger.info(f"Installing Go tarball to {target.prefix} (may prompt for sudo)")
        if target.use_sudo:
            self._extract_with_sudo(artifact_path, target)
        else:
            self._extract_in_process(artifact_path, target)
        return target

    def _extract_in_process(self, artifact_path: Path, target: InstallTarget) -> None:
        try:
            target.prefix.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise InstallError(f"cannot create {target.prefix}: {e}") from e

        try:
            if target.install_dir.is_symlink():
                logger.info(f"Removing existing link {target.install_dir}")
                target.install_dir.unlink()
            elif target.install_dir.exists():
                logger.info(f"Removing existing {target.install_dir}")
                safe_rmtree(target.install_dir, require_prefix=target.prefix)
            extract_tarball(artifact_path, target.prefix)
        except (FilesystemError, OSError, ValueError) as e:
            raise InstallError(f"extraction failed: {e}") from e

    def _extract_with_sudo(self, artifact_path: Path, target: InstallTarget) -> None:
        tar = self._require("tar")
        steps = [
            ["mkdir", "-p", str(target.prefix)],
            ["rm", "-rf", str(target.install_dir)],
            [
                str(tar),
                "--no-same-owner",
                "-C",
                str(target.prefix),
                "-xzf",
                str(artifact_path),
            ],
        ]
        if target.install_dir.exists():
            logger.info(f"Removing existing {target.install_dir}")

        for step in steps:
            try:
                result = _run(self._elevated(step, target), timeout=None)
            except OSError as e:
                raise InstallError(f"extraction failed: {e}") from e
            if result.returncode != 0:
                raise InstallError(
                    f"extraction failed: '{' '.join(step)}' exited with "
                    f"{result.returncode}: {result.stderr.strip()}"
                )
