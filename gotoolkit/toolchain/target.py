"""
Install target resolution.

Decides once per run where the toolchain goes. With root or sudo available
the system prefix ``/usr/local`` is used; otherwise the user prefix
(``GO_PREFIX``, default ``~/.local``). The toolchain tree always lands at
``<prefix>/go`` with its binary at ``<prefix>/go/bin/go``.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from gotoolkit.core.config import Settings
from gotoolkit.core.filesystem import find_executable

logger = logging.getLogger(__name__)

SYSTEM_PREFIX = Path("/usr/local")
INSTALL_DIR_NAME = "go"


@dataclass(frozen=True)
class InstallTarget:
    """Where and how the toolchain is installed."""

    prefix: Path
    """Directory that receives the ``go`` tree"""

    use_sudo: bool = False
    """Whether filesystem mutations go through sudo"""

    elevated: bool = False
    """Whether the run can write system-owned locations (root or sudo)"""

    @property
    def install_dir(self) -> Path:
        return self.prefix / INSTALL_DIR_NAME

    @property
    def bin_dir(self) -> Path:
        return self.install_dir / "bin"

    @property
    def binary(self) -> Path:
        return self.bin_dir / "go"


def current_euid() -> int:
    return os.geteuid() if hasattr(os, "geteuid") else -1


def resolve_install_target(
    settings: Settings,
    euid: Optional[int] = None,
    sudo_path: Optional[Path] = None,
    detect_sudo: bool = True,
) -> InstallTarget:
    """
    Resolve the install target for this run.

    Args:
        settings: Run settings (provides the non-privileged prefix)
        euid: Effective user id (default: os.geteuid())
        sudo_path: Path to sudo, if already known
        detect_sudo: Look sudo up on PATH when sudo_path is not given

    Returns:
        InstallTarget
    """
    euid = current_euid() if euid is None else euid
    if sudo_path is None and detect_sudo:
        sudo_path = find_executable("sudo")

    is_root = euid == 0
    if is_root or sudo_path is not None:
        target = InstallTarget(
            prefix=SYSTEM_PREFIX,
            use_sudo=not is_root,
            elevated=True,
        )
    else:
        target = InstallTarget(prefix=Path(settings.user_prefix).expanduser())
        logger.info(f"No sudo available. Will install to {target.install_dir}")

    logger.debug(f"Install target: {target}")
    return target
