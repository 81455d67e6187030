"""
File system utilities for gotoolkit.

This module provides the file operations the install pipeline relies on:
- Executable lookup on an explicit search path
- Safe tar extraction (traversal checks, no ownership transfer)
- Safe recursive deletion
- A per-run temporary workspace that is removed on every exit path
"""

import logging
import os
import shutil
import signal
import tarfile
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import List, Optional, Sequence, Union

logger = logging.getLogger(__name__)


# ============================================================================
# Errors
# ============================================================================


class FilesystemError(Exception):
    """Base exception for filesystem operations."""

    pass


class ArchiveExtractionError(FilesystemError):
    """Failed to extract an archive."""

    pass


class InsecureArchiveError(ArchiveExtractionError):
    """Archive contains insecure paths (directory traversal attempt)."""

    pass


# ============================================================================
# Path Utilities
# ============================================================================


def split_search_path(search_path: Optional[str] = None) -> List[Path]:
    """
    Split a PATH-style string into directories.

    Args:
        search_path: PATH-style string (default: $PATH)

    Returns:
        List of directories, empty entries dropped
    """
    if search_path is None:
        search_path = os.environ.get("PATH", "")
    return [Path(p) for p in search_path.split(os.pathsep) if p]


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def find_all_executables(
    name: str, search_paths: Optional[Sequence[Path]] = None
) -> List[Path]:
    """
    Find every executable with the given name, in search order.

    Args:
        name: Executable name (e.g., 'go')
        search_paths: Directories to search (default: $PATH)

    Returns:
        Matching paths, first match first, duplicates removed
    """
    if search_paths is None:
        search_paths = split_search_path()

    found: List[Path] = []
    for directory in search_paths:
        candidate = Path(directory) / name
        if is_executable(candidate) and candidate not in found:
            found.append(candidate)
    return found


def find_executable(
    name: str, search_paths: Optional[Sequence[Path]] = None
) -> Optional[Path]:
    """
    Find an executable in the system PATH or provided search paths.

    Args:
        name: Executable name (e.g., 'go', 'sudo')
        search_paths: Optional list of directories to search

    Returns:
        Path to executable if found, None otherwise

    Example:
        >>> find_executable('go')
        PosixPath('/usr/local/go/bin/go')
    """
    matches = find_all_executables(name, search_paths)
    return matches[0] if matches else None


# ============================================================================
# Archive Extraction
# ============================================================================


def _validate_archive_path(path: str, destination: Path) -> None:
    """
    Validate that an archive member path is safe to extract.

    Raises:
        InsecureArchiveError: If path attempts directory traversal
    """
    member_path = (destination / path).resolve()
    if not member_path.is_relative_to(destination.resolve()):
        raise InsecureArchiveError(
            f"Archive member '{path}' attempts directory traversal. "
            "This is a security risk and extraction has been blocked."
        )


def extract_tarball(archive_path: Union[str, Path], destination: Union[str, Path]) -> None:
    """
    Extract a gzip-compressed tarball into a directory.

    Ownership recorded in the archive is never applied: the ``data``
    extraction filter drops uid/gid information, which matches
    ``tar --no-same-owner`` even when running as root.

    Args:
        archive_path: Path to the .tar.gz file
        destination: Directory to extract into (created if missing)

    Raises:
        ArchiveExtractionError: If extraction fails
        InsecureArchiveError: If archive contains malicious paths
    """
    archive_path = Path(archive_path)
    destination = Path(destination)

    if not archive_path.exists():
        raise ArchiveExtractionError(f"Archive not found: {archive_path}")

    destination.mkdir(parents=True, exist_ok=True)

    try:
        with tarfile.open(archive_path, "r:gz") as tar:
            for member in tar.getmembers():
                _validate_archive_path(member.name, destination)
            tar.extractall(destination, filter="data")
    except InsecureArchiveError:
        raise
    except (tarfile.TarError, OSError) as e:
        raise ArchiveExtractionError(f"Failed to extract {archive_path}: {e}") from e


# ============================================================================
# Safe Deletion
# ============================================================================


def safe_rmtree(
    path: Union[str, Path], require_prefix: Optional[Union[str, Path]] = None
) -> None:
    """
    Safely remove a directory tree with safeguards.

    Args:
        path: Directory to remove
        require_prefix: If specified, path must be under this directory

    Raises:
        ValueError: If path is not under require_prefix
        FilesystemError: If deletion fails

    Example:
        >>> safe_rmtree('/usr/local/go', require_prefix='/usr/local')
        >>> safe_rmtree('/usr/bin', require_prefix='/home')  # ValueError
    """
    path = Path(path).resolve()

    if require_prefix is not None:
        require_prefix = Path(require_prefix).resolve()
        if not path.is_relative_to(require_prefix) or path == require_prefix:
            raise ValueError(
                f"Refusing to delete '{path}': not under required prefix '{require_prefix}'"
            )

    if not path.exists():
        return

    if not path.is_dir():
        raise FilesystemError(f"Path is not a directory: {path}")

    try:
        shutil.rmtree(path)
    except OSError as e:
        raise FilesystemError(f"Failed to remove directory '{path}': {e}") from e


# ============================================================================
# Temporary Workspace
# ============================================================================

CLEANUP_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGTERM", "SIGHUP") if hasattr(signal, name)
)


def _raise_system_exit(signum, frame):
    raise SystemExit(128 + signum)


@contextmanager
def exit_on_signals(signals: Sequence[int] = CLEANUP_SIGNALS):
    """
    Turn termination signals into SystemExit while the block runs.

    SIGINT already raises KeyboardInterrupt; this covers the signals whose
    default action would kill the process without running ``finally``
    blocks. Previous handlers are restored on exit. Outside the main thread
    this is a no-op, since handlers can only be installed there.
    """
    previous = {}
    try:
        for signum in signals:
            previous[signum] = signal.signal(signum, _raise_system_exit)
    except ValueError:
        logger.debug("Not in main thread; signal cleanup handlers not installed")

    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


@contextmanager
def temporary_directory(prefix: str = "gotoolkit_"):
    """
    Context manager for temporary directory with guaranteed cleanup.

    The directory is removed on normal exit, on exceptions (including
    KeyboardInterrupt) and on SIGTERM/SIGHUP.

    Args:
        prefix: Prefix for temp directory name

    Yields:
        Path to temporary directory

    Example:
        >>> with temporary_directory() as tmp:
        ...     (tmp / 'go.tar.gz').write_bytes(b'...')
    """
    with exit_on_signals():
        temp_dir = Path(tempfile.mkdtemp(prefix=prefix))
        try:
            yield temp_dir
        finally:
            if temp_dir.exists():
                shutil.rmtree(temp_dir, ignore_errors=True)
                logger.debug(f"Removed workspace {temp_dir}")
