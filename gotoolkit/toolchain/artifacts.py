"""
Installer artifact selection and retrieval.

The artifact name is fully determined by (release, os, arch, extension),
for example ``go1.22.5.darwin-arm64.pkg`` or ``go1.22.5.linux-amd64.tar.gz``.
The macOS package installer is only used when the run is elevated; every
other case uses the tarball.

Checksums are published next to each artifact (``<url>.sha256``). When the
primary host answers with anything but a digest, the mirrors are tried in
order. Installation never proceeds without a checksum.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence, Tuple

from gotoolkit.core.config import Settings
from gotoolkit.core.download import FetchError, download_file, fetch_text
from gotoolkit.core.exceptions import ChecksumUnavailableError
from gotoolkit.core.platform import PlatformKey
from gotoolkit.core.verification import extract_leading_digest
from gotoolkit.toolchain.target import InstallTarget

logger = logging.getLogger(__name__)

METHOD_TARBALL = "tar"
METHOD_PKG = "pkg"

_EXTENSIONS = {
    METHOD_TARBALL: "tar.gz",
    METHOD_PKG: "pkg",
}

CHECKSUM_SUFFIX = ".sha256"


@dataclass(frozen=True)
class ArtifactDescriptor:
    """Immutable description of the artifact for one install attempt."""

    version: str
    filename: str
    url: str
    checksum_url: str
    install_method: str
    mirror_checksum_urls: Tuple[str, ...] = ()

    @property
    def checksum_sources(self) -> Tuple[str, ...]:
        """Checksum URLs in the order they are tried."""
        return (self.checksum_url,) + tuple(self.mirror_checksum_urls)


def select_install_method(platform_key: PlatformKey, target: InstallTarget) -> str:
    """Package installer on elevated macOS runs, tarball everywhere else."""
    if platform_key.is_macos and target.elevated:
        return METHOD_PKG
    return METHOD_TARBALL


def artifact_filename(version: str, platform_key: PlatformKey, method: str) -> str:
    """
    Build the upstream artifact filename.

    Example:
        >>> artifact_filename("go1.22.5", PlatformKey("linux", "amd64"), "tar")
        'go1.22.5.linux-amd64.tar.gz'
    """
    return f"{version}.{platform_key.artifact_suffix()}.{_EXTENSIONS[method]}"


def build_artifact(
    version: str,
    platform_key: PlatformKey,
    target: InstallTarget,
    settings: Settings,
) -> ArtifactDescriptor:
    """
    Construct the descriptor for the artifact to install.

    Args:
        version: Release name (e.g. 'go1.22.5')
        platform_key: Host platform
        target: Resolved install target
        settings: Provides the download base and checksum mirrors

    Returns:
        ArtifactDescriptor
    """
    method = select_install_method(platform_key, target)
    filename = artifact_filename(version, platform_key, method)
    url = f"{settings.download_base.rstrip('/')}/{filename}"
    mirrors = tuple(
        f"{mirror.rstrip('/')}/{filename}{CHECKSUM_SUFFIX}"
        for mirror in settings.checksum_mirrors
    )
    return ArtifactDescriptor(
        version=version,
        filename=filename,
        url=url,
        checksum_url=url + CHECKSUM_SUFFIX,
        install_method=method,
        mirror_checksum_urls=mirrors,
    )


class ArtifactFetcher:
    """
    Download an artifact and its published checksum.

    Example:
        >>> fetcher = ArtifactFetcher(Settings())
        >>> digest = fetcher.fetch_checksum(descriptor)
        >>> path = fetcher.fetch_artifact(descriptor, workspace)
    """

    def __init__(self, settings: Settings):
        self.settings = settings

    def fetch_artifact(self, descriptor: ArtifactDescriptor, workspace: Path) -> Path:
        """
        Download the artifact into the workspace.

        Raises:
            DownloadError: If the download fails
        """
        logger.info(f"Downloading: {descriptor.url}")
        return download_file(
            descriptor.url,
            Path(workspace) / descriptor.filename,
            timeout=self.settings.download_timeout,
        )

    def fetch_checksum(self, descriptor: ArtifactDescriptor) -> str:
        """
        Fetch the expected SHA-256 digest, falling back through the mirrors.

        Returns:
            64-character lowercase hex digest

        Raises:
            ChecksumUnavailableError: If no source returned a valid digest
        """
        sources: Sequence[str] = descriptor.checksum_sources
        logger.info(f"Fetching checksum: {descriptor.checksum_url}")

        for index, url in enumerate(sources):
            if index:
                logger.info(f"Trying checksum mirror: {url}")
            try:
                body = fetch_text(url, self.settings.checksum_timeout)
            except FetchError as e:
                logger.debug(f"Checksum fetch failed: {e}")
                continue

            digest = extract_leading_digest(body)
            if digest:
                return digest
            logger.info(f"Checksum source returned unexpected content: {url}")

        raise ChecksumUnavailableError(descriptor.filename, sources)
