"""
Latest stable release discovery.

The resolver walks an ordered list of version sources and returns the first
answer that passes validation. Adding a mirror means adding a source to the
list, not another branch.

Default sources, in order:

1. go.dev plain-text endpoint (authoritative, e.g. ``go1.22.5``)
2. go.dev JSON release listing (first stable entry)

If every source fails the resolver raises NetworkError. It never guesses and
never falls back to a cached value.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from gotoolkit.core.config import Settings
from gotoolkit.core.download import FetchError, fetch_text
from gotoolkit.core.exceptions import NetworkError
from gotoolkit.toolchain.version import is_stable_version

logger = logging.getLogger(__name__)

STRICT_VERSION_PATTERN = re.compile(r"^go[0-9]+\.[0-9]+(\.[0-9]+)?$", re.IGNORECASE)
LISTING_VERSION_PATTERN = re.compile(r"^go[0-9]+\.[0-9]+(\.[0-9]+)?(-[a-z0-9]+)?$")


class VersionSource(ABC):
    """A single place the latest version can be read from."""

    name = "source"

    def __init__(self, url: str, timeout: float):
        self.url = url
        self.timeout = timeout

    @abstractmethod
    def fetch(self) -> Optional[str]:
        """
        Fetch the latest version from this source.

        Returns:
            Release name (e.g. 'go1.22.5'), or None if the response was not
            usable

        Raises:
            FetchError: If the endpoint could not be reached
        """
        pass

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.url!r})"


class PlainTextVersionSource(VersionSource):
    """
    Endpoint returning the release name as plain text.

    Only the first line is considered and it must be nothing but the release
    name. This rejects HTML error pages and captive-portal redirects that
    answer with a 200 status.
    """

    name = "version endpoint"

    def fetch(self) -> Optional[str]:
        body = fetch_text(self.url, self.timeout)
        lines = body.strip().splitlines()
        candidate = lines[0].strip() if lines else ""
        if STRICT_VERSION_PATTERN.match(candidate):
            return candidate
        logger.debug(f"Rejected response from {self.url}: {body[:80]!r}")
        return None


class ReleaseListingSource(VersionSource):
    """
    JSON array of release objects, each with a ``version`` field.

    The listing is assumed to be sorted newest first; the first stable entry
    is taken as latest and no sorting is performed. If upstream changes that
    ordering, this source returns the wrong release.
    """

    name = "release listing"

    def fetch(self) -> Optional[str]:
        body = fetch_text(self.url, self.timeout)
        for version in self.versions(body):
            if is_stable_version(version):
                return version
        return None

    @staticmethod
    def versions(body: str) -> List[str]:
        """
        Extract every well-formed release name from a listing, in order.

        Returns:
            Release names; empty when the body is not a JSON array
        """
        try:
            releases = json.loads(body)
        except ValueError:
            logger.debug("Release listing is not valid JSON")
            return []

        if not isinstance(releases, list):
            return []

        found = []
        for release in releases:
            if not isinstance(release, dict):
                continue
            version = release.get("version")
            if isinstance(version, str) and LISTING_VERSION_PATTERN.match(version):
                found.append(version)
        return found


def default_sources(settings: Settings) -> List[VersionSource]:
    return [
        PlainTextVersionSource(settings.version_text_url, settings.metadata_timeout),
        ReleaseListingSource(settings.release_listing_url, settings.metadata_timeout),
    ]


class RemoteVersionResolver:
    """
    Determine the latest stable upstream release.

    Example:
        >>> resolver = RemoteVersionResolver.from_settings(Settings())
        >>> resolver.resolve()
        'go1.22.5'
    """

    def __init__(self, sources: Sequence[VersionSource]):
        self.sources = list(sources)

    @classmethod
    def from_settings(cls, settings: Settings) -> "RemoteVersionResolver":
        return cls(default_sources(settings))

    def resolve(self) -> str:
        """
        Resolve the latest stable release name.

        Returns:
            Release name such as 'go1.22.5'

        Raises:
            NetworkError: If no source produced a valid version
        """
        for source in self.sources:
            try:
                version = source.fetch()
            except FetchError as e:
                logger.debug(f"{source.name} failed: {e}")
                continue

            if version:
                logger.debug(f"Latest version {version} from {source.name}")
                return version

            logger.debug(f"{source.name} returned no usable version")

        raise NetworkError("Could not determine latest Go version (network error)")
