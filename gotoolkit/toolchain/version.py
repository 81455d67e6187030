"""
Dotted version parsing and comparison.

The comparator is permissive: it never raises, pads missing
fields with zero and treats non-numeric fields as zero. Pre-release suffixes
(anything after the first ``-``) are stripped before comparison, so
``1.23.0-rc1`` and ``1.23.0`` compare equal. Pre-release markers are only
used to decide whether a release is stable, never for ordering.
"""

import re
from dataclasses import dataclass
from typing import Optional

VENDOR_PREFIX = "go"

PRERELEASE_MARKERS = ("-rc", "-beta")

_NUMERIC = re.compile(r"^[0-9]+$")


@dataclass(frozen=True)
class SemanticVersion:
    """
    Parsed (major, minor, patch) triple with an optional pre-release tag.

    Equality and ordering only consider the numeric triple.

    Example:
        >>> SemanticVersion.parse("1.23.0-rc1")
        SemanticVersion(major=1, minor=23, patch=0, prerelease='rc1')
        >>> SemanticVersion.parse("1.9") < SemanticVersion.parse("1.10")
        True
    """

    major: int
    minor: int
    patch: int
    prerelease: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> "SemanticVersion":
        """Parse permissively; never raises."""
        core, _, prerelease = text.strip().partition("-")
        fields = core.split(".")
        while len(fields) < 3:
            fields.append("0")
        major, minor, patch = (_to_int(f) for f in fields[:3])
        return cls(major, minor, patch, prerelease or None)

    @property
    def key(self) -> tuple:
        return (self.major, self.minor, self.patch)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self.key == other.key

    def __hash__(self) -> int:
        return hash(self.key)

    def __lt__(self, other: "SemanticVersion") -> bool:
        return self.key < other.key

    def __le__(self, other: "SemanticVersion") -> bool:
        return self.key <= other.key

    def __gt__(self, other: "SemanticVersion") -> bool:
        return self.key > other.key

    def __ge__(self, other: "SemanticVersion") -> bool:
        return self.key >= other.key

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


def _to_int(field: str) -> int:
    return int(field) if _NUMERIC.match(field) else 0


def compare_versions(a: str, b: str) -> int:
    """
    Compare two dotted version strings numerically.

    Args:
        a: First version (e.g., "1.22.5")
        b: Second version (e.g., "1.21.11")

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b

    Example:
        >>> compare_versions("1.22.5", "1.21.11")
        1
        >>> compare_versions("1.9", "1.10")
        -1
        >>> compare_versions("1.23.0-rc1", "1.23.0")
        0
    """
    left = SemanticVersion.parse(a)
    right = SemanticVersion.parse(b)
    if left < right:
        return -1
    if left > right:
        return 1
    return 0


def strip_vendor_prefix(version: str) -> str:
    """
    Remove the ``go`` prefix from a release name.

    Example:
        >>> strip_vendor_prefix("go1.22.5")
        '1.22.5'
    """
    version = version.strip()
    if version[: len(VENDOR_PREFIX)].lower() == VENDOR_PREFIX:
        return version[len(VENDOR_PREFIX) :]
    return version


def is_stable_version(version: str) -> bool:
    """Return False for release names carrying a pre-release marker."""
    return not any(marker in version for marker in PRERELEASE_MARKERS)
