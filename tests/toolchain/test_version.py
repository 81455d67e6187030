"""
Unit tests for version parsing and comparison.
"""

import pytest

from gotoolkit.toolchain.version import (
    SemanticVersion,
    compare_versions,
    is_stable_version,
    strip_vendor_prefix,
)


class TestSemanticVersion:
    """Test SemanticVersion parsing."""

    def test_full_version(self):
        assert SemanticVersion.parse("1.22.5") == SemanticVersion(1, 22, 5)

    def test_missing_fields_padded(self):
        version = SemanticVersion.parse("1.22")
        assert (version.major, version.minor, version.patch) == (1, 22, 0)

    def test_prerelease_kept_but_ignored_for_equality(self):
        version = SemanticVersion.parse("1.23.0-rc1")
        assert version.prerelease == "rc1"
        assert version == SemanticVersion.parse("1.23.0")
        assert hash(version) == hash(SemanticVersion(1, 23, 0))

    def test_non_numeric_fields_are_zero(self):
        assert SemanticVersion.parse("x.y.z") == SemanticVersion(0, 0, 0)

    def test_never_raises(self):
        assert SemanticVersion.parse("") == SemanticVersion(0, 0, 0)


class TestCompareVersions:
    """Test compare_versions()."""

    @pytest.mark.parametrize(
        "a,b,expected",
        [
            ("1.22.5", "1.22.5", 0),
            ("1.22.5", "1.21.11", 1),
            ("1.21.11", "1.22.5", -1),
            ("1.9", "1.10", -1),
            ("1.22", "1.22.0", 0),
            ("1.22.10", "1.22.9", 1),
            ("2.0", "1.99.99", 1),
            ("1.23.0-rc1", "1.23.0", 0),
        ],
    )
    def test_ordering(self, a, b, expected):
        assert compare_versions(a, b) == expected

    @pytest.mark.parametrize(
        "a,b", [("1.22.5", "1.21.11"), ("1.9", "1.10"), ("1.0", "1.0.0")]
    )
    def test_antisymmetric(self, a, b):
        assert compare_versions(a, b) == -compare_versions(b, a)

    @pytest.mark.parametrize("a", ["", "abc", "1..2", "go1.22.5", "1.2.3.4"])
    def test_never_raises(self, a):
        assert compare_versions(a, "1.0") in (-1, 0, 1)

    def test_reflexive_with_prerelease(self):
        assert compare_versions("1.24.0-beta1", "1.24.0-beta1") == 0


class TestHelpers:
    """Test prefix and stability helpers."""

    def test_strip_vendor_prefix(self):
        assert strip_vendor_prefix("go1.22.5") == "1.22.5"
        assert strip_vendor_prefix(" go1.22.5\n") == "1.22.5"
        assert strip_vendor_prefix("1.22.5") == "1.22.5"

    @pytest.mark.parametrize(
        "version,stable",
        [
            ("go1.22.5", True),
            ("go1.23", True),
            ("go1.23rc1", True),
            ("go1.23-rc1", False),
            ("go1.23.0-beta2", False),
        ],
    )
    def test_is_stable_version(self, version, stable):
        assert is_stable_version(version) is stable
