"""
Pytest configuration and shared fixtures for gotoolkit tests.
"""

import io
import stat
import tarfile
from pathlib import Path

import pytest

from gotoolkit.core.config import Settings


def pytest_addoption(parser):
    """Add custom command line options."""
    parser.addoption(
        "--integration",
        action="store_true",
        default=False,
        help="run integration tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    """Skip integration tests unless --integration flag is provided."""
    if not config.getoption("--integration"):
        skip_integration = pytest.mark.skip(reason="need --integration option to run")
        for item in items:
            if "integration" in item.keywords:
                item.add_marker(skip_integration)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers",
        "integration: marks tests as integration tests (requires --integration)",
    )


# ============================================================================
# Shared Test Fixtures
# ============================================================================


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings with test endpoints and a temporary user prefix."""
    return Settings(
        version_text_url="https://go.example/VERSION?m=text",
        release_listing_url="https://go.example/dl/?mode=json",
        download_base="https://go.example/dl",
        checksum_mirrors=[
            "https://mirror-a.example/go",
            "https://mirror-b.example/golang",
        ],
        user_prefix=tmp_path / "prefix",
    )


def write_fake_go(directory: Path, version_output: str, exit_code: int = 0) -> Path:
    """Create an executable shell script standing in for ``go``."""
    directory.mkdir(parents=True, exist_ok=True)
    binary = directory / "go"
    binary.write_text(
        "#!/bin/sh\n" f"echo '{version_output}'\n" f"exit {exit_code}\n"
    )
    binary.chmod(binary.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return binary


@pytest.fixture
def fake_go():
    """Factory fixture creating fake ``go`` executables."""
    return write_fake_go


def build_go_tarball(path: Path, version: str) -> Path:
    """Build a minimal Go-like tarball containing ``go/bin/go``."""
    script = f"#!/bin/sh\necho 'go version {version} linux/amd64'\n".encode()
    with tarfile.open(path, "w:gz") as tar:
        directory = tarfile.TarInfo("go")
        directory.type = tarfile.DIRTYPE
        directory.mode = 0o755
        tar.addfile(directory)

        bin_dir = tarfile.TarInfo("go/bin")
        bin_dir.type = tarfile.DIRTYPE
        bin_dir.mode = 0o755
        tar.addfile(bin_dir)

        binary = tarfile.TarInfo("go/bin/go")
        binary.size = len(script)
        binary.mode = 0o755
        binary.uid = 12345
        binary.gid = 12345
        tar.addfile(binary, io.BytesIO(script))
    return path


@pytest.fixture
def go_tarball():
    """Factory fixture creating Go-like tarballs."""
    return build_go_tarball
