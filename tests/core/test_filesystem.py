"""
Unit tests for filesystem utilities.
"""

import io
import os
import signal
import tarfile
from pathlib import Path

import pytest

from gotoolkit.core.filesystem import (
    ArchiveExtractionError,
    FilesystemError,
    InsecureArchiveError,
    exit_on_signals,
    extract_tarball,
    find_all_executables,
    find_executable,
    safe_rmtree,
    split_search_path,
    temporary_directory,
)


def _make_executable(directory: Path, name: str = "go") -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_text("#!/bin/sh\n")
    path.chmod(0o755)
    return path


class TestSearchPath:
    """Test executable lookup on explicit search paths."""

    def test_split_drops_empty_entries(self):
        value = os.pathsep.join(["/a", "", "/b"])
        assert split_search_path(value) == [Path("/a"), Path("/b")]

    def test_split_defaults_to_environment(self, monkeypatch):
        monkeypatch.setenv("PATH", os.pathsep.join(["/x", "/y"]))
        assert split_search_path() == [Path("/x"), Path("/y")]

    def test_find_first_match(self, tmp_path):
        first = _make_executable(tmp_path / "first")
        _make_executable(tmp_path / "second")
        paths = [tmp_path / "empty", tmp_path / "first", tmp_path / "second"]
        assert find_executable("go", paths) == first

    def test_find_all_in_order(self, tmp_path):
        first = _make_executable(tmp_path / "first")
        second = _make_executable(tmp_path / "second")
        paths = [tmp_path / "first", tmp_path / "second", tmp_path / "first"]
        assert find_all_executables("go", paths) == [first, second]

    def test_non_executable_ignored(self, tmp_path):
        (tmp_path / "go").write_text("not executable")
        (tmp_path / "go").chmod(0o644)
        assert find_executable("go", [tmp_path]) is None


class TestExtractTarball:
    """Test extract_tarball()."""

    def test_extracts_tree(self, tmp_path, go_tarball):
        archive = go_tarball(tmp_path / "go.tar.gz", "go1.22.5")
        dest = tmp_path / "prefix"

        extract_tarball(archive, dest)

        binary = dest / "go" / "bin" / "go"
        assert binary.is_file()
        assert os.access(binary, os.X_OK)

    def test_archive_ownership_not_applied(self, tmp_path, go_tarball):
        archive = go_tarball(tmp_path / "go.tar.gz", "go1.22.5")
        dest = tmp_path / "prefix"

        extract_tarball(archive, dest)

        assert (dest / "go" / "bin" / "go").stat().st_uid == os.getuid()

    def test_rejects_traversal(self, tmp_path):
        archive = tmp_path / "evil.tar.gz"
        payload = b"evil"
        with tarfile.open(archive, "w:gz") as tar:
            info = tarfile.TarInfo("../escaped")
            info.size = len(payload)
            tar.addfile(info, io.BytesIO(payload))

        with pytest.raises(InsecureArchiveError):
            extract_tarball(archive, tmp_path / "dest")
        assert not (tmp_path / "escaped").exists()

    def test_missing_archive(self, tmp_path):
        with pytest.raises(ArchiveExtractionError, match="not found"):
            extract_tarball(tmp_path / "missing.tar.gz", tmp_path / "dest")

    def test_corrupt_archive(self, tmp_path):
        archive = tmp_path / "corrupt.tar.gz"
        archive.write_bytes(b"not a tarball")
        with pytest.raises(ArchiveExtractionError, match="Failed to extract"):
            extract_tarball(archive, tmp_path / "dest")


class TestSafeRmtree:
    """Test safe_rmtree()."""

    def test_removes_directory(self, tmp_path):
        target = tmp_path / "go"
        (target / "bin").mkdir(parents=True)
        safe_rmtree(target, require_prefix=tmp_path)
        assert not target.exists()

    def test_refuses_outside_prefix(self, tmp_path):
        outside = tmp_path / "outside"
        outside.mkdir()
        with pytest.raises(ValueError, match="Refusing to delete"):
            safe_rmtree(outside, require_prefix=tmp_path / "prefix")
        assert outside.exists()

    def test_refuses_prefix_itself(self, tmp_path):
        with pytest.raises(ValueError):
            safe_rmtree(tmp_path, require_prefix=tmp_path)
        assert tmp_path.exists()

    def test_missing_is_noop(self, tmp_path):
        safe_rmtree(tmp_path / "missing", require_prefix=tmp_path)

    def test_file_is_rejected(self, tmp_path):
        path = tmp_path / "file"
        path.write_text("x")
        with pytest.raises(FilesystemError, match="not a directory"):
            safe_rmtree(path, require_prefix=tmp_path)


class TestTemporaryDirectory:
    """Test temporary_directory() cleanup guarantees."""

    def test_removed_on_success(self):
        with temporary_directory(prefix="gotoolkit_test_") as tmp:
            (tmp / "artifact").write_bytes(b"data")
            assert tmp.is_dir()
        assert not tmp.exists()

    def test_removed_on_error(self):
        with pytest.raises(RuntimeError):
            with temporary_directory() as tmp:
                raise RuntimeError("boom")
        assert not tmp.exists()

    def test_removed_on_keyboard_interrupt(self):
        with pytest.raises(KeyboardInterrupt):
            with temporary_directory() as tmp:
                raise KeyboardInterrupt
        assert not tmp.exists()

    def test_removed_on_sigterm(self):
        with pytest.raises(SystemExit) as exc_info:
            with temporary_directory() as tmp:
                os.kill(os.getpid(), signal.SIGTERM)
        assert exc_info.value.code == 128 + signal.SIGTERM
        assert not tmp.exists()

    def test_signal_handlers_restored(self):
        before = signal.getsignal(signal.SIGTERM)
        with exit_on_signals():
            assert signal.getsignal(signal.SIGTERM) is not before
        assert signal.getsignal(signal.SIGTERM) is before
