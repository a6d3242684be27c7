"""
Unit tests for the file store.
"""

import logging
from pathlib import Path

import pytest

from tinyhttpd.handlers.files import FileStore


class TestFileStore:
    """Tests for FileStore class."""

    @pytest.mark.parametrize("request_path, name", [
        ("/files/foo.txt", "foo.txt"),
        ("/files/a/b/c.txt", "c.txt"),
        ("/files/../../etc/passwd", "passwd"),
        ("/files/", "files"),
    ])
    def test_name_for(self, request_path: str, name: str):
        assert FileStore.name_for(request_path) == name

    def test_write_then_read(self, files_dir: Path):
        store = FileStore(str(files_dir))

        assert store.write("x.bin", b"\x01\x02") is True
        assert store.exists("x.bin")
        assert store.read("x.bin") == b"\x01\x02"
        assert (files_dir / "x.bin").read_bytes() == b"\x01\x02"

    def test_missing_file(self, files_dir: Path):
        store = FileStore(str(files_dir))

        assert store.exists("nope") is False

    def test_read_failure_returns_empty(self, files_dir: Path, caplog):
        store = FileStore(str(files_dir))

        with caplog.at_level(logging.WARNING, logger="tinyhttpd.handlers.files"):
            assert store.read("nope") == b""

        assert "Failed to read" in caplog.text

    def test_write_failure_returns_false(self, tmp_path: Path, caplog):
        store = FileStore(str(tmp_path / "missing-dir"))

        with caplog.at_level(logging.WARNING, logger="tinyhttpd.handlers.files"):
            assert store.write("x", b"data") is False

        assert "Failed to write" in caplog.text

    @pytest.mark.parametrize("name", ["", ".", ".."])
    def test_invalid_names(self, files_dir: Path, name: str):
        store = FileStore(str(files_dir))

        assert store.exists(name) is False
        assert store.write(name, b"data") is False

    def test_empty_root_is_relative(self):
        assert FileStore("").path_for("a.txt") == Path("a.txt")

    @pytest.mark.parametrize("name", ["a\x00b", "a" * 300])
    def test_unrepresentable_names(self, files_dir: Path, name: str, caplog):
        """Names the OS rejects behave like missing files, not crashes."""
        store = FileStore(str(files_dir))

        with caplog.at_level(logging.WARNING, logger="tinyhttpd.handlers.files"):
            assert store.exists(name) is False
            assert store.write(name, b"data") is False

        assert "Failed to write" in caplog.text
