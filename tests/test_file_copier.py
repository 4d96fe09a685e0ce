"""
Tests for FileCopier — strategy choice at the threshold and atomic writes.
"""

import os
import stat
from pathlib import Path

import pytest

from restbase.core.errors import FilesystemError
from restbase.core.services.file_copier import (
    CHUNK_SIZE,
    FileCopier,
    backup_file,
    write_atomic,
)

THRESHOLD = 4096


def _make(path: Path, size: int) -> bytes:
    data = os.urandom(size)
    path.write_bytes(data)
    return data


class TestStrategy:
    @pytest.mark.parametrize(
        "size, strategy",
        [
            (THRESHOLD - 1, "buffered"),
            (THRESHOLD, "buffered"),
            (THRESHOLD + 1, "streamed"),
        ],
    )
    def test_threshold_boundaries(self, tmp_path, size, strategy):
        src = tmp_path / "src.bin"
        data = _make(src, size)
        dst = tmp_path / "out" / "dst.bin"
        dst.parent.mkdir()

        stats = FileCopier(threshold_bytes=THRESHOLD).copy(src, dst)

        assert stats.strategy == strategy
        assert stats.size == size
        assert dst.read_bytes() == data

    def test_empty_file(self, tmp_path):
        src = tmp_path / "empty"
        src.write_bytes(b"")
        dst = tmp_path / "copy"
        stats = FileCopier(threshold_bytes=THRESHOLD).copy(src, dst)
        assert stats.strategy == "buffered"
        assert dst.read_bytes() == b""

    def test_streamed_uses_fixed_chunks(self, tmp_path):
        size = CHUNK_SIZE * 3 + 10
        src = tmp_path / "big"
        data = _make(src, size)
        dst = tmp_path / "big.copy"
        stats = FileCopier(threshold_bytes=1024).copy(src, dst)
        assert stats.strategy == "streamed"
        assert stats.chunks == 4
        assert dst.read_bytes() == data


class TestAtomicity:
    def test_no_temp_files_left_behind(self, tmp_path):
        src = tmp_path / "a"
        _make(src, 100)
        out = tmp_path / "out"
        out.mkdir()
        FileCopier(threshold_bytes=10).copy(src, out / "a")
        assert [p.name for p in out.iterdir()] == ["a"]

    def test_missing_source(self, tmp_path):
        with pytest.raises(FilesystemError, match="not found"):
            FileCopier().copy(tmp_path / "nope", tmp_path / "dst")
        assert not (tmp_path / "dst").exists()

    def test_source_directory_is_rejected(self, tmp_path):
        (tmp_path / "d").mkdir()
        with pytest.raises(FilesystemError, match="regular file"):
            FileCopier().copy(tmp_path / "d", tmp_path / "dst")

    def test_missing_destination_directory(self, tmp_path):
        src = tmp_path / "a"
        _make(src, 10)
        with pytest.raises(FilesystemError):
            FileCopier().copy(src, tmp_path / "no" / "such" / "dir" / "a")

    def test_existing_destination_untouched_when_copy_fails(self, tmp_path, monkeypatch):
        work = tmp_path / "scratch"
        work.mkdir()
        src = work / "a"
        _make(src, 10)
        dst = work / "b"
        dst.write_bytes(b"original")

        def broken_replace(*args, **kwargs):
            raise OSError("disk on fire")

        monkeypatch.setattr(os, "replace", broken_replace)
        with pytest.raises(FilesystemError):
            FileCopier().copy(src, dst)
        assert dst.read_bytes() == b"original"
        assert sorted(p.name for p in work.iterdir()) == ["a", "b"]

    def test_mode_bits_are_preserved(self, tmp_path):
        src = tmp_path / "run.sh"
        src.write_text("#!/bin/sh\n")
        src.chmod(0o755)
        dst = tmp_path / "copy.sh"
        FileCopier().copy(src, dst)
        assert stat.S_IMODE(dst.stat().st_mode) == 0o755


class TestHelpers:
    def test_write_atomic(self, tmp_path):
        dst = tmp_path / "f.txt"
        assert write_atomic(dst, b"hello") == 5
        assert dst.read_bytes() == b"hello"
        assert stat.S_IMODE(dst.stat().st_mode) == 0o644

    def test_write_atomic_into_missing_directory(self, tmp_path):
        with pytest.raises(FilesystemError):
            write_atomic(tmp_path / "missing" / "f", b"x")

    def test_backup_file(self, tmp_path):
        original = tmp_path / "package.json"
        original.write_text("{}")
        backup = backup_file(original)
        try:
            assert backup != original
            assert backup.read_text() == "{}"
        finally:
            backup.unlink()

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            FileCopier(threshold_bytes=-1)
        with pytest.raises(ValueError):
            FileCopier(chunk_size=0)
