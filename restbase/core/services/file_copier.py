"""
File copier — buffered or streamed copy with an all-or-nothing destination.

Small files are read and written in one go. Files above the threshold
are streamed in fixed-size chunks so peak memory does not grow with the
file. Either way the bytes land in a temp file next to the destination
and are renamed into place only once complete.
"""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable

from restbase.core.errors import FilesystemError

logger = logging.getLogger(__name__)

DEFAULT_STREAMING_THRESHOLD = 1024 * 1024  # 1 MiB
CHUNK_SIZE = 64 * 1024


@dataclass
class CopyStats:
    """What a single copy did."""

    source: str
    destination: str
    size: int
    strategy: str  # "buffered" | "streamed"
    chunks: int = 1


def _atomic_replace(dst: Path, fill: Callable[[BinaryIO], None], mode: int | None) -> None:
    """Create ``dst`` via a temp file in the same directory + ``os.replace``."""
    fd, tmp_name = tempfile.mkstemp(
        dir=dst.parent,
        prefix=f".{dst.name}.",
        suffix=".tmp",
    )
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fill(fh)
            fh.flush()
            os.fsync(fh.fileno())
        if mode is not None:
            os.chmod(tmp, mode)
        os.replace(tmp, dst)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def write_atomic(dst: Path, data: bytes, mode: int | None = 0o644) -> int:
    """Write ``data`` to ``dst`` atomically. Returns the byte count."""
    try:
        _atomic_replace(dst, lambda fh: fh.write(data), mode)
    except OSError as e:
        raise FilesystemError(f"Failed to write {dst}: {e}", path=str(dst)) from e
    return len(data)


class FileCopier:
    """Copy single files, choosing a strategy by size.

    Args:
        threshold_bytes: Files strictly larger than this are streamed.
        chunk_size: Streaming chunk size (independent of file size).
    """

    def __init__(
        self,
        threshold_bytes: int = DEFAULT_STREAMING_THRESHOLD,
        chunk_size: int = CHUNK_SIZE,
    ):
        if threshold_bytes < 0:
            raise ValueError("threshold_bytes must be >= 0")
        if chunk_size <= 0:
            raise ValueError("chunk_size must be > 0")
        self.threshold_bytes = threshold_bytes
        self.chunk_size = chunk_size

    def copy(self, src: Path, dst: Path) -> CopyStats:
        """Copy ``src`` to ``dst``.

        Raises:
            FilesystemError: Missing source, unreadable source, or a
                failed write. ``dst`` is left untouched in that case.
        """
        try:
            st = src.stat()
        except FileNotFoundError as e:
            raise FilesystemError(f"Source file not found: {src}", path=str(src)) from e
        except OSError as e:
            raise FilesystemError(f"Cannot stat {src}: {e}", path=str(src)) from e

        if not src.is_file():
            raise FilesystemError(f"Source is not a regular file: {src}", path=str(src))

        mode = st.st_mode & 0o7777
        try:
            if st.st_size > self.threshold_bytes:
                stats = self._streamed(src, dst, mode)
            else:
                stats = self._buffered(src, dst, mode)
        except OSError as e:
            raise FilesystemError(
                f"Failed to copy {src} to {dst}: {e}", path=str(dst)
            ) from e

        logger.debug(
            "Copied %s -> %s (%d bytes, %s)", src, dst, stats.size, stats.strategy
        )
        return stats

    def _buffered(self, src: Path, dst: Path, mode: int) -> CopyStats:
        data = src.read_bytes()
        _atomic_replace(dst, lambda fh: fh.write(data), mode)
        return CopyStats(
            source=str(src),
            destination=str(dst),
            size=len(data),
            strategy="buffered",
        )

    def _streamed(self, src: Path, dst: Path, mode: int) -> CopyStats:
        counter = {"bytes": 0, "chunks": 0}

        def fill(out: BinaryIO) -> None:
            with src.open("rb") as fin:
                while True:
                    chunk = fin.read(self.chunk_size)
                    if not chunk:
                        break
                    out.write(chunk)
                    counter["bytes"] += len(chunk)
                    counter["chunks"] += 1

        _atomic_replace(dst, fill, mode)
        return CopyStats(
            source=str(src),
            destination=str(dst),
            size=counter["bytes"],
            strategy="streamed",
            chunks=counter["chunks"],
        )


def backup_file(path: Path) -> Path:
    """Copy an existing file to a private temp location; returns the backup path."""
    fd, name = tempfile.mkstemp(prefix="restbase-backup-", suffix=f"-{path.name}")
    os.close(fd)
    backup = Path(name)
    try:
        shutil.copy2(path, backup)
    except OSError:
        backup.unlink(missing_ok=True)
        raise
    return backup


def backup_tree(path: Path) -> Path:
    """Copy an existing directory (symlinks kept as links) to a private temp dir."""
    backup = Path(tempfile.mkdtemp(prefix=f"restbase-backup-{path.name}-"))
    try:
        shutil.copytree(path, backup, symlinks=True, dirs_exist_ok=True)
    except OSError:
        shutil.rmtree(backup, ignore_errors=True)
        raise
    return backup


def restore_backup(backup: Path, path: Path) -> None:
    """Put ``backup`` (from ``backup_file`` or ``backup_tree``) back at ``path``."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    elif backup.is_dir() and (path.exists() or path.is_symlink()):
        path.unlink()
    if backup.is_dir():
        shutil.copytree(backup, path, symlinks=True)
    else:
        FileCopier().copy(backup, path)


def discard_backup(backup: Path) -> None:
    if backup.is_dir():
        shutil.rmtree(backup)
    else:
        backup.unlink(missing_ok=True)
