"""
Filesystem operations — directories and files, each with its own undo.

Targets are absolute paths that a plan builder has already confined
with a PathGuard. Nothing here creates parent directories implicitly:
a directory must exist before anything is placed in it, which is what
the phase ordering guarantees.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from restbase.adapters.base import Operation
from restbase.core.errors import FilesystemError
from restbase.core.services.file_copier import (
    CopyStats,
    FileCopier,
    backup_file,
    write_atomic,
)

logger = logging.getLogger(__name__)


class CreateDir(Operation):
    """Create one directory (its parent must already exist).

    Undo removes the directory only if it is empty again.
    """

    def __init__(self, path: Path):
        super().__init__()
        self.path = path

    @property
    def kind(self) -> str:
        return "create_dir"

    @property
    def target(self) -> Path:
        return self.path

    def describe(self) -> str:
        return f"mkdir {self.path}"

    def _apply(self) -> None:
        try:
            self.path.mkdir()
        except FileExistsError as e:
            raise FilesystemError(
                f"Directory already exists: {self.path}", path=str(self.path)
            ) from e
        except FileNotFoundError as e:
            raise FilesystemError(
                f"Parent directory missing for {self.path}", path=str(self.path)
            ) from e
        except PermissionError as e:
            raise FilesystemError(
                f"Permission denied creating directory {self.path}",
                path=str(self.path),
            ) from e

    def _revert(self) -> None:
        if not self.path.is_dir():
            return
        if any(self.path.iterdir()):
            raise FilesystemError(
                f"Directory not empty, left in place: {self.path}",
                path=str(self.path),
            )
        self.path.rmdir()


class _FileOperation(Operation):
    """Shared create-or-replace logic for WriteFile and CopyFile.

    When the destination already exists (and overwriting is allowed),
    its bytes are backed up first so undo can put them back.
    """

    def __init__(self, path: Path, overwrite: bool = False):
        super().__init__()
        self.path = path
        self.overwrite = overwrite
        self._backup: Path | None = None
        self._replaced = False
        # Permission bits of the file being replaced; a rewrite keeps them.
        self._kept_mode: int | None = None

    @property
    def target(self) -> Path:
        return self.path

    @property
    def replaced_existing(self) -> bool:
        return self._replaced

    def _prepare_destination(self) -> None:
        if self.path.is_dir():
            raise FilesystemError(
                f"A directory is in the way: {self.path}", path=str(self.path)
            )
        if not self.path.exists():
            return
        if not self.overwrite:
            raise FilesystemError(
                f"File exists unexpectedly: {self.path}", path=str(self.path)
            )
        self._kept_mode = stat.S_IMODE(self.path.stat().st_mode)
        self._backup = backup_file(self.path)
        self._replaced = True
        logger.debug("Backed up %s -> %s", self.path, self._backup)

    def _revert(self) -> None:
        if self._replaced and self._backup is not None:
            FileCopier().copy(self._backup, self.path)
        else:
            self.path.unlink(missing_ok=True)

    def discard(self) -> None:
        if self._backup is not None:
            self._backup.unlink(missing_ok=True)
            self._backup = None


class WriteFile(_FileOperation):
    """Write generated content to a file (atomic temp-file + rename).

    ``mode`` applies to new files; a replaced file keeps its own mode.
    """

    def __init__(
        self,
        path: Path,
        content: str | bytes,
        overwrite: bool = False,
        mode: int = 0o644,
    ):
        super().__init__(path, overwrite=overwrite)
        self.content = content.encode("utf-8") if isinstance(content, str) else content
        self.mode = mode

    @property
    def kind(self) -> str:
        return "write_file"

    def describe(self) -> str:
        return f"write {self.path}"

    def _apply(self) -> None:
        self._prepare_destination()
        mode = self.mode if self._kept_mode is None else self._kept_mode
        write_atomic(self.path, self.content, mode=mode)


class CopyFile(_FileOperation):
    """Copy a source file into the project through the FileCopier."""

    def __init__(
        self,
        source: Path,
        path: Path,
        copier: FileCopier,
        overwrite: bool = False,
    ):
        super().__init__(path, overwrite=overwrite)
        self.source = source
        self.copier = copier
        self.stats: CopyStats | None = None

    @property
    def kind(self) -> str:
        return "copy_file"

    def describe(self) -> str:
        return f"copy {self.source.name} -> {self.path}"

    def _apply(self) -> None:
        self._prepare_destination()
        self.stats = self.copier.copy(self.source, self.path)
        if self._kept_mode is not None:
            os.chmod(self.path, self._kept_mode)
