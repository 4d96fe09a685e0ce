"""
Plan builder — turns "what the project contains" into ordered phases.

Every target path goes through the project's PathGuard when the
operation is built, and every copy source through the source guard, so
a plan that exists is already confined. Nothing here touches the
filesystem except to look (does a source exist, how big is it, is a
directory already there).

Phase layout:
    [root] → directories by depth → files → extra phases (install, git)

Directories are created one level per phase, each with a plain
``mkdir``, so an undo only ever removes a directory this run created.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any

from restbase.adapters.base import Operation
from restbase.adapters.shell.filesystem import CopyFile, CreateDir, WriteFile
from restbase.core.engine.executor import Phase
from restbase.core.errors import ValidationError
from restbase.core.models.template import GeneratedFile
from restbase.core.security.paths import PathGuard
from restbase.core.services.file_copier import FileCopier

logger = logging.getLogger(__name__)


@dataclass
class Plan:
    """Ordered phases plus anything worth telling the user up front."""

    phases: list[Phase] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def operation_count(self) -> int:
        return sum(len(p) for p in self.phases)

    def to_dict(self) -> dict[str, Any]:
        return {
            "phases": [p.to_dict() for p in self.phases],
            "operations": self.operation_count,
            "warnings": self.warnings,
        }


class PlanBuilder:
    """Collect guarded operations for one target tree.

    Args:
        guard: Confines every target to the project directory.
        source_guard: Confines every copy source to the source directory.
        copier: Shared FileCopier for CopyFile operations.
        max_file_size: Sources above this size are copied with a warning.
        create_root: Start with a phase that creates the guard's base.
        overwrite: Replace existing files (with backup) instead of failing.
    """

    def __init__(
        self,
        guard: PathGuard,
        source_guard: PathGuard,
        copier: FileCopier,
        max_file_size: int,
        create_root: bool = False,
        overwrite: bool = False,
    ):
        self.guard = guard
        self.source_guard = source_guard
        self.copier = copier
        self.max_file_size = max_file_size
        self.create_root = create_root
        self.overwrite = overwrite
        self.warnings: list[str] = []
        self._dirs: set[PurePosixPath] = set()
        self._files: dict[PurePosixPath, Operation] = {}
        self._extra: list[Phase] = []

    # ── Collect ─────────────────────────────────────────────────

    def directory(self, rel: str) -> None:
        """Plan ``rel`` and every missing ancestor."""
        path = PurePosixPath(rel)
        self.guard.resolve(str(path))
        for ancestor in [path, *path.parents]:
            if str(ancestor) != ".":
                self._dirs.add(ancestor)

    def write(self, generated: GeneratedFile) -> WriteFile:
        """Plan a generated file; a later file at the same path replaces it."""
        rel = PurePosixPath(generated.path)
        target = self.guard.resolve(str(rel))
        op = WriteFile(target, generated.content, overwrite=self._may_replace(target))
        self._add_file(rel, op)
        return op

    def copy(self, source_rel: str, dest_rel: str) -> CopyFile:
        """Plan a copy from the source directory into the project.

        Raises:
            ValidationError: The source file does not exist.
        """
        source = self.source_guard.resolve(source_rel)
        if not source.is_file():
            raise ValidationError("source", f"missing file {source}")
        size = source.stat().st_size
        if size > self.max_file_size:
            self.warnings.append(
                f"{source.name} is {size} bytes (over {self.max_file_size})"
            )
        rel = PurePosixPath(dest_rel)
        target = self.guard.resolve(str(rel))
        op = CopyFile(source, target, self.copier, overwrite=self._may_replace(target))
        self._add_file(rel, op)
        return op

    def phase(self, name: str, operations: list[Operation]) -> None:
        """Append a phase that runs after all files are in place."""
        if operations:
            self._extra.append(Phase(name, list(operations)))

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    # ── Emit ────────────────────────────────────────────────────

    def build(self) -> Plan:
        phases: list[Phase] = []
        if self.create_root:
            phases.append(Phase("Create project directory", [CreateDir(self.guard.base)]))

        for rel in list(self._files):
            if str(rel.parent) != ".":
                self.directory(str(rel.parent))
        clash = self._dirs.intersection(self._files)
        if clash:
            raise ValidationError(
                "path", f"{sorted(clash)[0]} is planned as both file and directory"
            )

        by_depth: dict[int, list[Operation]] = {}
        for rel in sorted(self._dirs):
            target = self.guard.resolve(str(rel))
            if not self.create_root and target.is_dir():
                continue
            by_depth.setdefault(len(rel.parts), []).append(CreateDir(target))
        for depth in sorted(by_depth):
            phases.append(Phase(f"Create directories (level {depth})", by_depth[depth]))

        if self._files:
            phases.append(Phase("Write files", list(self._files.values())))
        phases.extend(self._extra)
        return Plan(phases=phases, warnings=list(self.warnings))

    # ── Internals ───────────────────────────────────────────────

    def _may_replace(self, target: Path) -> bool:
        return self.overwrite and target.exists()

    def _add_file(self, rel: PurePosixPath, op: Operation) -> None:
        if rel in self._dirs:
            raise ValidationError("path", f"{rel} is planned as both file and directory")
        if rel in self._files:
            logger.debug("Replacing planned file %s with %s", rel, op.describe())
        self._files[rel] = op
