"""
Process runner — the SINGLE PLACE where external commands are started.

Commands are always passed as an argument vector straight to
``subprocess.run`` with ``shell=False``; no command line is ever built
by string concatenation. Arguments that come from user input or
configuration go through ``validate_arguments`` first.
"""

from __future__ import annotations

import logging
import os
import re
import shutil
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from restbase.adapters.base import Operation
from restbase.core.errors import ProcessError, ScaffoldError, SecurityError
from restbase.core.services.file_copier import (
    backup_file,
    backup_tree,
    discard_backup,
    restore_backup,
)

logger = logging.getLogger(__name__)

# Package names, scopes and semver ranges: name, @scope/name, name@^1.2.3
_SAFE_ARGUMENT = re.compile(r"[A-Za-z0-9@/._^~-]+")
MAX_ARGUMENT_LENGTH = 214

DEFAULT_TIMEOUT = 300


def validate_argument(value: str) -> str:
    """Check one user- or config-derived argument against the allow-list.

    Raises:
        SecurityError: If the value could smuggle in anything but a plain
            name or version range.
    """
    if not isinstance(value, str) or not value:
        raise SecurityError(f"Invalid argument: {value!r}")
    if len(value) > MAX_ARGUMENT_LENGTH:
        raise SecurityError(f"Argument too long: {value[:40]}…")
    if not _SAFE_ARGUMENT.fullmatch(value):
        raise SecurityError(f"Argument contains disallowed characters: {value!r}")
    if value.startswith("-"):
        raise SecurityError(f"Argument may not look like an option: {value!r}")
    return value


def validate_arguments(values: Iterable[str]) -> list[str]:
    """Validate every argument; returns them as a list."""
    return [validate_argument(v) for v in values]


@dataclass
class ProcessResult:
    """Outcome of a finished external command."""

    argv: list[str]
    returncode: int
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0

    @property
    def ok(self) -> bool:
        return self.returncode == 0


class ProcessRunner:
    """Spawn external commands from an argument vector.

    Args:
        default_timeout: Seconds before a command is killed and the
            call fails with ProcessError.
        env_overrides: Extra environment variables for every command.
    """

    def __init__(
        self,
        default_timeout: int = DEFAULT_TIMEOUT,
        env_overrides: dict[str, str] | None = None,
    ):
        self.default_timeout = default_timeout
        self.env_overrides = dict(env_overrides or {})

    def is_available(self, executable: str) -> bool:
        return shutil.which(executable) is not None

    def spawn(
        self,
        argv: list[str],
        cwd: Path,
        timeout: int | None = None,
    ) -> ProcessResult:
        """Run ``argv`` in ``cwd`` and wait for it.

        Raises:
            ProcessError: Missing executable, non-zero exit, or timeout.
        """
        if not argv or not all(isinstance(a, str) for a in argv):
            raise ProcessError("Empty or malformed argument vector", argv=argv)

        executable = shutil.which(argv[0])
        if executable is None:
            raise ProcessError(f"Executable not found: {argv[0]}", argv=argv)

        timeout = timeout if timeout is not None else self.default_timeout
        env = os.environ.copy()
        env.update(self.env_overrides)

        logger.debug("Executing: %s (cwd=%s)", argv, cwd)
        start = time.monotonic()
        try:
            result = subprocess.run(
                [executable, *argv[1:]],
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=timeout,
                env=env,
                shell=False,
            )
        except subprocess.TimeoutExpired as e:
            raise ProcessError(
                f"Command timed out after {timeout}s: {' '.join(argv)}", argv=argv
            ) from e
        except OSError as e:
            raise ProcessError(f"Cannot start {argv[0]}: {e}", argv=argv) from e

        elapsed_ms = int((time.monotonic() - start) * 1000)
        stderr = result.stderr[-2000:] if result.stderr else ""
        if result.returncode != 0:
            raise ProcessError(
                f"Command failed (exit {result.returncode}): {' '.join(argv)}",
                argv=argv,
                returncode=result.returncode,
                stderr=stderr.strip(),
            )

        return ProcessResult(
            argv=list(argv),
            returncode=result.returncode,
            stdout=result.stdout[-2000:] if result.stdout else "",
            stderr=stderr,
            duration_ms=elapsed_ms,
        )


def _exists(path: Path) -> bool:
    return path.exists() or path.is_symlink()


class SpawnProcess(Operation):
    """Run an external command as a phase operation.

    A finished process cannot be un-run. As a compensating action, undo
    removes the ``cleanup_paths`` that the process created, and puts back
    the ones that already existed from a backup taken just before the
    process started.
    """

    def __init__(
        self,
        argv: list[str],
        cwd: Path,
        runner: ProcessRunner,
        timeout: int | None = None,
        cleanup_paths: list[Path] | None = None,
        label: str = "",
    ):
        super().__init__()
        self.argv = list(argv)
        self.cwd = cwd
        self.runner = runner
        self.timeout = timeout
        self.cleanup_paths = list(cleanup_paths or [])
        self.label = label
        self.result: ProcessResult | None = None
        self._created: list[Path] = []
        self._backups: dict[Path, Path] = {}

    @property
    def kind(self) -> str:
        return "spawn_process"

    @property
    def target(self) -> Path | None:
        return None

    def describe(self) -> str:
        return self.label or f"run {' '.join(self.argv)}"

    def _apply(self) -> None:
        preexisting = {p for p in self.cleanup_paths if _exists(p)}
        for path in self.cleanup_paths:
            if path in preexisting:
                is_tree = path.is_dir() and not path.is_symlink()
                self._backups[path] = backup_tree(path) if is_tree else backup_file(path)
                logger.debug("Backed up %s -> %s", path, self._backups[path])
        try:
            self.result = self.runner.spawn(self.argv, self.cwd, timeout=self.timeout)
        except BaseException as failure:
            # A failed process is never in the rollback log, so whatever it
            # changed has to be put back now.
            self._created = self._new_paths(preexisting)
            try:
                self._revert()
            except OSError as e:
                logger.warning("Cleanup after failed %s: %s", self.describe(), e)
                if isinstance(failure, ScaffoldError):
                    failure.cleanup_error = str(e)
            raise
        self._created = self._new_paths(preexisting)
        if self._created:
            logger.debug("%s created %s", self.describe(), self._created)

    def _new_paths(self, preexisting: set[Path]) -> list[Path]:
        return [p for p in self.cleanup_paths if p not in preexisting and _exists(p)]

    def _revert(self) -> None:
        errors: list[str] = []
        for path in reversed(self._created):
            try:
                if path.is_dir() and not path.is_symlink():
                    shutil.rmtree(path)
                else:
                    path.unlink(missing_ok=True)
            except OSError as e:
                errors.append(f"{path}: {e}")
        for path, backup in self._backups.items():
            try:
                restore_backup(backup, path)
            except OSError as e:
                errors.append(f"{path}: cannot restore: {e}")
        if errors:
            raise OSError("; ".join(errors))
        self._created = []

    def discard(self) -> None:
        for path, backup in list(self._backups.items()):
            try:
                discard_backup(backup)
            except OSError as e:
                logger.warning("Cannot remove backup of %s at %s: %s", path, backup, e)
        self._backups = {}

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["argv"] = self.argv
        data["cwd"] = str(self.cwd)
        return data
