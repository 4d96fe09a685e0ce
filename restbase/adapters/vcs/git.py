"""
Git operations — repository bootstrap for a freshly scaffolded project.

Only three fixed argument sets are ever used: ``init``, ``add -A`` and
``commit -m <message>``. The commit message comes from configuration
and is passed as a single argv element, never through a shell.
Each step depends on the previous one, so each gets its own phase.
"""

from __future__ import annotations

import logging
from pathlib import Path

from restbase.adapters.shell.command import ProcessRunner, SpawnProcess

logger = logging.getLogger(__name__)

GIT = "git"
DEFAULT_COMMIT_MESSAGE = "Initial commit with REST-Base standards"
DEFAULT_TIMEOUT = 30


def git_available(runner: ProcessRunner) -> bool:
    return runner.is_available(GIT)


def init_repository(
    project_dir: Path,
    runner: ProcessRunner,
    timeout: int = DEFAULT_TIMEOUT,
) -> SpawnProcess:
    """``git init`` — undo removes the ``.git`` directory it creates."""
    return SpawnProcess(
        [GIT, "init"],
        cwd=project_dir,
        runner=runner,
        timeout=timeout,
        cleanup_paths=[project_dir / ".git"],
        label="git init",
    )


def stage_all(
    project_dir: Path,
    runner: ProcessRunner,
    timeout: int = DEFAULT_TIMEOUT,
) -> SpawnProcess:
    """``git add -A`` — nothing to undo beyond removing the repository."""
    return SpawnProcess(
        [GIT, "add", "-A"],
        cwd=project_dir,
        runner=runner,
        timeout=timeout,
        label="git add -A",
    )


def commit(
    project_dir: Path,
    runner: ProcessRunner,
    message: str = DEFAULT_COMMIT_MESSAGE,
    timeout: int = DEFAULT_TIMEOUT,
) -> SpawnProcess:
    """``git commit -m <message>``."""
    if not message or "\x00" in message:
        raise ValueError("Commit message must be a non-empty string without NUL")
    return SpawnProcess(
        [GIT, "commit", "-m", message],
        cwd=project_dir,
        runner=runner,
        timeout=timeout,
        label="git commit",
    )


def repository_steps(
    project_dir: Path,
    runner: ProcessRunner,
    message: str = DEFAULT_COMMIT_MESSAGE,
    timeout: int = DEFAULT_TIMEOUT,
) -> list[SpawnProcess]:
    """The init → add → commit chain, in execution order."""
    return [
        init_repository(project_dir, runner, timeout),
        stage_all(project_dir, runner, timeout),
        commit(project_dir, runner, message, timeout),
    ]
