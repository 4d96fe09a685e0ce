"""
Node.js toolchain — package-manager invocations and manifest edits.

Dependency names and version ranges come from configuration, so every
one of them is run through the argument allow-list before it can reach
an argv. The install step is the dependency-installation safety
boundary of the whole tool.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from restbase.adapters.shell.command import (
    ProcessRunner,
    SpawnProcess,
    validate_argument,
)
from restbase.core.errors import SecurityError, ValidationError

logger = logging.getLogger(__name__)

SUPPORTED_PACKAGE_MANAGERS = ("npm", "pnpm", "yarn")

_LOCK_FILES = {
    "npm": "package-lock.json",
    "pnpm": "pnpm-lock.yaml",
    "yarn": "yarn.lock",
}

_DEV_FLAGS = {
    "npm": ["install", "--save-dev"],
    "pnpm": ["add", "--save-dev"],
    "yarn": ["add", "--dev"],
}


def validate_package_manager(name: str) -> str:
    """Only known package managers may be spawned."""
    validate_argument(name)
    if name not in SUPPORTED_PACKAGE_MANAGERS:
        raise SecurityError(
            f"Unsupported package manager '{name}'. "
            f"Valid: {', '.join(SUPPORTED_PACKAGE_MANAGERS)}"
        )
    return name


def validate_dependency_map(deps: dict[str, str]) -> dict[str, str]:
    """Validate a ``name → version range`` mapping from configuration."""
    for name, version in deps.items():
        validate_argument(name)
        validate_argument(str(version))
    return deps


def dependency_specs(names: list[str]) -> list[str]:
    """Validate dependency names (optionally ``name@range``) for an argv."""
    return [validate_argument(n.strip()) for n in names]


def install_from_manifest(
    project_dir: Path,
    runner: ProcessRunner,
    package_manager: str = "npm",
    timeout: int | None = None,
) -> SpawnProcess:
    """``<pm> install`` for the dependencies already listed in package.json."""
    pm = validate_package_manager(package_manager)
    return SpawnProcess(
        [pm, "install"],
        cwd=project_dir,
        runner=runner,
        timeout=timeout,
        cleanup_paths=[project_dir / "node_modules", project_dir / _LOCK_FILES[pm]],
        label=f"{pm} install",
    )


def install_dev_dependencies(
    project_dir: Path,
    names: list[str],
    runner: ProcessRunner,
    package_manager: str = "npm",
    timeout: int | None = None,
) -> SpawnProcess:
    """Install named dev dependencies (validated against the allow-list)."""
    pm = validate_package_manager(package_manager)
    specs = dependency_specs(names)
    if not specs:
        raise ValueError("No dependencies to install")
    return SpawnProcess(
        [pm, *_DEV_FLAGS[pm], *specs],
        cwd=project_dir,
        runner=runner,
        timeout=timeout,
        cleanup_paths=[project_dir / "node_modules", project_dir / _LOCK_FILES[pm]],
        label=f"{pm} install dev dependencies ({len(specs)})",
    )


def read_manifest(path: Path) -> dict[str, Any]:
    """Load package.json, failing as a pre-mutation validation error."""
    if not path.is_file():
        raise ValidationError(
            "target", f"No package.json found in {path.parent}. Run npm init first."
        )
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except PermissionError as e:
        raise ValidationError("target", f"Cannot read {path}: permission denied") from e
    except OSError as e:
        raise ValidationError("target", f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ValidationError("package.json", f"contains invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise ValidationError("package.json", "must contain a JSON object")
    return data
