"""
Setup standards use case — add the shared standards to an existing project.

The target must already be an npm project (it has a package.json).
Existing files that get replaced are backed up first, so a rollback
puts the project back the way it was.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from restbase.adapters.languages import node
from restbase.adapters.shell.command import ProcessRunner
from restbase.core.engine.executor import ExecutionResult, PhaseExecutor
from restbase.core.engine.plan import Plan, PlanBuilder
from restbase.core.errors import ValidationError
from restbase.core.models.config import ScaffoldConfig
from restbase.core.observability.progress import ProgressReporter
from restbase.core.security.paths import PathGuard
from restbase.core.services.file_copier import FileCopier
from restbase.core.services.generators.eslint import generate_eslintrc
from restbase.core.services.generators.package_json import (
    PACKAGE_JSON,
    generate_standards_manifest,
)
from restbase.core.services.template_cache import TemplateCache

logger = logging.getLogger(__name__)

STANDARDS_DIR = "standards"


@dataclass
class SetupStandardsResult:
    """Outcome of one ``setup-standards`` run."""

    target: Path
    plan: Plan
    dry_run: bool = False
    rollback_enabled: bool = True
    execution: ExecutionResult | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.dry_run or (self.execution is not None and self.execution.ok)

    @property
    def left_behind(self) -> bool:
        """True when a failed run could not (or was told not to) clean up."""
        if self.execution is None or self.execution.ok:
            return False
        if getattr(self.execution.cause, "cleanup_error", None):
            return True
        if not self.rollback_enabled:
            return self.execution.operations_applied > 0
        return self.execution.rollback is not None and not self.execution.rollback.clean

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ok": self.ok,
            "target": str(self.target),
            "dry_run": self.dry_run,
            "rollback": self.rollback_enabled,
            "warnings": self.warnings,
        }
        if self.dry_run:
            data["plan"] = self.plan.to_dict()
        if self.execution is not None:
            data["execution"] = self.execution.to_dict()
            data["left_behind"] = self.left_behind
        return data


def resolve_target(target_dir: Path | str, cwd: Path) -> Path:
    """Confine ``target_dir`` to ``cwd`` (which itself is allowed).

    Raises:
        SecurityError: Absolute path or an escape from ``cwd``.
        ValidationError: The target is not a directory.
    """
    target = PathGuard(cwd).resolve(target_dir, allow_base=True)
    if not target.is_dir():
        raise ValidationError("target", f"not a directory: {target_dir}")
    return target


def build_plan(
    target: Path,
    source_dir: Path,
    config: ScaffoldConfig,
    cache: TemplateCache[str],
    copier: FileCopier,
    runner: ProcessRunner,
    skip_install: bool = False,
) -> Plan:
    """Build the ``setup-standards`` phases for ``target``.

    Raises:
        ValidationError: No readable package.json, or a missing source.
        SecurityError: A target or dependency argument is not allowed.
    """
    manifest = node.read_manifest(target / PACKAGE_JSON)
    source = source_dir.resolve()
    if not source.is_dir():
        raise ValidationError("source_dir", f"not a directory: {source_dir}")

    docs = config.directories.docs
    builder = PlanBuilder(
        guard=PathGuard(target),
        source_guard=PathGuard(source),
        copier=copier,
        max_file_size=config.thresholds.max_file_size,
        overwrite=True,
    )
    builder.directory(f"{docs}/{STANDARDS_DIR}")
    for filename in config.standards_files:
        builder.copy(filename, f"{docs}/{STANDARDS_DIR}/{filename}")
    for filename in config.config_files:
        builder.copy(filename, filename)
    builder.write(generate_eslintrc(config.eslint, cache))
    builder.write(generate_standards_manifest(manifest, config))

    if not skip_install:
        pm = node.validate_package_manager(config.install.package_manager)
        names = node.dependency_specs(config.install.standards_dev_dependencies)
        if not names:
            logger.debug("No standards dev dependencies configured")
        elif runner.is_available(pm):
            builder.phase(
                "Install dev dependencies",
                [
                    node.install_dev_dependencies(
                        target, names, runner, pm, timeout=config.install.timeout
                    )
                ],
            )
        else:
            builder.warn(f"{pm} not found on PATH; skipping dev dependency install")

    return builder.build()


def setup_standards(
    target_dir: Path | str,
    *,
    config: ScaffoldConfig,
    source_dir: Path,
    cwd: Path | None = None,
    dry_run: bool = False,
    skip_install: bool = False,
    rollback: bool = True,
    reporter: ProgressReporter | None = None,
    runner: ProcessRunner | None = None,
    cache: TemplateCache[str] | None = None,
) -> SetupStandardsResult:
    """Validate, plan and (unless ``dry_run``) apply the standards."""
    target = resolve_target(target_dir, cwd or Path.cwd())
    runner = runner or ProcessRunner(default_timeout=config.install.timeout)
    copier = FileCopier(threshold_bytes=config.thresholds.streaming_threshold)
    plan = build_plan(
        target,
        source_dir,
        config,
        cache if cache is not None else TemplateCache(),
        copier,
        runner,
        skip_install=skip_install,
    )
    result = SetupStandardsResult(
        target=target,
        plan=plan,
        dry_run=dry_run,
        rollback_enabled=rollback,
        warnings=plan.warnings,
    )
    if dry_run:
        return result

    executor = PhaseExecutor(
        max_workers=config.max_workers,
        reporter=reporter,
        rollback_enabled=rollback,
    )
    result.execution = executor.run(plan.phases)
    return result
