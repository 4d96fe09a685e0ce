"""
Create project use case — scaffold a new project directory.

Everything that can be checked before writing is checked first: the
name, the target path, the template, the config-derived process
arguments and the copy sources. Only a complete, confined plan reaches
the executor, which either applies all of it or rolls all of it back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from restbase.adapters.languages import node
from restbase.adapters.shell.command import ProcessRunner
from restbase.adapters.vcs import git
from restbase.core.engine.executor import ExecutionResult, PhaseExecutor
from restbase.core.engine.plan import Plan, PlanBuilder
from restbase.core.errors import ValidationError
from restbase.core.models.config import ScaffoldConfig
from restbase.core.models.project import ProjectSpec
from restbase.core.models.template import GeneratedFile
from restbase.core.observability.progress import ProgressReporter
from restbase.core.security.names import validate_name
from restbase.core.security.paths import PathGuard
from restbase.core.services import templates
from restbase.core.services.file_copier import FileCopier
from restbase.core.services.generators.app_files import generate_app_files
from restbase.core.services.generators.env_example import generate_env_example
from restbase.core.services.generators.eslint import generate_eslintrc
from restbase.core.services.generators.package_json import generate_package_json
from restbase.core.services.generators.readme import generate_readme
from restbase.core.services.template_cache import TemplateCache

logger = logging.getLogger(__name__)

STANDARDS_DIR = "standards"


@dataclass
class CreateProjectResult:
    """Outcome of one ``create-project`` run."""

    spec: ProjectSpec
    plan: Plan
    dry_run: bool = False
    execution: ExecutionResult | None = None
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.dry_run or (self.execution is not None and self.execution.ok)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "ok": self.ok,
            "name": self.spec.name,
            "target": str(self.spec.target_dir),
            "template": self.spec.template,
            "dry_run": self.dry_run,
            "warnings": self.warnings,
        }
        if self.dry_run:
            data["plan"] = self.plan.to_dict()
        if self.execution is not None:
            data["execution"] = self.execution.to_dict()
        return data


def resolve_spec(
    name: str,
    cwd: Path,
    source_dir: Path,
    template: str | None = None,
) -> ProjectSpec:
    """Validate the user's input into a ProjectSpec.

    Raises:
        ValidationError: Bad name, existing target or missing source dir.
        SecurityError: The target would land outside ``cwd``.
    """
    name = validate_name(name)
    target = PathGuard(cwd).resolve(name)
    if target.exists() or target.is_symlink():
        raise ValidationError("name", f"directory {name} already exists")
    source = source_dir.resolve()
    if not source.is_dir():
        raise ValidationError("source_dir", f"not a directory: {source_dir}")
    return ProjectSpec(name=name, target_dir=target, source_dir=source, template=template)


def build_plan(
    spec: ProjectSpec,
    config: ScaffoldConfig,
    cache: TemplateCache[str],
    copier: FileCopier,
    runner: ProcessRunner,
    install: bool = False,
    init_git: bool = True,
) -> Plan:
    """Build every phase of a ``create-project`` run without executing any."""
    dirs = config.directories
    builder = PlanBuilder(
        guard=PathGuard(spec.target_dir),
        source_guard=PathGuard(spec.source_dir),
        copier=copier,
        max_file_size=config.thresholds.max_file_size,
        create_root=True,
    )

    for top, subs in (
        (dirs.src, dirs.src_subdirs),
        (dirs.tests, dirs.test_subdirs),
        (dirs.public, dirs.public_subdirs),
    ):
        builder.directory(top)
        for sub in subs:
            builder.directory(f"{top}/{sub}")
    builder.directory(f"{dirs.docs}/{STANDARDS_DIR}")

    for filename in config.standards_files:
        builder.copy(filename, f"{dirs.docs}/{STANDARDS_DIR}/{filename}")
    for filename in config.config_files:
        builder.copy(filename, filename)

    generated: list[GeneratedFile] = [
        generate_package_json(spec.name, config),
        generate_readme(spec.name, config),
        generate_eslintrc(config.eslint, cache),
        generate_env_example(config.templates.env_example, cache),
        *generate_app_files(spec.name, config),
    ]
    for item in generated:
        builder.write(item)

    if spec.template:
        _add_template(builder, spec, config)

    if install:
        pm = node.validate_package_manager(config.install.package_manager)
        node.validate_dependency_map(config.dependencies.production)
        node.validate_dependency_map(config.dependencies.development)
        if runner.is_available(pm):
            builder.phase(
                "Install dependencies",
                [
                    node.install_from_manifest(
                        spec.target_dir, runner, pm, timeout=config.install.timeout
                    )
                ],
            )
        else:
            builder.warn(f"{pm} not found on PATH; skipping dependency install")

    if init_git and config.git.enabled:
        if git.git_available(runner):
            steps = git.repository_steps(
                spec.target_dir,
                runner,
                message=config.git.initial_commit_message,
                timeout=config.git.timeout,
            )
            for step in steps:
                builder.phase(step.describe(), [step])
        else:
            builder.warn("git not found on PATH; skipping repository setup")

    return builder.build()


def _add_template(builder: PlanBuilder, spec: ProjectSpec, config: ScaffoldConfig) -> None:
    tree = templates.load_template(builder.source_guard, spec.template or "")
    variables = {
        "projectName": spec.name,
        "description": config.project.description,
        "author": config.project.author,
        "email": config.project.email,
    }
    for rel in tree.directories:
        builder.directory(rel)
    for rel in tree.files:
        source = tree.root / rel
        text = templates.read_renderable(source, config.thresholds.streaming_threshold)
        if text is None:
            builder.copy(f"{templates.TEMPLATES_DIR}/{tree.name}/{rel}", rel)
        else:
            builder.write(
                GeneratedFile(
                    path=rel,
                    content=templates.render(text, variables),
                    reason=f"template {tree.name}",
                )
            )


def create_project(
    name: str,
    *,
    config: ScaffoldConfig,
    source_dir: Path,
    cwd: Path | None = None,
    template: str | None = None,
    dry_run: bool = False,
    install: bool = False,
    init_git: bool = True,
    reporter: ProgressReporter | None = None,
    runner: ProcessRunner | None = None,
    cache: TemplateCache[str] | None = None,
) -> CreateProjectResult:
    """Validate, plan and (unless ``dry_run``) execute a new project.

    Raises:
        ValidationError, SecurityError: Before anything is written.
    """
    spec = resolve_spec(name, cwd or Path.cwd(), source_dir, template)
    runner = runner or ProcessRunner(default_timeout=config.install.timeout)
    copier = FileCopier(threshold_bytes=config.thresholds.streaming_threshold)
    plan = build_plan(
        spec,
        config,
        cache if cache is not None else TemplateCache(),
        copier,
        runner,
        install=install,
        init_git=init_git,
    )
    result = CreateProjectResult(spec=spec, plan=plan, dry_run=dry_run, warnings=plan.warnings)
    logger.info(
        "Plan for %s: %d phase(s), %d operation(s)",
        spec.name,
        len(plan.phases),
        plan.operation_count,
    )
    if dry_run:
        return result

    executor = PhaseExecutor(max_workers=config.max_workers, reporter=reporter)
    result.execution = executor.run(plan.phases)
    return result
