"""
CLI command: setup-standards.

Thin wrapper over ``restbase.core.use_cases.setup_standards``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from restbase.core.data import bundled_source_dir
from restbase.core.errors import ScaffoldError
from restbase.core.observability.progress import ClickProgressReporter, ProgressReporter
from restbase.ui.cli import report


@click.command("setup-standards")
@click.argument(
    "target_directory",
    required=False,
    default=".",
    type=click.Path(file_okay=False, path_type=Path),
)
@click.option(
    "--rollback/--no-rollback",
    default=True,
    help="Undo every change if a step fails (default: on).",
)
@click.option("--skip-install", is_flag=True, help="Do not install lint dev dependencies.")
@click.option("--dry-run", is_flag=True, help="Show the plan without writing anything.")
@click.option(
    "--source-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory with standards and config files (default: bundled).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Extra restbase.yml applied on top of ~/.restbase.yml and ./restbase.yml.",
)
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def setup_standards(
    ctx: click.Context,
    target_directory: Path,
    rollback: bool,
    skip_install: bool,
    dry_run: bool,
    source_dir: Path | None,
    config_path: str | None,
    as_json: bool,
) -> None:
    """Add the REST-Base standards to the project in TARGET_DIRECTORY.

    TARGET_DIRECTORY is relative to the current directory and must stay
    inside it.
    """
    from restbase.core.use_cases.setup_standards import setup_standards as run

    opts = report.options(ctx)
    reporter = (
        ProgressReporter()
        if as_json or opts.get("quiet")
        else ClickProgressReporter(verbose=bool(opts.get("verbose")))
    )

    try:
        config = report.load_effective_config(config_path)
        result = run(
            target_directory,
            config=config,
            source_dir=source_dir or bundled_source_dir(),
            dry_run=dry_run,
            skip_install=skip_install,
            rollback=rollback,
            reporter=reporter,
        )
    except ScaffoldError as e:
        report.echo_error(e, as_json)
        sys.exit(1)

    if as_json:
        report.echo_json(result.to_dict())
        sys.exit(0 if result.ok else 1)

    report.echo_warnings(result.warnings)
    if dry_run:
        report.echo_plan(result.plan, result.target)
        return

    execution = result.execution
    assert execution is not None  # not a dry run
    if not execution.ok:
        report.echo_failure(execution)
        sys.exit(1)

    click.secho("\n✅ Standards set up", fg="green", bold=True)
    click.echo(f"   {result.target}")
    click.echo("   Run `npm run lint` to check the project.")
    click.echo()
