"""
CLI command: create-project.

Thin wrapper over ``restbase.core.use_cases.create_project``.
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from restbase.core.data import bundled_source_dir
from restbase.core.errors import ScaffoldError
from restbase.core.observability.progress import ClickProgressReporter, ProgressReporter
from restbase.ui.cli import report


@click.command("create-project")
@click.argument("project_name")
@click.option("--dry-run", is_flag=True, help="Show the plan without writing anything.")
@click.option("--template", "template", default=None, help="Template under <source-dir>/templates.")
@click.option(
    "--source-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory with standards, config files and templates (default: bundled).",
)
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Extra restbase.yml applied on top of ~/.restbase.yml and ./restbase.yml.",
)
@click.option(
    "--install/--no-install",
    default=None,
    help="Run the package manager after writing files (default: from config).",
)
@click.option("--no-git", is_flag=True, help="Skip git init and the initial commit.")
@click.option("--json-output", "--json", "as_json", is_flag=True, help="Output as JSON.")
@click.pass_context
def create_project(
    ctx: click.Context,
    project_name: str,
    dry_run: bool,
    template: str | None,
    source_dir: Path | None,
    config_path: str | None,
    install: bool | None,
    no_git: bool,
    as_json: bool,
) -> None:
    """Create a new project named PROJECT_NAME in the current directory."""
    from restbase.core.use_cases.create_project import create_project as run

    opts = report.options(ctx)
    reporter = (
        ProgressReporter()
        if as_json or opts.get("quiet")
        else ClickProgressReporter(verbose=bool(opts.get("verbose")))
    )

    try:
        config = report.load_effective_config(config_path)
        result = run(
            project_name,
            config=config,
            source_dir=source_dir or bundled_source_dir(),
            template=template,
            dry_run=dry_run,
            install=config.install.enabled if install is None else install,
            init_git=not no_git,
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
        report.echo_plan(result.plan, result.spec.target_dir)
        return

    execution = result.execution
    assert execution is not None  # not a dry run
    if not execution.ok:
        report.echo_failure(execution)
        sys.exit(1)

    click.secho(f"\n✅ Created {result.spec.name}", fg="green", bold=True)
    click.echo(f"   {result.spec.target_dir}")
    click.echo("\n   Next steps:")
    click.echo(f"     cd {result.spec.name}")
    click.echo("     npm install")
    click.echo("     cp .env.example .env")
    click.echo("     npm run dev")
    click.echo()
