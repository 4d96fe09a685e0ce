"""
Shared CLI output — plans, failures and rollback reports.

Thin formatting over the use-case result objects; no decisions are
made here beyond which colour to print.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from restbase.core.config.loader import load_config
from restbase.core.engine.executor import ExecutionResult
from restbase.core.engine.plan import Plan
from restbase.core.errors import ScaffoldError
from restbase.core.models.config import ScaffoldConfig


def options(ctx: click.Context) -> dict[str, Any]:
    """Global options; empty when a command runs standalone."""
    return ctx.obj if isinstance(ctx.obj, dict) else {}


def load_effective_config(config_path: str | None) -> ScaffoldConfig:
    return load_config(Path(config_path) if config_path else None)


def echo_json(data: dict[str, Any]) -> None:
    click.echo(json.dumps(data, indent=2, default=str))


def echo_error(error: ScaffoldError, as_json: bool) -> None:
    if as_json:
        echo_json({"ok": False, "error": error.to_dict()})
    else:
        click.secho(f"❌ {error}", fg="red", err=True)


def echo_warnings(warnings: list[str]) -> None:
    for message in warnings:
        click.secho(f"⚠️  {message}", fg="yellow", err=True)


def echo_plan(plan: Plan, target: Path) -> None:
    click.secho(f"\n📋 Plan for {target}", fg="cyan", bold=True)
    for index, phase in enumerate(plan.phases, start=1):
        click.secho(f"   {index}. {phase.name}", fg="white", bold=True)
        for op in phase.operations:
            click.echo(f"      • {op.describe()}")
    click.echo(f"\n   {len(plan.phases)} phase(s), {plan.operation_count} operation(s)")
    click.secho("   (dry run, nothing was written)", dim=True)


def echo_failure(execution: ExecutionResult) -> None:
    """The cause, then what the rollback did about it."""
    click.secho(f"\n❌ {execution.cause}", fg="red", bold=True, err=True)
    if execution.failed_operation is not None:
        click.echo(f"   while: {execution.failed_operation.describe()}", err=True)
    cleanup_error = getattr(execution.cause, "cleanup_error", None)
    if cleanup_error:
        click.secho(f"   ⚠️  cleanup: {cleanup_error}", fg="yellow", err=True)
    for op, error in execution.other_failures:
        click.secho(f"   also failed: {op.describe()}: {error}", fg="red", err=True)

    summary = execution.rollback
    if summary is None:
        if execution.operations_applied:
            click.secho(
                f"   Rollback disabled: {execution.operations_applied} change(s) "
                "may have been left behind.",
                fg="yellow",
                err=True,
            )
        return

    click.echo(
        f"   Rolled back {summary.succeeded}/{summary.attempted} operation(s)", err=True
    )
    for item in summary.items:
        if item.ok:
            click.echo(f"     ↩ {item.description}", err=True)
        else:
            click.secho(f"     ⚠️  {item.description}: {item.error}", fg="yellow", err=True)
    partial = summary.error()
    if partial is not None:
        click.secho(f"   {partial}", fg="yellow", err=True)
