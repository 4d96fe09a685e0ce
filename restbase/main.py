"""
restbase — CLI entrypoints.

Usage:
    restbase create-project my-api
    restbase --verbose setup-standards ./existing-api
    create-project my-api --dry-run
    setup-standards --no-rollback
"""

from __future__ import annotations

import signal
import sys
from typing import Any

import click

from restbase import __version__
from restbase.core.observability.logging_config import setup_logging_from_env
from restbase.ui.cli.create import create_project
from restbase.ui.cli.standards import setup_standards


def _raise_interrupt(signum: int, frame: Any) -> None:
    raise KeyboardInterrupt


def install_signal_handlers() -> None:
    """Route SIGTERM through the same rollback path as Ctrl-C."""
    if hasattr(signal, "SIGTERM"):
        signal.signal(signal.SIGTERM, _raise_interrupt)


@click.group()
@click.version_option(version=__version__, prog_name="restbase")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Suppress non-essential output.")
@click.option("--debug", is_flag=True, help="Enable debug logging (very verbose).")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, quiet: bool, debug: bool) -> None:
    """restbase — scaffold REST APIs that follow the REST-Base standards."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    ctx.obj["debug"] = debug
    setup_logging_from_env(debug=debug, verbose=verbose, quiet=quiet)


cli.add_command(create_project)
cli.add_command(setup_standards)


def main() -> None:
    install_signal_handlers()
    cli()


def create_project_main() -> None:
    """Standalone ``create-project`` executable."""
    install_signal_handlers()
    setup_logging_from_env()
    create_project(prog_name="create-project")


def setup_standards_main() -> None:
    """Standalone ``setup-standards`` executable."""
    install_signal_handlers()
    setup_logging_from_env()
    setup_standards(prog_name="setup-standards")


if __name__ == "__main__":
    sys.exit(main())
