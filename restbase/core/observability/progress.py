"""
Progress reporting — hooks the engine calls while a run is in flight.

The base class does nothing; it is what library callers and tests get
by default. ``ClickProgressReporter`` prints to the terminal. Hooks are
called from worker threads, so terminal output is serialised.
Reporters observe only: they never influence control flow.
"""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import click

if TYPE_CHECKING:
    from restbase.adapters.base import Operation
    from restbase.core.engine.executor import Phase


class ProgressReporter:
    """No-op progress hooks."""

    def phase_started(self, phase: Phase, index: int, total: int) -> None:
        pass

    def operation_finished(self, op: Operation, error: BaseException | None) -> None:
        pass

    def phase_finished(self, phase: Phase, ok: bool) -> None:
        pass

    def rollback_started(self, count: int) -> None:
        pass

    def undo_finished(self, op: Operation, error: str | None) -> None:
        pass


class ClickProgressReporter(ProgressReporter):
    """Terminal progress via ``click.secho``.

    Args:
        verbose: Also print one line per applied operation.
    """

    def __init__(self, verbose: bool = False):
        self.verbose = verbose
        self._lock = threading.Lock()

    def _say(self, message: str, **style) -> None:
        with self._lock:
            click.secho(message, err=True, **style)

    def phase_started(self, phase: Phase, index: int, total: int) -> None:
        self._say(f"[{index + 1}/{total}] {phase.name} ({len(phase)} ops)", fg="cyan")

    def operation_finished(self, op: Operation, error: BaseException | None) -> None:
        if error is not None:
            self._say(f"   ❌ {op.describe()}: {error}", fg="red")
        elif self.verbose:
            self._say(f"   ✓ {op.describe()}", dim=True)

    def rollback_started(self, count: int) -> None:
        self._say(f"↩️  Rolling back {count} operation(s)...", fg="yellow", bold=True)

    def undo_finished(self, op: Operation, error: str | None) -> None:
        if error is None:
            self._say(f"   ↩ {op.describe()}", dim=True)
        else:
            self._say(f"   ⚠️  could not undo {op.describe()}: {error}", fg="yellow")
