"""
Rollback — undo a run's completed operations in reverse completion order.

The log is written by worker threads while a phase runs, so appends are
serialised with a lock. The manager only reads it after every worker of
the failing phase has finished.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import TYPE_CHECKING

from restbase.adapters.base import Operation
from restbase.core.errors import RollbackPartialFailure

if TYPE_CHECKING:
    from restbase.core.observability.progress import ProgressReporter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LogEntry:
    operation: Operation
    applied_at: datetime


class RollbackLog:
    """Append-only record of applied operations, in completion order."""

    def __init__(self) -> None:
        self._entries: list[LogEntry] = []
        self._lock = threading.Lock()

    def append(self, operation: Operation) -> None:
        entry = LogEntry(operation=operation, applied_at=datetime.now(UTC))
        with self._lock:
            self._entries.append(entry)

    def entries(self) -> list[LogEntry]:
        with self._lock:
            return list(self._entries)

    def operations(self) -> list[Operation]:
        return [e.operation for e in self.entries()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


@dataclass
class RollbackItem:
    description: str
    ok: bool
    error: str | None = None

    def to_dict(self) -> dict:
        data = {"operation": self.description, "ok": self.ok}
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class RollbackSummary:
    """What happened while undoing a log."""

    items: list[RollbackItem] = field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.items)

    @property
    def succeeded(self) -> int:
        return sum(1 for i in self.items if i.ok)

    @property
    def failed(self) -> int:
        return self.attempted - self.succeeded

    @property
    def clean(self) -> bool:
        return self.failed == 0

    def error(self) -> RollbackPartialFailure | None:
        """The partial-failure error to report, or None if every undo worked."""
        failures = [(i.description, i.error or "") for i in self.items if not i.ok]
        if not failures:
            return None
        return RollbackPartialFailure(failures)

    def to_dict(self) -> dict:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "items": [i.to_dict() for i in self.items],
        }


class RollbackManager:
    """Undo every logged operation, newest first.

    Every undo is attempted even when earlier ones fail; ``Operation.undo``
    never raises, it returns the error text instead.
    """

    def __init__(self, reporter: ProgressReporter | None = None):
        self.reporter = reporter

    def rollback(self, log: RollbackLog) -> RollbackSummary:
        operations = log.operations()
        summary = RollbackSummary()
        if self.reporter:
            self.reporter.rollback_started(len(operations))
        logger.info("Rolling back %d operation(s)", len(operations))

        for op in reversed(operations):
            error = op.undo()
            summary.items.append(
                RollbackItem(description=op.describe(), ok=error is None, error=error)
            )
            if self.reporter:
                self.reporter.undo_finished(op, error)

        if summary.clean:
            logger.info("Rollback complete (%d undone)", summary.succeeded)
        else:
            logger.warning(
                "Rollback finished with %d failure(s) out of %d",
                summary.failed,
                summary.attempted,
            )
        return summary
