"""
Mock operation — test double for the engine.

Touches nothing on disk. Configurable to fail on apply, fail on undo,
or block until an event is set, and records every call in a shared,
thread-safe journal so tests can assert on ordering.
"""

from __future__ import annotations

import threading
from pathlib import Path

from restbase.adapters.base import Operation
from restbase.core.errors import FilesystemError


class CallJournal:
    """Ordered record of ``apply:<name>`` / ``undo:<name>`` calls."""

    def __init__(self) -> None:
        self._calls: list[str] = []
        self._lock = threading.Lock()

    def record(self, entry: str) -> None:
        with self._lock:
            self._calls.append(entry)

    @property
    def calls(self) -> list[str]:
        with self._lock:
            return list(self._calls)

    def of(self, kind: str) -> list[str]:
        """Names recorded for one kind of call, in order."""
        prefix = f"{kind}:"
        return [c[len(prefix):] for c in self.calls if c.startswith(prefix)]


class MockOperation(Operation):
    """An operation whose behaviour is scripted by the test.

    Args:
        name: Label used in the journal and in ``describe()``.
        journal: Shared journal (a private one is created if omitted).
        fail: Raise FilesystemError from apply.
        undo_error: Raise this message from undo.
        wait_for: Block apply until this event is set.
        timeout: Seconds to wait for ``wait_for`` before failing.
        target: Optional path the operation claims to write.
    """

    def __init__(
        self,
        name: str,
        journal: CallJournal | None = None,
        fail: bool = False,
        undo_error: str | None = None,
        wait_for: threading.Event | None = None,
        timeout: float = 5.0,
        target: Path | None = None,
    ):
        super().__init__()
        self.name = name
        self.journal = journal or CallJournal()
        self.fail = fail
        self.undo_error = undo_error
        self.wait_for = wait_for
        self.timeout = timeout
        self._target = target
        self.discarded = False

    @property
    def kind(self) -> str:
        return "mock"

    @property
    def target(self) -> Path | None:
        return self._target

    def describe(self) -> str:
        return f"mock {self.name}"

    def _apply(self) -> None:
        if self.wait_for is not None and not self.wait_for.wait(self.timeout):
            raise FilesystemError(f"{self.name}: gave up waiting")
        self.journal.record(f"apply:{self.name}")
        if self.fail:
            raise FilesystemError(f"{self.name}: scripted failure")

    def _revert(self) -> None:
        self.journal.record(f"undo:{self.name}")
        if self.undo_error:
            raise OSError(self.undo_error)

    def discard(self) -> None:
        self.discarded = True
