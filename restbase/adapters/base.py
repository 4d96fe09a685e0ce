"""
Operation base — the reversible unit of work the engine schedules.

Every concrete operation (create a directory, write a file, copy a
file, spawn a process) implements ``_apply`` and ``_revert``. The
public ``apply`` / ``undo`` wrappers own the state machine and the
error contract:

    PENDING → APPLYING → APPLIED
                       ↘ FAILED

``apply`` raises a ``ScaffoldError`` subclass on failure. ``undo``
NEVER raises — failures are logged and returned as text so that a
rollback can keep going.
"""

from __future__ import annotations

import enum
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any

from restbase.core.errors import FilesystemError, ScaffoldError

logger = logging.getLogger(__name__)


class OperationState(str, enum.Enum):
    PENDING = "pending"
    APPLYING = "applying"
    APPLIED = "applied"
    FAILED = "failed"
    UNDONE = "undone"


class Operation(ABC):
    """Abstract base class for all operations.

    To create a new operation:
        1. Subclass Operation
        2. Implement kind, target, describe, _apply, _revert
        3. Have a plan builder construct it (targets must be confined)
    """

    def __init__(self) -> None:
        self._state = OperationState.PENDING
        self._state_lock = threading.Lock()
        self._error: ScaffoldError | None = None

    # ── Identity ────────────────────────────────────────────────

    @property
    @abstractmethod
    def kind(self) -> str:
        """Operation kind (e.g., 'create_dir', 'write_file')."""

    @property
    @abstractmethod
    def target(self) -> Path | None:
        """The path this operation creates or replaces, if any."""

    @abstractmethod
    def describe(self) -> str:
        """Short human-readable description used in reports."""

    # ── State ───────────────────────────────────────────────────

    @property
    def state(self) -> OperationState:
        return self._state

    @property
    def error(self) -> ScaffoldError | None:
        return self._error

    def _transition(self, expected: OperationState, new: OperationState) -> None:
        with self._state_lock:
            if self._state is not expected:
                raise RuntimeError(
                    f"{self.describe()}: cannot go {self._state.value} → {new.value}"
                )
            self._state = new

    # ── Contract ────────────────────────────────────────────────

    def apply(self) -> None:
        """Perform the effect.

        Raises:
            ScaffoldError: On any failure; OSErrors are wrapped in
                FilesystemError.
        """
        self._transition(OperationState.PENDING, OperationState.APPLYING)
        try:
            self._apply()
        except ScaffoldError as e:
            self._fail(e)
            raise
        except OSError as e:
            err = FilesystemError(
                f"{self.describe()} failed: {e.strerror or e}",
                path=str(self.target) if self.target else None,
            )
            self._fail(err)
            raise err from e
        except Exception as e:
            err = ScaffoldError(f"{self.describe()} failed: {e}")
            self._fail(err)
            raise err from e
        self._transition(OperationState.APPLYING, OperationState.APPLIED)
        logger.debug("Applied: %s", self.describe())

    def _fail(self, error: ScaffoldError) -> None:
        self._error = error
        with self._state_lock:
            self._state = OperationState.FAILED
        logger.debug("Failed: %s (%s)", self.describe(), error)

    def undo(self) -> str | None:
        """Best-effort inverse of ``apply``.

        Returns:
            None when the undo succeeded, otherwise the error text.
        """
        if self._state is not OperationState.APPLIED:
            return None
        try:
            self._revert()
        except Exception as e:
            logger.warning("Undo failed for %s: %s", self.describe(), e)
            return str(e) or e.__class__.__name__
        with self._state_lock:
            self._state = OperationState.UNDONE
        logger.debug("Undone: %s", self.describe())
        return None

    def discard(self) -> None:
        """Drop private resources (backups) once the run is settled."""

    @abstractmethod
    def _apply(self) -> None:
        """Do the work. May raise."""

    @abstractmethod
    def _revert(self) -> None:
        """Reverse the work. May raise; ``undo`` catches."""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "kind": self.kind,
            "description": self.describe(),
            "state": self._state.value,
        }
        if self.target is not None:
            data["target"] = str(self.target)
        if self._error is not None:
            data["error"] = str(self._error)
        return data

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.describe()!r} state={self._state.value}>"
