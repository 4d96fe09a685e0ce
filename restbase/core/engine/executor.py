"""
Engine executor — runs phases of operations, all or nothing.

Flow:
    phases → (per phase) apply operations concurrently → barrier → next phase
                       ↘ first failure → cancel queued → rollback → result

Operations inside one phase are independent of each other and run on a
bounded thread pool. Phases run strictly in order: a phase only starts
once every operation of the previous one has been applied.
"""

from __future__ import annotations

import logging
import os
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from restbase.adapters.base import Operation
from restbase.core.engine.rollback import RollbackLog, RollbackManager, RollbackSummary
from restbase.core.errors import InterruptedRun, ScaffoldError
from restbase.core.observability.progress import ProgressReporter

logger = logging.getLogger(__name__)


def default_max_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


@dataclass
class Phase:
    """A named group of operations that may run in any order."""

    name: str
    operations: list[Operation] = field(default_factory=list)

    def __post_init__(self) -> None:
        seen: set[Path] = set()
        for op in self.operations:
            if op.target is None:
                continue
            if op.target in seen:
                raise ValueError(
                    f"Phase '{self.name}' has two operations targeting {op.target}"
                )
            seen.add(op.target)

    def __len__(self) -> int:
        return len(self.operations)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "operations": [op.to_dict() for op in self.operations],
        }


@dataclass
class ExecutionResult:
    """Result of running a list of phases."""

    ok: bool
    phases_total: int = 0
    phases_completed: int = 0
    operations_applied: int = 0
    cause: ScaffoldError | None = None
    failed_operation: Operation | None = None
    # Failures from the same phase that finished after the first one.
    other_failures: list[tuple[Operation, ScaffoldError]] = field(default_factory=list)
    rollback: RollbackSummary | None = None

    @property
    def status(self) -> str:
        if self.ok:
            return "ok"
        if isinstance(self.cause, InterruptedRun):
            return "interrupted"
        return "failed"

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "status": self.status,
            "phases_total": self.phases_total,
            "phases_completed": self.phases_completed,
            "operations_applied": self.operations_applied,
        }
        if self.cause is not None:
            data["cause"] = self.cause.to_dict()
        if self.failed_operation is not None:
            data["failed_operation"] = self.failed_operation.describe()
        if self.other_failures:
            data["other_failures"] = [
                {"operation": op.describe(), **err.to_dict()} for op, err in self.other_failures
            ]
        if self.rollback is not None:
            data["rollback"] = self.rollback.to_dict()
            partial = self.rollback.error()
            if partial is not None:
                data["rollback_error"] = partial.to_dict()
        return data


class PhaseExecutor:
    """Run phases in order; roll everything back on the first failure.

    Args:
        max_workers: Thread-pool bound for one phase.
        reporter: Progress hooks (no-op by default).
        rollback_manager: Undoes the log on failure.
        rollback_enabled: When False a failure leaves applied work in place.
    """

    def __init__(
        self,
        max_workers: int | None = None,
        reporter: ProgressReporter | None = None,
        rollback_manager: RollbackManager | None = None,
        rollback_enabled: bool = True,
    ):
        self.max_workers = max_workers or default_max_workers()
        self.reporter = reporter or ProgressReporter()
        self.rollback_manager = rollback_manager or RollbackManager(self.reporter)
        self.rollback_enabled = rollback_enabled

    def run(self, phases: list[Phase]) -> ExecutionResult:
        log = RollbackLog()
        completed = 0
        cause: ScaffoldError | None = None
        failed_op: Operation | None = None
        failures: list[tuple[Operation, ScaffoldError]] = []

        try:
            try:
                for index, phase in enumerate(phases):
                    self.reporter.phase_started(phase, index, len(phases))
                    failures = self._run_phase(phase, log)
                    if failures:
                        failed_op, cause = failures[0]
                    self.reporter.phase_finished(phase, cause is None)
                    if cause is not None:
                        logger.info("Phase '%s' failed: %s", phase.name, cause)
                        break
                    completed += 1
            except KeyboardInterrupt:
                logger.warning("Interrupted during phase %d", completed + 1)
                cause = InterruptedRun("Interrupted before the run finished")

            if cause is None:
                logger.info("All %d phase(s) applied (%d ops)", completed, len(log))
                return ExecutionResult(
                    ok=True,
                    phases_total=len(phases),
                    phases_completed=completed,
                    operations_applied=len(log),
                )

            applied = len(log)
            summary = None
            if self.rollback_enabled:
                summary = self.rollback_manager.rollback(log)
            else:
                logger.warning("Rollback disabled: %d operation(s) left applied", applied)
            return ExecutionResult(
                ok=False,
                phases_total=len(phases),
                phases_completed=completed,
                operations_applied=applied,
                cause=cause,
                failed_operation=failed_op,
                other_failures=failures[1:],
                rollback=summary,
            )
        finally:
            for phase in phases:
                for op in phase.operations:
                    op.discard()

    def _run_phase(
        self,
        phase: Phase,
        log: RollbackLog,
    ) -> list[tuple[Operation, ScaffoldError]]:
        """Apply one phase; returns every failure, the first one first.

        Operations already running when the first failure arrives are left
        to finish, so more than one of them can fail.
        """
        if not phase.operations:
            return []

        workers = min(self.max_workers, len(phase.operations))
        pool = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="restbase")
        futures: dict[Future, Operation] = {}
        failures: list[tuple[Operation, ScaffoldError]] = []

        try:
            for op in phase.operations:
                futures[pool.submit(self._apply_one, op, log)] = op

            for fut in as_completed(futures):
                if fut.cancelled():
                    continue
                err = fut.exception()
                if err is None:
                    continue
                op = futures[fut]
                error = err if isinstance(err, ScaffoldError) else ScaffoldError(str(err))
                if not failures:
                    cancelled = sum(1 for f in futures if f.cancel())
                    if cancelled:
                        logger.debug("Cancelled %d queued operation(s)", cancelled)
                else:
                    logger.info("Also failed: %s: %s", op.describe(), error)
                failures.append((op, error))
                self.reporter.operation_finished(op, err)
        except KeyboardInterrupt:
            pool.shutdown(wait=True, cancel_futures=True)
            raise
        finally:
            pool.shutdown(wait=True, cancel_futures=True)

        return failures

    def _apply_one(self, op: Operation, log: RollbackLog) -> None:
        op.apply()
        log.append(op)
        self.reporter.operation_finished(op, None)
