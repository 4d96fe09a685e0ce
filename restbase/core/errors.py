"""
Error taxonomy — every failure the scaffolder reports.

Validation and security errors are raised before anything touches the
filesystem. Filesystem and process errors are raised by operations while
a phase runs, and always lead to a rollback. The CLI only formats these;
it never recovers from them.
"""

from __future__ import annotations

from typing import Any


class ScaffoldError(Exception):
    """Base class for all scaffolding failures."""

    kind = "error"
    # Set when cleaning up after this failure did not fully succeed.
    cleanup_error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind, "message": str(self)}
        if self.cleanup_error:
            data["cleanup_error"] = self.cleanup_error
        return data


class ValidationError(ScaffoldError):
    """Bad user input (project name, target path, template, config value)."""

    kind = "validation"

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid {field}: {reason}")
        self.field = field
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        data["reason"] = self.reason
        return data


class SecurityError(ScaffoldError):
    """Path traversal or a disallowed process argument."""

    kind = "security"


class ConfigError(ScaffoldError):
    """Raised when restbase configuration is invalid or unreadable."""

    kind = "config"


class FilesystemError(ScaffoldError):
    """A filesystem operation failed while a phase was running."""

    kind = "filesystem"

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.path:
            data["path"] = self.path
        return data


class ProcessError(ScaffoldError):
    """An external command exited non-zero, timed out, or could not start."""

    kind = "process"

    def __init__(
        self,
        message: str,
        argv: list[str] | None = None,
        returncode: int | None = None,
        stderr: str = "",
    ):
        super().__init__(message)
        self.argv = list(argv or [])
        self.returncode = returncode
        self.stderr = stderr

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["argv"] = self.argv
        data["returncode"] = self.returncode
        if self.stderr:
            data["stderr"] = self.stderr
        return data


class InterruptedRun(ScaffoldError):
    """The run was interrupted (Ctrl-C / SIGTERM) while a phase was active."""

    kind = "interrupted"


class RollbackPartialFailure(ScaffoldError):
    """One or more undo actions failed during rollback.

    Reported alongside the original failure; it never replaces it.
    """

    kind = "rollback"

    def __init__(self, failures: list[tuple[str, str]]):
        paths = ", ".join(desc for desc, _ in failures)
        super().__init__(f"{len(failures)} undo action(s) failed: {paths}")
        self.failures = failures

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["failures"] = [
            {"operation": desc, "error": err} for desc, err in self.failures
        ]
        return data
