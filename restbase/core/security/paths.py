"""
Path confinement — every filesystem target must stay inside its root.

The check is done on canonical paths (``Path.resolve()``), never on the
raw strings, so ``..`` segments and symlinks pointing outside the root
are caught as well.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePath

from restbase.core.errors import SecurityError

logger = logging.getLogger(__name__)


class PathGuard:
    """Resolve candidate paths against an authorized root directory."""

    def __init__(self, base: Path | str):
        base_path = Path(base)
        if not base_path.is_absolute():
            base_path = Path.cwd() / base_path
        self._base = base_path.resolve()

    @property
    def base(self) -> Path:
        return self._base

    def resolve(self, candidate: Path | str, *, allow_base: bool = False) -> Path:
        """Canonicalize ``candidate`` relative to the base and confine it.

        Args:
            candidate: A *relative* path.
            allow_base: Accept a candidate that resolves to the base itself.

        Returns:
            The canonical absolute path.

        Raises:
            SecurityError: Absolute input, NUL bytes, or an escape from base.
        """
        raw = str(candidate)
        if "\x00" in raw:
            raise SecurityError(f"Path contains a NUL byte: {raw!r}")
        if not raw:
            raise SecurityError("Empty path")
        if PurePath(raw).is_absolute() or raw.startswith(("/", "\\")):
            raise SecurityError(f"Absolute path not allowed here: {raw}")

        resolved = (self._base / raw).resolve()

        if resolved == self._base:
            if allow_base:
                return resolved
            raise SecurityError(f"Path resolves to the root itself: {raw}")

        if not resolved.is_relative_to(self._base):
            logger.warning("Blocked path escape: %s -> %s", raw, resolved)
            raise SecurityError(f"Path escapes {self._base}: {raw}")

        return resolved

    def __repr__(self) -> str:
        return f"<PathGuard base={str(self._base)!r}>"
