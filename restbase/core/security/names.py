"""
Project name validation — a pure gate that runs before any mutation.

A project name becomes a directory name, an npm package name and an
argument to git and the package manager, so it must be safe in all of
those places at once.
"""

from __future__ import annotations

import re
from urllib.parse import unquote

from restbase.core.errors import ValidationError

MAX_NAME_LENGTH = 214  # npm package name limit

# Characters usable for shell or filesystem tricks on some platform.
FORBIDDEN_CHARS = frozenset('<>:"|?*;\\&$(){}[]!`')

RESERVED_NAMES = frozenset(
    ["con", "prn", "aux", "nul"]
    + [f"com{i}" for i in range(1, 10)]
    + [f"lpt{i}" for i in range(1, 10)]
)

# npm refuses these as package names, or they are files every project has.
PROJECT_RESERVED_NAMES = frozenset(
    ["node_modules", "favicon.ico", "package.json", "package-lock.json"]
)

_PERCENT_SEQ = re.compile(r"%([0-9A-Fa-f]{2})")
_MAX_DECODE_ROUNDS = 4


def _has_control_chars(value: str) -> bool:
    return any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in value)


def _check_plain(name: str) -> str | None:
    """Run every literal rule; return the first failure reason or None."""
    if not name:
        return "cannot be empty"
    if len(name) > MAX_NAME_LENGTH:
        return f"is too long (maximum {MAX_NAME_LENGTH} characters)"
    if _has_control_chars(name):
        return "contains control characters"
    bad = sorted({ch for ch in name if ch in FORBIDDEN_CHARS})
    if bad:
        return f"contains invalid characters: {' '.join(bad)}"
    if name.startswith("."):
        return "cannot start with a dot"
    if name.lower() in RESERVED_NAMES:
        return f"'{name}' is a reserved system name"
    if name.lower() in PROJECT_RESERVED_NAMES:
        return f"'{name}' is reserved by npm or the project layout"
    if "/" in name or "\\" in name:
        return "cannot contain path separators"
    if ".." in name:
        return "cannot contain parent directory references"
    return None


def _disallowed_encoded(name: str) -> str | None:
    """Find a percent-encoded sequence that decodes to a disallowed character."""
    for match in _PERCENT_SEQ.finditer(name):
        ch = chr(int(match.group(1), 16))
        if ch in FORBIDDEN_CHARS or ch in "/\\.%" or _has_control_chars(ch):
            return match.group(0)
    return None


def validate_name(candidate: str) -> str:
    """Validate a proposed project name.

    Args:
        candidate: Raw user input.

    Returns:
        The trimmed, valid name.

    Raises:
        ValidationError: ``field="name"`` with the first failing rule.
    """
    if not isinstance(candidate, str):
        raise ValidationError("name", "must be a string")

    name = candidate.strip()
    reason = _check_plain(name)
    if reason:
        raise ValidationError("name", reason)

    # Decode repeatedly so double-encoded input cannot sneak through.
    current = name
    for _ in range(_MAX_DECODE_ROUNDS):
        encoded = _disallowed_encoded(current)
        if encoded:
            raise ValidationError(
                "name", f"contains encoded path or shell character {encoded}"
            )
        decoded = unquote(current)
        if decoded == current:
            break
        reason = _check_plain(decoded)
        if reason:
            raise ValidationError("name", f"decodes to a name that {reason}")
        current = decoded
    else:
        raise ValidationError("name", "is encoded too many times")

    return name
