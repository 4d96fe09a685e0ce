"""Security gates — name validation and path confinement."""

from restbase.core.security.names import validate_name
from restbase.core.security.paths import PathGuard

__all__ = [
    "PathGuard",
    "validate_name",
]
