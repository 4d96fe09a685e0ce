"""
Generated file model — what every content generator returns.
"""

from __future__ import annotations

from pydantic import BaseModel, field_validator


class GeneratedFile(BaseModel):
    """A file whose bytes are produced in memory rather than copied.

    Attributes:
        path:    POSIX path relative to the project root.
        content: Full file content.
        reason:  Why this file is part of the project (shown in plans).
    """

    path: str
    content: str
    reason: str = ""

    @field_validator("path")
    @classmethod
    def _relative(cls, v: str) -> str:
        if not v or v.startswith("/") or "\\" in v:
            raise ValueError(f"generated file path must be relative POSIX: {v!r}")
        return v
