"""
ProjectSpec — the validated identity of one scaffolding run.

Built once at CLI entry, after the name has been validated and the
directories resolved, and never changed afterwards.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, field_validator


class ProjectSpec(BaseModel):
    """What to create, and where from.

    Attributes:
        name:       Validated project name (also the package.json name).
        target_dir: Absolute directory the project is written to.
        source_dir: Absolute directory holding standards, config files
                    and ``templates/``.
        template:   Optional template name under ``source_dir/templates``.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    target_dir: Path
    source_dir: Path
    template: str | None = None

    @field_validator("target_dir", "source_dir")
    @classmethod
    def _absolute(cls, v: Path) -> Path:
        if not v.is_absolute():
            raise ValueError(f"must be an absolute path: {v}")
        return v
