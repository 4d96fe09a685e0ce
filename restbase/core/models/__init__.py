"""
Domain models — Pydantic types for the scaffolder.

All models are re-exported here for convenient access:

    from restbase.core.models import ProjectSpec, ScaffoldConfig, GeneratedFile
"""

from restbase.core.models.config import (
    Dependencies,
    Directories,
    EslintConfig,
    GitConfig,
    InstallConfig,
    ProjectDefaults,
    ScaffoldConfig,
    TemplatesConfig,
    Thresholds,
)
from restbase.core.models.project import ProjectSpec
from restbase.core.models.template import GeneratedFile

__all__ = [
    "Dependencies",
    "Directories",
    "EslintConfig",
    "GeneratedFile",
    "GitConfig",
    "InstallConfig",
    "ProjectDefaults",
    "ProjectSpec",
    "ScaffoldConfig",
    "TemplatesConfig",
    "Thresholds",
]
