"""
Project templates — extra trees layered on top of a generated project.

A template is a directory ``<source>/templates/<name>/``. Its
sub-directories are created, its small UTF-8 text files are rendered
with ``{{projectName}}``, ``{{description}}``, ``{{author}}`` and
``{{email}}`` substitution, and everything else is copied byte for byte.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from restbase.core.errors import ValidationError
from restbase.core.security.names import validate_name
from restbase.core.security.paths import PathGuard

logger = logging.getLogger(__name__)

TEMPLATES_DIR = "templates"


@dataclass
class TemplateTree:
    """Relative contents of one template directory."""

    name: str
    root: Path
    directories: list[str] = field(default_factory=list)
    files: list[str] = field(default_factory=list)


def available_templates(source_dir: Path) -> list[str]:
    base = source_dir / TEMPLATES_DIR
    if not base.is_dir():
        return []
    return sorted(p.name for p in base.iterdir() if p.is_dir() and not p.is_symlink())


def load_template(source_guard: PathGuard, name: str) -> TemplateTree:
    """Locate and list a template.

    Raises:
        ValidationError: Bad or unknown template name.
        SecurityError: A template entry points outside the template.
    """
    try:
        name = validate_name(name)
    except ValidationError as e:
        raise ValidationError("template", e.reason) from e

    root = source_guard.resolve(f"{TEMPLATES_DIR}/{name}")
    if not root.is_dir():
        known = ", ".join(available_templates(source_guard.base)) or "none"
        raise ValidationError("template", f"unknown template '{name}' (available: {known})")

    tree = TemplateTree(name=name, root=root)
    guard = PathGuard(root)
    for current, dirnames, filenames in os.walk(root):
        rel_dir = PurePosixPath(Path(current).relative_to(root).as_posix())
        for d in sorted(dirnames):
            rel = rel_dir / d
            guard.resolve(str(rel))
            tree.directories.append(str(rel))
        for f in sorted(filenames):
            rel = rel_dir / f
            guard.resolve(str(rel))
            tree.files.append(str(rel))
    logger.debug(
        "Template %s: %d dirs, %d files", name, len(tree.directories), len(tree.files)
    )
    return tree


def render(text: str, variables: dict[str, str]) -> str:
    for key, value in variables.items():
        text = text.replace("{{" + key + "}}", value)
    return text


def read_renderable(path: Path, threshold: int) -> str | None:
    """The file as text if it is small UTF-8, else None (copy it instead)."""
    try:
        if path.stat().st_size > threshold:
            return None
        return path.read_bytes().decode("utf-8")
    except UnicodeDecodeError:
        return None
    except OSError as e:
        raise ValidationError("template", f"cannot read {path}: {e}") from e
