"""
package.json generator — the manifest of a new project, and the lint
script merge applied by ``setup-standards`` to an existing one.
"""

from __future__ import annotations

import json
from typing import Any

from restbase.core.models.config import ScaffoldConfig
from restbase.core.models.template import GeneratedFile

PACKAGE_JSON = "package.json"

LINT_SCRIPTS = ("lint:md", "lint:js", "lint")


def render_manifest(manifest: dict[str, Any]) -> str:
    return json.dumps(manifest, indent=2, ensure_ascii=False) + "\n"


def generate_package_json(name: str, config: ScaffoldConfig) -> GeneratedFile:
    """Build package.json for a fresh project."""
    project = config.project
    manifest = {
        "name": name,
        "version": "1.0.0",
        "description": project.description,
        "main": f"{config.directories.src}/app.js",
        "scripts": dict(config.scripts),
        "keywords": list(project.keywords),
        "author": project.author,
        "license": project.license,
        "dependencies": dict(config.dependencies.production),
        "devDependencies": dict(config.dependencies.development),
        "engines": {"node": f">={project.node_version}"},
    }
    return GeneratedFile(
        path=PACKAGE_JSON, content=render_manifest(manifest), reason="npm manifest"
    )


def merge_lint_scripts(
    manifest: dict[str, Any],
    scripts: dict[str, str],
) -> dict[str, Any]:
    """Return a copy of ``manifest`` with the lint scripts set.

    Only ``lint:md``, ``lint:js`` and ``lint`` are taken from ``scripts``;
    every other key of the manifest is left as it was.
    """
    merged = dict(manifest)
    existing = merged.get("scripts")
    merged_scripts = dict(existing) if isinstance(existing, dict) else {}
    for key in LINT_SCRIPTS:
        if key in scripts:
            merged_scripts[key] = scripts[key]
    merged["scripts"] = merged_scripts
    return merged


def generate_standards_manifest(
    manifest: dict[str, Any],
    config: ScaffoldConfig,
) -> GeneratedFile:
    merged = merge_lint_scripts(manifest, config.scripts)
    return GeneratedFile(
        path=PACKAGE_JSON,
        content=render_manifest(merged),
        reason="add lint scripts",
    )
