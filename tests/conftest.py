"""
Shared test fixtures and configuration.
"""

from pathlib import Path

import pytest

from restbase.core.models.config import GitConfig, ScaffoldConfig


STANDARDS = [
    "node_structure_and_naming_conventions.md",
    "sql-standards-and-patterns.md",
    "technologies.md",
    "operations-and-responses.md",
    "request.md",
    "validation.md",
    "global-rules.md",
    "CLAUDE.md",
]


def snapshot(root: Path) -> dict[str, bytes | None]:
    """Every path under ``root`` mapped to its bytes (None for directories)."""
    result: dict[str, bytes | None] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root).as_posix()
        result[rel] = None if path.is_dir() else path.read_bytes()
    return result


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Keep the developer's ~/.restbase.yml out of every test."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture
def workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """An empty working directory that is also the process cwd."""
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.chdir(work)
    return work


@pytest.fixture
def source_dir(tmp_path: Path) -> Path:
    """A small source tree: standards, config files and one template."""
    src = tmp_path / "source"
    src.mkdir()
    for name in STANDARDS:
        (src / name).write_text(f"# {name}\n", encoding="utf-8")
    (src / ".gitignore").write_text("node_modules/\n", encoding="utf-8")
    (src / ".markdownlint.json").write_text('{"default": true}\n', encoding="utf-8")

    tpl = src / "templates" / "basic"
    (tpl / "src" / "routes").mkdir(parents=True)
    (tpl / "docs").mkdir()
    (tpl / "src" / "routes" / "users.js").write_text(
        "// routes for {{projectName}} by {{author}}\n", encoding="utf-8"
    )
    (tpl / "docs" / "logo.bin").write_bytes(b"\xff\xfe\x00binary")
    return src


@pytest.fixture
def config() -> ScaffoldConfig:
    """Default config without git, so unit tests never spawn processes."""
    return ScaffoldConfig(git=GitConfig(enabled=False))


@pytest.fixture
def tree_snapshot():
    """``snapshot(root)`` for before/after comparisons of a directory tree."""
    return snapshot
