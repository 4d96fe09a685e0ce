"""
Bundled source directory — what ``create-project`` and ``setup-standards``
copy when no ``--source-dir`` is given.

Layout::

    source/
    ├── <standards>.md        copied to docs/standards/
    ├── .gitignore            copied to the project root
    ├── .markdownlint.json    copied to the project root
    └── templates/<name>/     applied with --template <name>
"""

from __future__ import annotations

from pathlib import Path

_DATA_DIR = Path(__file__).parent


def bundled_source_dir() -> Path:
    """Absolute path of the source directory shipped with the package."""
    return (_DATA_DIR / "source").resolve()
