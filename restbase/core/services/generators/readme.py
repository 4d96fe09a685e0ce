"""
README.md generator.
"""

from __future__ import annotations

from restbase.core.models.config import ScaffoldConfig
from restbase.core.models.template import GeneratedFile

_SUBDIR_NOTES = {
    "config": "Configuration files",
    "controllers": "Route controllers",
    "middlewares": "Express middlewares",
    "models": "Data models",
    "routes": "Route definitions",
    "services": "Business logic",
    "utils": "Utility functions",
}


def _tree(config: ScaffoldConfig) -> str:
    dirs = config.directories
    lines = [f"{dirs.src}/"]
    for sub in dirs.src_subdirs:
        note = _SUBDIR_NOTES.get(sub, "")
        entry = f"├── {sub + '/':<15}"
        lines.append(f"{entry} # {note}" if note else entry.rstrip())
    lines.append(f"└── {'app.js':<15} # Express app setup")
    lines.append(f"{dirs.tests + '/':<19} # Test files")
    lines.append(f"{dirs.docs + '/':<19} # Documentation")
    lines.append(f"└── {'standards/':<15} # REST-Base standards")
    return "\n".join(lines)


def generate_readme(name: str, config: ScaffoldConfig) -> GeneratedFile:
    project = config.project
    content = f"""\
# {name}

{project.description.rstrip('.')}.

## Getting Started

### Prerequisites

- Node.js (v{project.node_version}+)
- npm
- MySQL/MariaDB

### Installation

1. Clone this repository
2. Install dependencies: `npm install`
3. Copy .env.example to .env and update with your configuration
4. Start the server: `npm run dev`

## Project Structure

```
{_tree(config)}
```

## Development

### Available Scripts

- `npm run dev`: Start development server with hot reload
- `npm start`: Start production server
- `npm test`: Run tests
- `npm run lint`: Run linters (ESLint and Markdownlint)

## Standards

This project follows the REST-Base standards. See the `{config.directories.docs}/standards/` directory for details.

## License

This project is licensed under the {project.license} License.
"""
    return GeneratedFile(path="README.md", content=content, reason="project readme")
