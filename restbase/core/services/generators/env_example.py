"""
.env.example generator — documented environment variables, by section.

    # Server Configuration
    NODE_ENV=development
    PORT=3000
"""

from __future__ import annotations

from restbase.core.models.template import GeneratedFile
from restbase.core.services.template_cache import TemplateCache

ENV_EXAMPLE = ".env.example"


def render_env_example(sections: dict[str, dict[str, str]]) -> str:
    blocks = []
    for section, variables in sections.items():
        lines = [f"# {section[:1].upper()}{section[1:]} Configuration"]
        lines.extend(f"{key}={value}" for key, value in variables.items())
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks).strip() + "\n"


def generate_env_example(
    sections: dict[str, dict[str, str]],
    cache: TemplateCache[str],
) -> GeneratedFile:
    content = cache.get(ENV_EXAMPLE, lambda: render_env_example(sections))
    return GeneratedFile(
        path=ENV_EXAMPLE, content=content, reason="environment variable reference"
    )
