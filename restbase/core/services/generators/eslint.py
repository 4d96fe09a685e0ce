"""
.eslintrc.js generator — the ESLint config every project shares.
"""

from __future__ import annotations

import json

from restbase.core.models.config import EslintConfig
from restbase.core.models.template import GeneratedFile
from restbase.core.services.template_cache import TemplateCache

ESLINTRC = ".eslintrc.js"


def render_eslintrc(config: EslintConfig) -> str:
    body = {
        "extends": config.extends,
        "env": config.env,
        "rules": config.rules,
        "parserOptions": config.parser_options,
    }
    return f"module.exports = {json.dumps(body, indent=2)};\n"


def generate_eslintrc(config: EslintConfig, cache: TemplateCache[str]) -> GeneratedFile:
    """Render (once per cache) the ``.eslintrc.js`` file."""
    content = cache.get(ESLINTRC, lambda: render_eslintrc(config))
    return GeneratedFile(path=ESLINTRC, content=content, reason="ESLint configuration")
