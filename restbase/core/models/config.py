"""
Scaffold configuration model — what a generated project looks like.

Every value has a default, so an empty ``restbase.yml`` (or none at
all) produces the standard REST-Base layout. Values that end up in a
path or on a command line are checked here, at load time, so a bad
config fails before a plan is built.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from restbase.core.errors import ValidationError
from restbase.core.security.names import validate_name

_SEMVER = re.compile(r"\d+\.\d+\.\d+")

MIB = 1024 * 1024


def _dir_name(value: str) -> str:
    try:
        return validate_name(value)
    except ValidationError as e:
        raise ValueError(f"directory name {value!r}: {e.reason}") from e


def _file_name(value: str) -> str:
    """Plain file names; a leading dot is allowed (``.gitignore``)."""
    stripped = value.strip()
    if not stripped or stripped in (".", ".."):
        raise ValueError(f"invalid file name {value!r}")
    if "/" in stripped or "\\" in stripped or "\x00" in stripped:
        raise ValueError(f"file name may not contain a path: {value!r}")
    return stripped


class _Section(BaseModel):
    model_config = ConfigDict(extra="forbid")


class ProjectDefaults(_Section):
    node_version: str = "22.11.0"
    license: str = "MIT"
    author: str = ""
    email: str = ""
    description: str = "A RESTful API built with REST-Base standards"
    keywords: list[str] = Field(
        default_factory=lambda: ["rest", "api", "node", "express"]
    )

    @field_validator("node_version")
    @classmethod
    def _check_node_version(cls, v: str) -> str:
        if not _SEMVER.fullmatch(v):
            raise ValueError(f"node_version must look like 22.11.0, got {v!r}")
        return v


class Directories(_Section):
    src: str = "src"
    tests: str = "tests"
    docs: str = "docs"
    public: str = "public"
    src_subdirs: list[str] = Field(
        default_factory=lambda: [
            "config", "controllers", "middlewares", "models",
            "routes", "services", "utils",
        ]
    )
    test_subdirs: list[str] = Field(
        default_factory=lambda: ["unit", "integration", "fixtures"]
    )
    public_subdirs: list[str] = Field(
        default_factory=lambda: ["images", "styles", "scripts"]
    )

    @field_validator("src", "tests", "docs", "public")
    @classmethod
    def _check_dir(cls, v: str) -> str:
        return _dir_name(v)

    @field_validator("src_subdirs", "test_subdirs", "public_subdirs")
    @classmethod
    def _check_subdirs(cls, v: list[str]) -> list[str]:
        names = [_dir_name(n) for n in v]
        if len(set(names)) != len(names):
            raise ValueError("subdirectory names must be unique")
        return names


class Dependencies(_Section):
    production: dict[str, str] = Field(
        default_factory=lambda: {
            "bcrypt": "^5.1.1",
            "cors": "^2.8.5",
            "dotenv": "^16.4.5",
            "express": "^4.21.1",
            "express-validator": "^7.2.0",
            "helmet": "^8.0.0",
            "joi": "^17.13.3",
            "jsonwebtoken": "^9.0.2",
            "morgan": "^1.10.0",
            "mysql2": "^3.11.4",
            "sequelize": "^6.37.5",
            "bunyan": "^1.8.15",
        }
    )
    development: dict[str, str] = Field(
        default_factory=lambda: {
            "eslint": "^8.57.0",
            "eslint-config-airbnb-base": "^15.0.0",
            "eslint-plugin-import": "^2.31.0",
            "jest": "^29.7.0",
            "markdownlint-cli": "^0.42.0",
            "nodemon": "^3.1.7",
            "supertest": "^7.0.0",
        }
    )


def _default_scripts() -> dict[str, str]:
    return {
        "start": "node src/app.js",
        "dev": "nodemon src/app.js",
        "test": "jest",
        "test:watch": "jest --watch",
        "test:coverage": "jest --coverage",
        "lint:md": 'markdownlint "*.md" "docs/*.md"',
        "lint:js": "eslint --ext .js,.jsx,.ts,.tsx .",
        "lint": "npm run lint:md && npm run lint:js",
    }


class EslintConfig(_Section):
    extends: str | list[str] = "airbnb-base"
    env: dict[str, bool] = Field(default_factory=lambda: {"node": True, "jest": True})
    rules: dict[str, Any] = Field(
        default_factory=lambda: {
            "comma-dangle": ["error", "never"],
            "no-unused-vars": ["error", {"argsIgnorePattern": "next"}],
            "max-len": ["error", {"code": 100, "ignoreComments": True}],
            "no-console": ["warn"],
            "prefer-const": ["error"],
            "no-var": ["error"],
        }
    )
    parser_options: dict[str, Any] = Field(
        default_factory=lambda: {"ecmaVersion": 2022, "sourceType": "module"}
    )


class TemplatesConfig(_Section):
    env_example: dict[str, dict[str, str]] = Field(
        default_factory=lambda: {
            "server": {"NODE_ENV": "development", "PORT": "3000"},
            "database": {
                "DB_HOST": "localhost",
                "DB_PORT": "3306",
                "DB_NAME": "your_database",
                "DB_USER": "your_username",
                "DB_PASSWORD": "your_password",
            },
            "auth": {"JWT_SECRET": "your_jwt_secret", "JWT_EXPIRATION": "24h"},
            "logging": {"LOG_LEVEL": "info"},
        }
    )

    @field_validator("env_example", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        # YAML turns PORT: 3000 into an int
        if not isinstance(v, dict):
            return v
        return {
            section: (
                {k: str(val) for k, val in values.items()}
                if isinstance(values, dict)
                else values
            )
            for section, values in v.items()
        }


class Thresholds(_Section):
    streaming_threshold: int = Field(default=1 * MIB, gt=0)
    max_file_size: int = Field(default=10 * MIB, gt=0)


class GitConfig(_Section):
    enabled: bool = True
    initial_commit_message: str = "Initial commit with REST-Base standards"
    timeout: int = Field(default=30, gt=0)

    @field_validator("initial_commit_message")
    @classmethod
    def _check_message(cls, v: str) -> str:
        if not v.strip() or "\x00" in v:
            raise ValueError("initial_commit_message must be non-empty text")
        return v


class InstallConfig(_Section):
    enabled: bool = False
    package_manager: str = "npm"
    timeout: int = Field(default=300, gt=0)
    standards_dev_dependencies: list[str] = Field(
        default_factory=lambda: [
            "markdownlint-cli",
            "eslint",
            "eslint-config-airbnb-base",
            "eslint-plugin-import",
        ]
    )


class ScaffoldConfig(_Section):
    """Root configuration — merged from defaults and restbase.yml files."""

    project: ProjectDefaults = Field(default_factory=ProjectDefaults)
    directories: Directories = Field(default_factory=Directories)
    dependencies: Dependencies = Field(default_factory=Dependencies)
    scripts: dict[str, str] = Field(default_factory=_default_scripts)
    eslint: EslintConfig = Field(default_factory=EslintConfig)
    templates: TemplatesConfig = Field(default_factory=TemplatesConfig)
    thresholds: Thresholds = Field(default_factory=Thresholds)
    standards_files: list[str] = Field(
        default_factory=lambda: [
            "node_structure_and_naming_conventions.md",
            "sql-standards-and-patterns.md",
            "technologies.md",
            "operations-and-responses.md",
            "request.md",
            "validation.md",
            "global-rules.md",
            "CLAUDE.md",
        ]
    )
    config_files: list[str] = Field(
        default_factory=lambda: [".markdownlint.json", ".gitignore"]
    )
    git: GitConfig = Field(default_factory=GitConfig)
    install: InstallConfig = Field(default_factory=InstallConfig)
    max_workers: int | None = Field(default=None, ge=1, le=64)

    @field_validator("standards_files", "config_files")
    @classmethod
    def _check_files(cls, v: list[str]) -> list[str]:
        return [_file_name(n) for n in v]
