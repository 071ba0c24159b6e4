"""
Pydantic models for skilldeck configuration.

Defines all configuration schemas using Pydantic v2 for validation,
defaults, and serialization.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


Severity = Literal["error", "warning"]


class LoggingConfig(BaseModel):
    """Logging system configuration."""

    level: Literal["debug", "info", "human", "warn", "error"] = "human"
    file: Path | None = None
    verbose: int = 0

    model_config = {"extra": "forbid"}


class WorkspaceConfig(BaseModel):
    """Corpus location and discovery settings."""

    root: Path = Path(".")
    exclude_dirs: list[str] = Field(
        default_factory=lambda: [".git", "node_modules", "__pycache__", ".venv"],
        description="Directory names skipped during plugin and skill discovery",
    )

    model_config = {"extra": "forbid"}


class LintConfig(BaseModel):
    """Limits and rule selection for the corpus linter.

    The defaults mirror the limits the plugin host enforces on skill
    frontmatter.
    """

    name_max_length: int = Field(default=64, ge=1)
    description_max_length: int = Field(default=1024, ge=1)
    body_max_lines: int = Field(
        default=500,
        ge=1,
        description="SKILL.md bodies longer than this produce a warning",
    )
    reserved_words: list[str] = Field(
        default_factory=lambda: ["anthropic", "claude"],
        description="Words a skill name must not contain",
    )
    check_links: bool = True
    disabled_rules: list[str] = Field(default_factory=list)
    severity_overrides: dict[str, Severity] = Field(default_factory=dict)
    warnings_as_errors: bool = False

    model_config = {"extra": "forbid"}

    @field_validator("reserved_words")
    @classmethod
    def _lowercase_reserved(cls, v: list[str]) -> list[str]:
        return [w.lower() for w in v if w.strip()]


class AppConfig(BaseModel):
    """Complete application configuration.

    This is the root of the configuration tree. It combines all sections
    and is the entry point for validation.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    workspace: WorkspaceConfig = Field(default_factory=WorkspaceConfig)
    lint: LintConfig = Field(default_factory=LintConfig)

    model_config = {"extra": "forbid"}
