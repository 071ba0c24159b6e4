"""Shared fixtures for skilldeck tests."""

import json
from pathlib import Path

import pytest

from skilldeck.config.schema import LoggingConfig
from skilldeck.logging import configure_logging


@pytest.fixture(autouse=True)
def _logging():
    """Route structlog through stdlib with no output handlers."""
    configure_logging(LoggingConfig(), quiet=True)
    yield


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    return tmp_path


def write_skill(
    base: Path,
    dirname: str,
    name: str | None = None,
    description: str | None = "Does a thing. Use when the thing is needed.",
    body: str = "# Title\n\nInstructions.\n",
    extra: str = "",
) -> Path:
    """Write <base>/skills/<dirname>/SKILL.md and return its path."""
    skill_dir = base / "skills" / dirname
    skill_dir.mkdir(parents=True, exist_ok=True)
    lines = ["---"]
    if name is not None:
        lines.append(f"name: {name}")
    if description is not None:
        lines.append(f"description: {json.dumps(description)}")
    if extra:
        lines.append(extra)
    lines.append("---")
    path = skill_dir / "SKILL.md"
    path.write_text("\n".join(lines) + "\n" + body, encoding="utf-8")
    return path


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


@pytest.fixture
def marketplace(workspace: Path) -> Path:
    """A small valid corpus: one marketplace, two plugins, three skills."""
    write_json(
        workspace / ".claude-plugin" / "marketplace.json",
        {
            "name": "team-skills",
            "owner": {"name": "Platform Team"},
            "plugins": [
                {"name": "backend", "source": "./plugins/backend", "description": "Backend conventions"},
                {"name": "ci", "source": "./plugins/ci", "version": "1.2.0"},
            ],
        },
    )
    backend = workspace / "plugins" / "backend"
    write_json(backend / ".claude-plugin" / "plugin.json", {"name": "backend", "version": "0.3.0"})
    write_skill(
        backend, "crud-layer", name="crud-layer",
        description="Structure a CRUD repository layer. Use when adding database models.",
        body="# CRUD\n\nSee [patterns](reference/patterns.md).\n",
    )
    ref = backend / "skills" / "crud-layer" / "reference" / "patterns.md"
    ref.parent.mkdir(parents=True)
    ref.write_text("# Patterns\n\nBack to [skill](../SKILL.md).\n", encoding="utf-8")
    write_skill(
        backend, "api-router", name="api-router",
        description="Write typed API routers with input validation.",
    )

    ci = workspace / "plugins" / "ci"
    write_json(ci / ".claude-plugin" / "plugin.json", {"name": "ci", "description": "CI recipes"})
    write_skill(
        ci, "github-actions", name="github-actions",
        description="Configure a GitHub Actions workflow for tests and release.",
    )
    return workspace


@pytest.fixture
def skill_writer():
    return write_skill


@pytest.fixture
def json_writer():
    return write_json
