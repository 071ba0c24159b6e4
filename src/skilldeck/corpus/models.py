"""
Data model of a loaded skill corpus.

The objects mirror the files on disk: a marketplace manifest listing
plugins, plugin directories with their metadata, and skill documents.
Content problems are recorded on the objects (``*_error`` fields) instead
of being raised, so a single lint run can report all of them.
"""

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# lowercase words of letters and digits joined by single hyphens
SKILL_NAME_RE = re.compile(r"^[a-z0-9]+(?:-[a-z0-9]+)*$")


@dataclass
class ReferenceDoc:
    """A Markdown guide shipped next to a SKILL.md."""

    path: Path
    body: str = ""
    read_error: str | None = None


@dataclass
class Skill:
    """A skill document and its frontmatter."""

    name: str
    path: Path
    description: str = ""
    plugin: str | None = None
    body: str = ""
    body_line: int = 1
    metadata: dict[str, Any] = field(default_factory=dict)
    references: list[ReferenceDoc] = field(default_factory=list)
    frontmatter_error: str | None = None
    frontmatter_error_line: int | None = None

    @property
    def directory(self) -> Path:
        return self.path.parent

    @property
    def declared_name(self) -> Any:
        """The raw ``name`` value from frontmatter (None when absent)."""
        return self.metadata.get("name")

    @property
    def qualified_name(self) -> str:
        return f"{self.plugin}:{self.name}" if self.plugin else self.name


@dataclass
class PluginEntry:
    """One plugin listed in the marketplace manifest."""

    name: str
    source: str = ""
    description: str = ""
    version: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)
    index: int = 0


@dataclass
class Plugin:
    """A plugin directory and the skills it contains."""

    name: str
    root: Path
    metadata: dict[str, Any] = field(default_factory=dict)
    metadata_path: Path | None = None
    metadata_error: str | None = None
    skills: list[Skill] = field(default_factory=list)
    entry: PluginEntry | None = None

    @property
    def description(self) -> str:
        if self.metadata.get("description"):
            return str(self.metadata["description"])
        return self.entry.description if self.entry else ""

    @property
    def version(self) -> str | None:
        version = self.metadata.get("version") or (self.entry.version if self.entry else None)
        return str(version) if version is not None else None


@dataclass
class Marketplace:
    """The marketplace manifest at the corpus root."""

    path: Path
    name: str = ""
    owner: dict[str, Any] = field(default_factory=dict)
    plugins: list[PluginEntry] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)


@dataclass
class LoadError:
    """A problem that prevented part of the corpus from loading."""

    path: Path
    message: str


@dataclass
class Corpus:
    """Everything discovered under a corpus root."""

    root: Path
    marketplace: Marketplace | None = None
    plugins: list[Plugin] = field(default_factory=list)
    loose_skills: list[Skill] = field(default_factory=list)
    errors: list[LoadError] = field(default_factory=list)

    def all_skills(self) -> Iterator[Skill]:
        """Plugin skills in plugin order, then skills outside any plugin."""
        for plugin in self.plugins:
            yield from plugin.skills
        yield from self.loose_skills

    def get_plugin(self, name: str) -> Plugin | None:
        for plugin in self.plugins:
            if plugin.name == name:
                return plugin
        return None
