"""
Corpus Loader -- Discovers the marketplace manifest, plugins and skills.

Layout handled:

    <root>/.claude-plugin/marketplace.json        marketplace manifest
    <plugin>/.claude-plugin/plugin.json           per-plugin metadata
    <plugin>/skills/<skill>/SKILL.md              skill document
    <plugin>/skills/<skill>/**/*.md               reference guides
    <root>/skills/<skill>/SKILL.md                skills outside any plugin

With a manifest, plugins are the entries it lists. Without one, any
directory (up to two levels deep) holding .claude-plugin/plugin.json or a
skills/ directory is treated as a plugin.
"""

import json
import re
from pathlib import Path
from typing import Any

import structlog

from ..config.schema import AppConfig, WorkspaceConfig
from ..errors import CorpusError, FrontmatterError
from ..logging.human import HumanLog
from .frontmatter import body_start_line, parse_frontmatter
from .models import (
    Corpus,
    LoadError,
    Marketplace,
    Plugin,
    PluginEntry,
    ReferenceDoc,
    Skill,
)

logger = structlog.get_logger()

MANIFEST_DIR = ".claude-plugin"
MARKETPLACE_FILE = "marketplace.json"
PLUGIN_FILE = "plugin.json"
SKILLS_DIR = "skills"
SKILL_FILE = "SKILL.md"

_STOPWORDS = frozenset(
    "a an and are as at be by for from how i in is it me my of on or the this to use when with".split()
)


class CorpusLoader:
    """Loads a skill corpus from disk."""

    def __init__(self, root: str | Path, config: AppConfig | None = None):
        self.root = Path(root)
        workspace = config.workspace if config else WorkspaceConfig()
        self.exclude_dirs = set(workspace.exclude_dirs)
        self.hlog = HumanLog(logger)

    def load(self) -> Corpus:
        """Load the whole corpus.

        Returns:
            Corpus with every plugin and skill found. Content problems are
            recorded on the returned objects, not raised.

        Raises:
            CorpusError: If the root does not exist or is not a directory.
        """
        if not self.root.exists():
            raise CorpusError(f"Corpus root not found: {self.root}")
        if not self.root.is_dir():
            raise CorpusError(f"Corpus root is not a directory: {self.root}")

        corpus = Corpus(root=self.root)
        corpus.marketplace = self._load_marketplace(corpus)

        if corpus.marketplace is not None:
            plugin_roots = self._roots_from_manifest(corpus.marketplace)
        else:
            plugin_roots = [(path, None) for path in self._discover_plugin_roots()]

        seen: set[Path] = set()
        for plugin_root, entry in plugin_roots:
            resolved = plugin_root.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            corpus.plugins.append(self._load_plugin(plugin_root, entry))

        if self.root.resolve() not in seen:
            corpus.loose_skills = self._load_skills(self.root / SKILLS_DIR, plugin=None)

        for error in corpus.errors:
            self.hlog.load_error(str(error.path), error.message)

        skills_count = sum(1 for _ in corpus.all_skills())
        self.hlog.corpus_loaded(
            root=str(self.root), plugins=len(corpus.plugins), skills=skills_count
        )
        return corpus

    # ── Manifest ─────────────────────────────────────────────────────────

    def _load_marketplace(self, corpus: Corpus) -> Marketplace | None:
        path = self.root / MANIFEST_DIR / MARKETPLACE_FILE
        if not path.is_file():
            return None

        data = self._read_json(path, corpus)
        if data is None:
            return None

        entries: list[PluginEntry] = []
        raw_plugins = data.get("plugins", [])
        if isinstance(raw_plugins, list):
            for i, item in enumerate(raw_plugins):
                if not isinstance(item, dict):
                    continue
                entries.append(_plugin_entry(item, i))

        owner = data.get("owner")
        return Marketplace(
            path=path,
            name=str(data.get("name") or ""),
            owner=owner if isinstance(owner, dict) else {},
            plugins=entries,
            raw=data,
        )

    def _roots_from_manifest(self, marketplace: Marketplace) -> list[tuple[Path, PluginEntry]]:
        roots: list[tuple[Path, PluginEntry]] = []
        for entry in marketplace.plugins:
            if not entry.source:
                # Remote (git/github) sources cannot be checked offline
                logger.debug("plugin.source_skipped", plugin=entry.name)
                continue
            candidate = self.root / entry.source
            if candidate.is_dir():
                roots.append((candidate, entry))
            else:
                logger.debug("plugin.source_missing", plugin=entry.name, source=entry.source)
        return roots

    def _discover_plugin_roots(self) -> list[Path]:
        roots: list[Path] = []
        if (self.root / MANIFEST_DIR / PLUGIN_FILE).is_file():
            roots.append(self.root)

        for child in self._subdirs(self.root):
            if child.name == SKILLS_DIR:
                continue
            if _looks_like_plugin(child):
                roots.append(child)
                continue
            for grandchild in self._subdirs(child):
                if _looks_like_plugin(grandchild):
                    roots.append(grandchild)
        return roots

    # ── Plugins and skills ───────────────────────────────────────────────

    def _load_plugin(self, plugin_root: Path, entry: PluginEntry | None) -> Plugin:
        metadata: dict[str, Any] = {}
        metadata_error: str | None = None
        metadata_path = plugin_root / MANIFEST_DIR / PLUGIN_FILE

        if metadata_path.is_file():
            try:
                loaded = json.loads(metadata_path.read_text(encoding="utf-8"))
            except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
                metadata_error = f"cannot parse {PLUGIN_FILE}: {e}"
            else:
                if isinstance(loaded, dict):
                    metadata = loaded
                else:
                    metadata_error = f"{PLUGIN_FILE} must contain a JSON object"
        else:
            metadata_path = None

        name = (
            str(metadata.get("name") or "")
            or (entry.name if entry else "")
            or plugin_root.resolve().name
        )
        plugin = Plugin(
            name=name,
            root=plugin_root,
            metadata=metadata,
            metadata_path=metadata_path,
            metadata_error=metadata_error,
            entry=entry,
        )
        plugin.skills = self._load_skills(plugin_root / SKILLS_DIR, plugin=name)
        logger.debug("plugin.loaded", plugin=name, skills=len(plugin.skills))
        return plugin

    def _load_skills(self, skills_dir: Path, plugin: str | None) -> list[Skill]:
        skills: list[Skill] = []
        if not skills_dir.is_dir():
            return skills
        for skill_dir in self._subdirs(skills_dir):
            skill_md = skill_dir / SKILL_FILE
            if skill_md.is_file():
                skills.append(self.load_skill(skill_md, plugin=plugin))
        return skills

    def load_skill(self, path: Path, plugin: str | None = None) -> Skill:
        """Parse one SKILL.md and the reference guides next to it."""
        skill = Skill(name=path.parent.name, path=path, plugin=plugin)

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("skill.read_error", path=str(path), error=str(e))
            skill.frontmatter_error = f"cannot read file: {e}"
            return skill

        try:
            meta, body = parse_frontmatter(content)
        except FrontmatterError as e:
            skill.frontmatter_error = str(e)
            skill.frontmatter_error_line = e.line
            skill.body = content
        else:
            skill.metadata = meta
            skill.body = body
            skill.body_line = body_start_line(content)
            if isinstance(meta.get("name"), str) and meta["name"].strip():
                skill.name = meta["name"].strip()
            description = meta.get("description")
            skill.description = description.strip() if isinstance(description, str) else ""
            if skill.body_line == 1 and content.strip():
                skill.frontmatter_error = "missing frontmatter block"
                skill.frontmatter_error_line = 1

        skill.references = self._load_references(path.parent)
        return skill

    def _load_references(self, skill_dir: Path) -> list[ReferenceDoc]:
        refs: list[ReferenceDoc] = []
        for md in sorted(skill_dir.rglob("*.md")):
            if md.name == SKILL_FILE and md.parent == skill_dir:
                continue
            if any(part in self.exclude_dirs for part in md.relative_to(skill_dir).parts):
                continue
            try:
                refs.append(ReferenceDoc(path=md, body=md.read_text(encoding="utf-8")))
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("reference.read_error", path=str(md), error=str(e))
                refs.append(ReferenceDoc(path=md, read_error=str(e)))
        return refs

    # ── Helpers ──────────────────────────────────────────────────────────

    def _subdirs(self, path: Path) -> list[Path]:
        if not path.is_dir():
            return []
        return sorted(
            p for p in path.iterdir()
            if p.is_dir() and p.name not in self.exclude_dirs and p.name != MANIFEST_DIR
        )

    def _read_json(self, path: Path, corpus: Corpus) -> dict[str, Any] | None:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            corpus.errors.append(LoadError(path=path, message=f"cannot parse JSON: {e}"))
            return None
        if not isinstance(data, dict):
            corpus.errors.append(LoadError(path=path, message="expected a JSON object"))
            return None
        return data


def _plugin_entry(item: dict[str, Any], index: int) -> PluginEntry:
    known = {"name", "source", "description", "version"}
    source = item.get("source")
    version = item.get("version")
    return PluginEntry(
        name=str(item.get("name") or ""),
        source=source if isinstance(source, str) else "",
        description=str(item.get("description") or ""),
        version=str(version) if version is not None else None,
        extra={k: v for k, v in item.items() if k not in known},
        index=index,
    )


def _looks_like_plugin(path: Path) -> bool:
    return (path / MANIFEST_DIR / PLUGIN_FILE).is_file() or (path / SKILLS_DIR).is_dir()


def find_skill(corpus: Corpus, name: str) -> Skill | None:
    """Look a skill up by name or by ``plugin:name``."""
    plugin_name, _, skill_name = name.rpartition(":")
    for skill in corpus.all_skills():
        if skill.name != skill_name:
            continue
        if plugin_name and skill.plugin != plugin_name:
            continue
        return skill
    return None


def _tokens(text: str) -> set[str]:
    return {t for t in re.findall(r"[a-z0-9]+", text.lower()) if t not in _STOPWORDS}


def match_skills(corpus: Corpus, query: str, limit: int = 5) -> list[tuple[Skill, int]]:
    """Rank skills by how well their name and description match a query.

    A query word found in the skill name counts twice; one found in the
    description counts once. Skills with no overlap are dropped.

    Args:
        corpus: Loaded corpus.
        query: Free-text request.
        limit: Maximum number of results.

    Returns:
        (skill, score) pairs, best first, ties ordered by qualified name.
    """
    words = _tokens(query)
    if not words:
        return []

    scored: list[tuple[Skill, int]] = []
    for skill in corpus.all_skills():
        name_words = _tokens(skill.name.replace("-", " "))
        desc_words = _tokens(skill.description)
        score = 2 * len(words & name_words) + len(words & desc_words)
        if score:
            scored.append((skill, score))

    scored.sort(key=lambda pair: (-pair[1], pair[0].qualified_name))
    return scored[:limit]
