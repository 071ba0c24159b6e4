"""
Skill Scaffolder -- Creates, lists and removes skills and plugins.

New files follow the layout CorpusLoader reads, so a freshly scaffolded
skill or plugin passes lint once its placeholder description is replaced.
"""

import getpass
import json
import shutil
from pathlib import Path
from typing import Any

import structlog
import yaml

from ..errors import CorpusError
from ..logging.human import HumanLog
from .loader import MANIFEST_DIR, MARKETPLACE_FILE, PLUGIN_FILE, SKILL_FILE, SKILLS_DIR, CorpusLoader
from .models import SKILL_NAME_RE

logger = structlog.get_logger()

DEFAULT_DESCRIPTION = "Describe what this skill does and when to use it."


def _check_name(name: str, kind: str) -> None:
    if not SKILL_NAME_RE.match(name):
        raise ValueError(
            f"Invalid {kind} name '{name}': use lowercase letters, digits and single hyphens"
        )


class SkillScaffolder:
    """Writes new skills and plugins into a corpus."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        self.hlog = HumanLog(logger)

    def _skills_base(self, plugin: str | None) -> Path:
        if plugin is None:
            return self.root / SKILLS_DIR
        _check_name(plugin, "plugin")
        return self.root / plugin / SKILLS_DIR

    def _skill_dir(self, name: str, plugin: str | None) -> Path:
        """Directory for a skill, refusing anything that escapes the corpus root."""
        _check_name(name, "skill")
        path = self._skills_base(plugin) / name
        root = self.root.resolve()
        if root not in path.resolve().parents:
            raise ValueError(f"Skill path {path} is outside the corpus root {root}")
        return path

    def create_skill(
        self,
        name: str,
        description: str | None = None,
        plugin: str | None = None,
    ) -> Path:
        """Create a skill from the template.

        Args:
            name: Skill name (also the directory name).
            description: Frontmatter description. A placeholder is used if None.
            plugin: Plugin directory to create the skill in. None puts it in
                the root skills/ directory.

        Returns:
            Path to the skill directory. An existing SKILL.md is left untouched.

        Raises:
            ValueError: If the skill or plugin name is invalid.
        """
        skill_dir = self._skill_dir(name, plugin)
        skill_dir.mkdir(parents=True, exist_ok=True)
        skill_md = skill_dir / SKILL_FILE
        if not skill_md.exists():
            frontmatter = {"name": name, "description": description or DEFAULT_DESCRIPTION}
            skill_md.write_text(
                "---\n"
                f"{yaml.safe_dump(frontmatter, sort_keys=False, allow_unicode=True, width=1000)}"
                "---\n\n"
                f"# {name.replace('-', ' ').title()}\n\n"
                "## Instructions\n\n"
                "Step-by-step guidance for the assistant goes here.\n",
                encoding="utf-8",
            )
            self.hlog.created(kind="skill", name=name, path=str(skill_dir))
        return skill_dir

    def create_plugin(
        self,
        name: str,
        description: str = "",
        version: str = "0.1.0",
        owner: str | None = None,
    ) -> Path:
        """Create a plugin directory and register it in the marketplace manifest.

        The manifest is created when the corpus has none. A plugin already
        listed in the manifest is not listed twice.

        Returns:
            Path to the plugin directory.

        Raises:
            ValueError: If the name is not a valid plugin name.
            CorpusError: If the existing manifest cannot be parsed.
        """
        _check_name(name, "plugin")
        plugin_dir = self.root / name
        meta_path = plugin_dir / MANIFEST_DIR / PLUGIN_FILE
        if not meta_path.exists():
            meta_path.parent.mkdir(parents=True, exist_ok=True)
            metadata = {"name": name, "description": description, "version": version}
            meta_path.write_text(json.dumps(metadata, indent=2) + "\n", encoding="utf-8")
            (plugin_dir / SKILLS_DIR).mkdir(exist_ok=True)
            self.hlog.created(kind="plugin", name=name, path=str(plugin_dir))

        self._register(name, description, version, owner)
        return plugin_dir

    def _register(self, name: str, description: str, version: str, owner: str | None) -> None:
        manifest_path = self.root / MANIFEST_DIR / MARKETPLACE_FILE
        if manifest_path.exists():
            try:
                manifest: dict[str, Any] = json.loads(manifest_path.read_text(encoding="utf-8"))
            except json.JSONDecodeError as e:
                raise CorpusError(f"Cannot update {manifest_path}: {e}") from e
            if not isinstance(manifest, dict):
                raise CorpusError(f"Cannot update {manifest_path}: expected a JSON object")
        else:
            manifest = {
                "name": self.root.resolve().name,
                "owner": {"name": owner or _current_user()},
                "plugins": [],
            }

        plugins = manifest.setdefault("plugins", [])
        if any(isinstance(p, dict) and p.get("name") == name for p in plugins):
            return
        plugins.append({
            "name": name,
            "source": f"./{name}",
            "description": description,
            "version": version,
        })
        manifest_path.parent.mkdir(parents=True, exist_ok=True)
        manifest_path.write_text(json.dumps(manifest, indent=2) + "\n", encoding="utf-8")
        logger.info("marketplace.plugin_registered", plugin=name, manifest=str(manifest_path))

    def list_skills(self) -> list[dict[str, str]]:
        """List the skills in the corpus.

        Returns:
            List of dicts with name, plugin ("" outside plugins) and path.
        """
        corpus = CorpusLoader(self.root).load()
        return [
            {"name": s.name, "plugin": s.plugin or "", "path": str(s.directory)}
            for s in corpus.all_skills()
        ]

    def remove_skill(self, name: str, plugin: str | None = None) -> bool:
        """Delete a skill directory.

        Returns:
            True if the skill was found and removed.

        Raises:
            ValueError: If the skill or plugin name is invalid.
        """
        path = self._skill_dir(name, plugin)
        if (path / SKILL_FILE).is_file():
            shutil.rmtree(path)
            self.hlog.removed(name=name)
            return True
        return False


def _current_user() -> str:
    try:
        return getpass.getuser()
    except (KeyError, OSError):
        return "unknown"
