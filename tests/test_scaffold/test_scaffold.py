"""
Tests for SkillScaffolder.

Covers:
- create_skill: template content, plugin placement, idempotency, name validation
- create_plugin: plugin.json, marketplace registration, no duplicates
- list_skills and remove_skill
- Scaffolded corpora pass lint
"""

import json
from pathlib import Path

import pytest

from skilldeck.corpus.frontmatter import parse_frontmatter
from skilldeck.corpus.loader import CorpusLoader
from skilldeck.corpus.scaffold import DEFAULT_DESCRIPTION, SkillScaffolder
from skilldeck.errors import CorpusError
from skilldeck.lint.engine import Linter


@pytest.fixture
def scaffolder(workspace: Path) -> SkillScaffolder:
    return SkillScaffolder(workspace)


class TestCreateSkill:
    def test_creates_skill_md(self, scaffolder, workspace: Path):
        path = scaffolder.create_skill("pdf-tools", description="Fill PDF forms: use for any .pdf")
        assert path == workspace / "skills" / "pdf-tools"
        meta, body = parse_frontmatter((path / "SKILL.md").read_text())
        assert meta == {"name": "pdf-tools", "description": "Fill PDF forms: use for any .pdf"}
        assert "# Pdf Tools" in body

    def test_placeholder_description(self, scaffolder):
        path = scaffolder.create_skill("x")
        meta, _ = parse_frontmatter((path / "SKILL.md").read_text())
        assert meta["description"] == DEFAULT_DESCRIPTION

    def test_inside_plugin(self, scaffolder, workspace: Path):
        path = scaffolder.create_skill("deploy", plugin="ops")
        assert path == workspace / "ops" / "skills" / "deploy"

    def test_idempotent(self, scaffolder):
        path = scaffolder.create_skill("keep-me")
        (path / "SKILL.md").write_text("Custom content")
        scaffolder.create_skill("keep-me")
        assert (path / "SKILL.md").read_text() == "Custom content"

    @pytest.mark.parametrize("bad", ["Bad", "a_b", "-x", ""])
    def test_invalid_name(self, scaffolder, bad):
        with pytest.raises(ValueError, match="Invalid skill name"):
            scaffolder.create_skill(bad)


class TestCreatePlugin:
    def test_creates_plugin_and_manifest(self, scaffolder, workspace: Path):
        path = scaffolder.create_plugin("ops", description="Ops recipes", owner="SRE")
        assert path == workspace / "ops"
        meta = json.loads((path / ".claude-plugin" / "plugin.json").read_text())
        assert meta == {"name": "ops", "description": "Ops recipes", "version": "0.1.0"}
        assert (path / "skills").is_dir()

        manifest = json.loads((workspace / ".claude-plugin" / "marketplace.json").read_text())
        assert manifest["owner"] == {"name": "SRE"}
        assert manifest["plugins"] == [
            {"name": "ops", "source": "./ops", "description": "Ops recipes", "version": "0.1.0"}
        ]

    def test_appends_to_existing_manifest(self, scaffolder, workspace: Path, json_writer):
        json_writer(
            workspace / ".claude-plugin" / "marketplace.json",
            {"name": "mine", "owner": {"name": "me"}, "plugins": [{"name": "a", "source": "./a"}]},
        )
        scaffolder.create_plugin("b")
        manifest = json.loads((workspace / ".claude-plugin" / "marketplace.json").read_text())
        assert manifest["name"] == "mine"
        assert [p["name"] for p in manifest["plugins"]] == ["a", "b"]

    def test_not_registered_twice(self, scaffolder, workspace: Path):
        scaffolder.create_plugin("ops", owner="o")
        scaffolder.create_plugin("ops", owner="o")
        manifest = json.loads((workspace / ".claude-plugin" / "marketplace.json").read_text())
        assert len(manifest["plugins"]) == 1

    def test_broken_manifest(self, scaffolder, workspace: Path):
        (workspace / ".claude-plugin").mkdir()
        (workspace / ".claude-plugin" / "marketplace.json").write_text("{")
        with pytest.raises(CorpusError):
            scaffolder.create_plugin("ops")

    def test_invalid_name(self, scaffolder):
        with pytest.raises(ValueError, match="Invalid plugin name"):
            scaffolder.create_plugin("Ops Team")


class TestListAndRemove:
    def test_list(self, scaffolder):
        scaffolder.create_plugin("ops", owner="o")
        scaffolder.create_skill("deploy", plugin="ops")
        scaffolder.create_skill("notes")
        skills = scaffolder.list_skills()
        assert [(s["name"], s["plugin"]) for s in skills] == [("deploy", "ops"), ("notes", "")]

    def test_list_empty(self, scaffolder):
        assert scaffolder.list_skills() == []

    def test_remove(self, scaffolder, workspace: Path):
        scaffolder.create_skill("gone-soon")
        assert scaffolder.remove_skill("gone-soon") is True
        assert not (workspace / "skills" / "gone-soon").exists()

    def test_remove_missing(self, scaffolder):
        assert scaffolder.remove_skill("never-existed") is False


class TestStaysInsideRoot:
    @pytest.fixture
    def outside(self, tmp_path: Path) -> Path:
        keep = tmp_path / "other-plugin" / "keep"
        keep.mkdir(parents=True)
        (keep / "SKILL.md").write_text("---\nname: keep\n---\n", encoding="utf-8")
        return keep

    @pytest.fixture
    def corpus_scaffolder(self, tmp_path: Path) -> SkillScaffolder:
        root = tmp_path / "corpus"
        root.mkdir()
        return SkillScaffolder(root)

    def test_remove_rejects_traversal_in_name(self, corpus_scaffolder, outside: Path):
        with pytest.raises(ValueError, match="Invalid skill name"):
            corpus_scaffolder.remove_skill("../../other-plugin/keep")
        assert (outside / "SKILL.md").exists()

    def test_remove_rejects_traversal_in_plugin(self, corpus_scaffolder, outside: Path):
        with pytest.raises(ValueError, match="Invalid plugin name"):
            corpus_scaffolder.remove_skill("keep", plugin="../other-plugin/..")
        assert (outside / "SKILL.md").exists()

    def test_create_rejects_traversal_in_plugin(self, corpus_scaffolder, tmp_path: Path):
        with pytest.raises(ValueError, match="Invalid plugin name"):
            corpus_scaffolder.create_skill("notes", plugin="../x")
        assert not (tmp_path / "x").exists()

    def test_symlinked_skills_dir_is_refused(self, corpus_scaffolder, outside: Path):
        (corpus_scaffolder.root / "skills").symlink_to(outside.parent, target_is_directory=True)
        with pytest.raises(ValueError, match="outside the corpus root"):
            corpus_scaffolder.remove_skill("keep")
        assert (outside / "SKILL.md").exists()


class TestScaffoldedCorpusLints:
    def test_passes(self, scaffolder, workspace: Path):
        scaffolder.create_plugin("ops", description="Ops", owner="SRE")
        scaffolder.create_skill("deploy", description="Deploy services. Use for releases.", plugin="ops")
        report = Linter().lint(CorpusLoader(workspace).load())
        assert report.findings == []
