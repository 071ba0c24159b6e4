"""
Tests for configuration loading.

Covers:
- deep_merge
- YAML loading (explicit path, discovered .skilldeck.yaml, errors)
- Environment and CLI overrides and their precedence
- Schema validation
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from skilldeck.config.loader import (
    apply_cli_overrides,
    deep_merge,
    load_config,
    load_env_overrides,
    load_yaml_config,
)
from skilldeck.config.schema import AppConfig, LintConfig
from skilldeck.errors import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for var in ("SKILLDECK_ROOT", "SKILLDECK_LOG_LEVEL", "SKILLDECK_STRICT"):
        monkeypatch.delenv(var, raising=False)


class TestDeepMerge:
    def test_nested_override(self):
        base = {"a": {"b": 1, "c": 2}, "d": 3}
        override = {"a": {"b": 99}, "e": 4}
        assert deep_merge(base, override) == {"a": {"b": 99, "c": 2}, "d": 3, "e": 4}

    def test_base_not_mutated(self):
        base = {"a": {"b": 1}}
        deep_merge(base, {"a": {"b": 2}})
        assert base == {"a": {"b": 1}}


class TestDefaults:
    def test_lint_defaults(self):
        cfg = AppConfig()
        assert cfg.lint.name_max_length == 64
        assert cfg.lint.description_max_length == 1024
        assert cfg.lint.body_max_lines == 500
        assert cfg.lint.reserved_words == ["anthropic", "claude"]
        assert cfg.lint.check_links is True
        assert cfg.logging.level == "human"

    def test_extra_keys_forbidden(self):
        with pytest.raises(ValidationError):
            AppConfig(lint={"unknown_option": True})

    def test_bad_severity_override(self):
        with pytest.raises(ValidationError):
            LintConfig(severity_overrides={"body-length": "fatal"})

    def test_reserved_words_lowercased(self):
        assert LintConfig(reserved_words=["Acme", " "]).reserved_words == ["acme"]


class TestYamlLoading:
    def test_none_path(self):
        assert load_yaml_config(None) == {}

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_yaml_config(tmp_path / "nope.yaml")

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        path.write_text("")
        assert load_yaml_config(path) == {}

    def test_invalid_yaml(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        path.write_text("lint: [oops\n")
        with pytest.raises(ConfigError):
            load_yaml_config(path)

    def test_not_a_mapping(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_yaml_config(path)

    def test_explicit_file(self, tmp_path: Path):
        path = tmp_path / "c.yaml"
        path.write_text("lint:\n  name_max_length: 40\n")
        assert load_config(config_path=path).lint.name_max_length == 40

    def test_discovered_at_corpus_root(self, tmp_path: Path):
        (tmp_path / ".skilldeck.yaml").write_text("lint:\n  body_max_lines: 200\n")
        cfg = load_config(cli_args={"root": str(tmp_path)})
        assert cfg.lint.body_max_lines == 200
        assert cfg.workspace.root == tmp_path


class TestOverrides:
    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SKILLDECK_ROOT", "/corpus")
        monkeypatch.setenv("SKILLDECK_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("SKILLDECK_STRICT", "yes")
        overrides = load_env_overrides()
        assert overrides["workspace"]["root"] == "/corpus"
        assert overrides["logging"]["level"] == "debug"
        assert overrides["lint"]["warnings_as_errors"] is True

    def test_cli_beats_env(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("SKILLDECK_ROOT", "/from-env")
        cfg = load_config(cli_args={"root": str(tmp_path)})
        assert cfg.workspace.root == tmp_path

    def test_env_beats_yaml(self, monkeypatch, tmp_path: Path):
        path = tmp_path / "c.yaml"
        path.write_text("logging:\n  level: error\n")
        monkeypatch.setenv("SKILLDECK_LOG_LEVEL", "info")
        assert load_config(config_path=path).logging.level == "info"

    def test_disable_extends_configured_list(self):
        merged = apply_cli_overrides(
            {"lint": {"disabled_rules": ["body-length"]}},
            {"disable": ["links-resolve", "body-length"]},
        )
        assert merged["lint"]["disabled_rules"] == ["body-length", "links-resolve"]

    def test_strict_and_no_links(self):
        merged = apply_cli_overrides({}, {"strict": True, "no_links": True})
        assert merged["lint"] == {"warnings_as_errors": True, "check_links": False}

    def test_unset_cli_args_ignored(self):
        assert apply_cli_overrides({"a": 1}, {"root": None, "strict": False, "disable": []}) == {"a": 1}
