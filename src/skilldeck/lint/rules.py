"""
Lint rules for skill corpora.

Each rule checks one part of the host's static contract and yields
Finding objects. Skill rules run once per skill; corpus rules run once per
corpus (manifest, plugin metadata, cross-skill checks).

Rules never raise on bad content: anything they cannot check is either
reported or skipped, so one broken file does not hide the others.
"""

import re
from abc import ABC, abstractmethod
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import unquote

from ..config.schema import LintConfig
from ..corpus.models import SKILL_NAME_RE, Corpus, Skill

__all__ = [
    "ALL_RULES",
    "BaseRule",
    "CorpusRule",
    "Finding",
    "LintContext",
    "SkillRule",
    "extract_links",
]

_XML_TAG_RE = re.compile(r"</?[A-Za-z][\w:-]*(?:\s[^<>]*)?/?>")

# [text](target "title") and ![alt](target)
_INLINE_LINK_RE = re.compile(
    r"!?\[(?:[^\[\]]|\[[^\]]*\])*\]\(\s*(<[^>]*>|[^)\s]+)(?:\s+(?:\"[^\"]*\"|'[^']*'|\([^)]*\)))?\s*\)"
)
# [label]: target
_REF_DEF_RE = re.compile(r"^\s{0,3}\[(?!\^)[^\]]+\]:\s*(<[^>]*>|\S+)")
_INLINE_CODE_RE = re.compile(r"(`+)(?:(?!\1).)+?\1")
_FENCE_RE = re.compile(r"^\s{0,3}(`{3,}|~{3,})")
_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*:")


@dataclass
class Finding:
    """One problem found by a rule."""

    rule: str
    severity: str
    path: Path
    message: str
    line: int | None = None


@dataclass
class LintContext:
    """What rules need besides the object they check."""

    config: LintConfig
    root: Path


class BaseRule(ABC):
    """Abstract base for all rules.

    Each rule must:
    1. Define id and description
    2. Implement check()
    3. Optionally set severity="warning"
    """

    id: str
    description: str
    severity: str = "error"
    scope: str = "skill"

    def finding(self, path: Path, message: str, line: int | None = None) -> Finding:
        return Finding(rule=self.id, severity=self.severity, path=path, message=message, line=line)

    @abstractmethod
    def check(self, target, ctx: LintContext) -> Iterator[Finding]:
        """Yield findings for ``target`` (a Skill or a Corpus)."""


class SkillRule(BaseRule):
    """Rule evaluated once per skill."""

    scope = "skill"
    needs_frontmatter = True

    def check(self, target: Skill, ctx: LintContext) -> Iterator[Finding]:
        if self.needs_frontmatter and target.frontmatter_error:
            return
        yield from self.check_skill(target, ctx)

    @abstractmethod
    def check_skill(self, skill: Skill, ctx: LintContext) -> Iterator[Finding]:
        ...


class CorpusRule(BaseRule):
    """Rule evaluated once per corpus."""

    scope = "corpus"

    def check(self, target: Corpus, ctx: LintContext) -> Iterator[Finding]:
        yield from self.check_corpus(target, ctx)

    @abstractmethod
    def check_corpus(self, corpus: Corpus, ctx: LintContext) -> Iterator[Finding]:
        ...


# ── Frontmatter ──────────────────────────────────────────────────────────


class FrontmatterValid(SkillRule):
    id = "frontmatter-valid"
    description = "SKILL.md starts with a parsable YAML frontmatter block"
    needs_frontmatter = False

    def check_skill(self, skill, ctx):
        if skill.frontmatter_error:
            yield self.finding(skill.path, skill.frontmatter_error, skill.frontmatter_error_line or 1)


class NameRequired(SkillRule):
    id = "name-required"
    description = "frontmatter has a non-empty 'name'"

    def check_skill(self, skill, ctx):
        if "name" not in skill.metadata:
            yield self.finding(skill.path, "frontmatter is missing 'name'", 1)
        elif not isinstance(skill.declared_name, str) or not skill.declared_name.strip():
            yield self.finding(skill.path, "'name' must be a non-empty string", 1)


class NameFormat(SkillRule):
    id = "name-format"
    description = "name uses lowercase letters, digits and single hyphens"

    def check_skill(self, skill, ctx):
        name = skill.declared_name
        if isinstance(name, str) and name.strip() and not SKILL_NAME_RE.match(name):
            yield self.finding(
                skill.path,
                f"name '{name}' must contain only lowercase letters, digits and "
                "single hyphens, and must not start or end with a hyphen",
                1,
            )


class NameLength(SkillRule):
    id = "name-length"
    description = "name is within lint.name_max_length characters"

    def check_skill(self, skill, ctx):
        name = skill.declared_name
        limit = ctx.config.name_max_length
        if isinstance(name, str) and len(name) > limit:
            yield self.finding(skill.path, f"name is {len(name)} characters (max {limit})", 1)


class NameReserved(SkillRule):
    id = "name-reserved"
    description = "name contains none of lint.reserved_words"

    def check_skill(self, skill, ctx):
        name = skill.declared_name
        if not isinstance(name, str):
            return
        for word in ctx.config.reserved_words:
            if word in name.lower():
                yield self.finding(skill.path, f"name must not contain reserved word '{word}'", 1)


class NameMatchesDir(SkillRule):
    id = "name-matches-dir"
    description = "name equals the skill directory name"
    severity = "warning"

    def check_skill(self, skill, ctx):
        name = skill.declared_name
        if isinstance(name, str) and name.strip() and name.strip() != skill.directory.name:
            yield self.finding(
                skill.path,
                f"name '{name}' does not match directory '{skill.directory.name}'",
                1,
            )


class DescriptionRequired(SkillRule):
    id = "description-required"
    description = "frontmatter has a non-empty 'description'"

    def check_skill(self, skill, ctx):
        if "description" not in skill.metadata:
            yield self.finding(skill.path, "frontmatter is missing 'description'", 1)
        elif not isinstance(skill.metadata["description"], str):
            yield self.finding(skill.path, "'description' must be a string", 1)
        elif not skill.description:
            yield self.finding(skill.path, "'description' is empty", 1)


class DescriptionLength(SkillRule):
    id = "description-length"
    description = "description is within lint.description_max_length characters"

    def check_skill(self, skill, ctx):
        limit = ctx.config.description_max_length
        if len(skill.description) > limit:
            yield self.finding(
                skill.path, f"description is {len(skill.description)} characters (max {limit})", 1
            )


class NoXmlTags(SkillRule):
    id = "no-xml-tags"
    description = "name and description contain no XML/HTML tags"

    def check_skill(self, skill, ctx):
        for key in ("name", "description"):
            value = skill.metadata.get(key)
            if isinstance(value, str) and (m := _XML_TAG_RE.search(value)):
                yield self.finding(skill.path, f"{key} contains markup '{m.group(0)}'", 1)


class BodyLength(SkillRule):
    id = "body-length"
    description = "SKILL.md body is within lint.body_max_lines lines"
    severity = "warning"

    def check_skill(self, skill, ctx):
        lines = len(skill.body.rstrip("\n").splitlines())
        limit = ctx.config.body_max_lines
        if lines > limit:
            yield self.finding(
                skill.path,
                f"body is {lines} lines (max {limit}); move detail into reference files",
                skill.body_line,
            )


# ── Links ────────────────────────────────────────────────────────────────


def extract_links(text: str, first_line: int = 1) -> Iterator[tuple[str, int]]:
    """Yield (target, line) for every Markdown link outside code.

    Fenced code blocks and inline code spans are skipped. Angle brackets
    around a target are removed.
    """
    fence: str | None = None
    for offset, line in enumerate(text.split("\n")):
        lineno = first_line + offset
        m = _FENCE_RE.match(line)
        if fence is not None:
            if m and m.group(1)[0] == fence[0] and len(m.group(1)) >= len(fence):
                fence = None
            continue
        if m:
            fence = m.group(1)
            continue

        stripped = _INLINE_CODE_RE.sub("", line)
        targets = [m.group(1) for m in _INLINE_LINK_RE.finditer(stripped)]
        if ref := _REF_DEF_RE.match(stripped):
            targets.append(ref.group(1))
        for target in targets:
            yield target.strip("<>").strip(), lineno


def _local_target(target: str) -> str | None:
    """The file part of a relative link, or None when the link is not local."""
    if not target or target.startswith(("#", "//")) or _SCHEME_RE.match(target):
        return None
    path = re.split(r"[#?]", target, maxsplit=1)[0]
    return unquote(path) or None


class LinksResolve(SkillRule):
    id = "links-resolve"
    description = "relative links in SKILL.md and reference files point to existing files"
    needs_frontmatter = False

    def check_skill(self, skill, ctx):
        if not ctx.config.check_links:
            return
        yield from self._check_text(skill.path, skill.body, skill.body_line, ctx)
        for ref in skill.references:
            if ref.read_error is None:
                yield from self._check_text(ref.path, ref.body, 1, ctx)

    def _check_text(self, path: Path, text: str, first_line: int, ctx: LintContext):
        for target, line in extract_links(text, first_line):
            local = _local_target(target)
            if local is None:
                continue
            if local.startswith("/"):
                resolved = ctx.root / local.lstrip("/")
            else:
                resolved = path.parent / local
            if not resolved.exists():
                yield self.finding(path, f"broken link '{target}'", line)


# ── Corpus-wide ──────────────────────────────────────────────────────────


class CorpusLoad(CorpusRule):
    id = "corpus-load"
    description = "manifest and metadata files can be read and parsed"

    def check_corpus(self, corpus, ctx):
        for error in corpus.errors:
            yield self.finding(error.path, error.message)


class DuplicateName(CorpusRule):
    id = "duplicate-name"
    description = "no two skills in the same plugin share a name"

    def check_corpus(self, corpus, ctx):
        seen: dict[tuple[str | None, str], Skill] = {}
        for skill in corpus.all_skills():
            key = (skill.plugin, skill.name)
            if key in seen:
                yield self.finding(
                    skill.path,
                    f"skill name '{skill.name}' is already used by {seen[key].path}",
                    1,
                )
            else:
                seen[key] = skill


class ManifestValid(CorpusRule):
    id = "manifest-valid"
    description = "marketplace.json has a name, an owner and well-formed plugin entries"

    def check_corpus(self, corpus, ctx):
        market = corpus.marketplace
        if market is None:
            return
        path = market.path

        if not market.name:
            yield self.finding(path, "marketplace is missing 'name'")
        if not market.owner.get("name"):
            yield self.finding(path, "marketplace is missing 'owner.name'")

        raw_plugins = market.raw.get("plugins")
        if raw_plugins is None:
            yield self.finding(path, "marketplace is missing 'plugins'")
            return
        if not isinstance(raw_plugins, list):
            yield self.finding(path, "'plugins' must be a list")
            return
        for i, item in enumerate(raw_plugins):
            if not isinstance(item, dict):
                yield self.finding(path, f"plugins[{i}] must be an object")

        names: dict[str, int] = defaultdict(int)
        root = ctx.root.resolve()
        for entry in market.plugins:
            label = f"plugins[{entry.index}]"
            if not entry.name:
                yield self.finding(path, f"{label} is missing 'name'")
            else:
                label = f"plugin '{entry.name}'"
                names[entry.name] += 1
                if names[entry.name] == 2:
                    yield self.finding(path, f"{label} is listed more than once")
                if not SKILL_NAME_RE.match(entry.name):
                    yield self.finding(path, f"{label} name must be kebab-case")

            raw_source = market.raw["plugins"][entry.index].get("source")
            if raw_source is None or raw_source == "":
                yield self.finding(path, f"{label} is missing 'source'")
                continue
            if not entry.source:
                # git/github source objects are resolved by the host
                continue

            target = (ctx.root / entry.source).resolve()
            if target != root and root not in target.parents:
                yield self.finding(path, f"{label} source '{entry.source}' is outside the corpus root")
            elif not target.is_dir():
                yield self.finding(path, f"{label} source '{entry.source}' does not exist")


class PluginMetadata(CorpusRule):
    id = "plugin-metadata"
    description = "plugin.json parses and agrees with the marketplace entry"

    def check_corpus(self, corpus, ctx):
        for plugin in corpus.plugins:
            if plugin.metadata_path is None:
                continue
            if plugin.metadata_error:
                yield self.finding(plugin.metadata_path, plugin.metadata_error)
                continue
            declared = plugin.metadata.get("name")
            if not declared:
                yield self.finding(plugin.metadata_path, "plugin.json is missing 'name'")
            elif plugin.entry and plugin.entry.name and declared != plugin.entry.name:
                yield self.finding(
                    plugin.metadata_path,
                    f"plugin.json name '{declared}' does not match marketplace entry '{plugin.entry.name}'",
                )


ALL_RULES: list[BaseRule] = [
    CorpusLoad(),
    FrontmatterValid(),
    NameRequired(),
    NameFormat(),
    NameLength(),
    NameReserved(),
    NameMatchesDir(),
    DescriptionRequired(),
    DescriptionLength(),
    NoXmlTags(),
    BodyLength(),
    LinksResolve(),
    DuplicateName(),
    ManifestValid(),
    PluginMetadata(),
]
