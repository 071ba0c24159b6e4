"""
Lint engine -- runs the enabled rules over a loaded corpus.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path

import structlog

from ..config.schema import LintConfig
from ..corpus.models import Corpus
from ..errors import ConfigError
from ..logging.human import HumanLog
from .rules import ALL_RULES, BaseRule, Finding, LintContext

logger = structlog.get_logger()

RULES_BY_ID: dict[str, BaseRule] = {rule.id: rule for rule in ALL_RULES}


@dataclass
class LintReport:
    """Result of a lint run."""

    root: Path
    findings: list[Finding] = field(default_factory=list)
    skills_checked: int = 0
    plugins_checked: int = 0
    rules_run: list[str] = field(default_factory=list)

    @property
    def errors(self) -> int:
        return sum(1 for f in self.findings if f.severity == "error")

    @property
    def warnings(self) -> int:
        return sum(1 for f in self.findings if f.severity == "warning")

    @property
    def passed(self) -> bool:
        return self.errors == 0

    def relative(self, path: Path) -> str:
        """Path as shown in reports: relative to the corpus root when possible."""
        try:
            return path.resolve().relative_to(self.root.resolve()).as_posix()
        except ValueError:
            return path.as_posix()


class Linter:
    """Applies lint rules to a corpus.

    Rules listed in ``disabled_rules`` are skipped, ``severity_overrides``
    replaces a rule's default severity and ``warnings_as_errors`` promotes
    every remaining warning.
    """

    def __init__(self, config: LintConfig | None = None):
        self.config = config or LintConfig()
        self._validate_rule_ids()
        self.rules = [r for r in ALL_RULES if r.id not in self.config.disabled_rules]
        self.hlog = HumanLog(logger)
        self.log = logger.bind(component="linter")

    def _validate_rule_ids(self) -> None:
        unknown = [
            rule_id
            for rule_id in [*self.config.disabled_rules, *self.config.severity_overrides]
            if rule_id not in RULES_BY_ID
        ]
        if unknown:
            available = ", ".join(RULES_BY_ID)
            raise ConfigError(f"Unknown lint rule(s): {', '.join(unknown)}. Available: {available}")

    def _severity(self, finding: Finding) -> str:
        severity = self.config.severity_overrides.get(finding.rule, finding.severity)
        if severity == "warning" and self.config.warnings_as_errors:
            return "error"
        return severity

    def lint(self, corpus: Corpus) -> LintReport:
        """Run every enabled rule.

        Args:
            corpus: Corpus returned by CorpusLoader.load().

        Returns:
            LintReport with findings sorted by path, line and rule id.
        """
        ctx = LintContext(config=self.config, root=corpus.root)
        skills = list(corpus.all_skills())
        report = LintReport(
            root=corpus.root,
            skills_checked=len(skills),
            plugins_checked=len(corpus.plugins),
            rules_run=[r.id for r in self.rules],
        )
        self.hlog.lint_start(rules=len(self.rules))
        self.log.info("lint.rules_selected", rules=report.rules_run)

        findings: list[Finding] = []
        for rule in self.rules:
            targets = [corpus] if rule.scope == "corpus" else skills
            for target in targets:
                findings.extend(rule.check(target, ctx))

        report.findings = sorted(
            (replace(f, severity=self._severity(f)) for f in findings),
            key=lambda f: (report.relative(f.path), f.line or 0, f.rule),
        )
        for f in report.findings:
            self.log.debug(
                "lint.finding", rule=f.rule, severity=f.severity,
                path=report.relative(f.path), line=f.line,
            )

        self.hlog.lint_complete(skills=len(skills), errors=report.errors, warnings=report.warnings)
        return report
