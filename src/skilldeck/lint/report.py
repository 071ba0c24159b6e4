"""
Lint Report -- Renders a LintReport in multiple formats.

Supports plain text (terminal), JSON (for CI/CD parsing), Markdown
(human-readable, e.g. a job summary) and GitHub workflow annotations.
"""

import json
from pathlib import Path

from .engine import LintReport

REPORT_FORMATS = ("text", "json", "markdown", "github")

_REPORT_EXT_MAP: dict[str, str] = {
    ".json": "json",
    ".md": "markdown",
    ".markdown": "markdown",
}


def infer_report_format(report_file: str) -> str:
    """Infer the report format from the file extension.

    Returns:
        'json' or 'markdown', 'text' for anything else.
    """
    return _REPORT_EXT_MAP.get(Path(report_file).suffix.lower(), "text")


class ReportRenderer:
    """Renders a LintReport as text, JSON, Markdown or GitHub annotations."""

    def __init__(self, report: LintReport):
        self.report = report

    def render(self, fmt: str) -> str:
        match fmt:
            case "json":
                return self.to_json()
            case "markdown":
                return self.to_markdown()
            case "github":
                return self.to_github()
            case "text":
                return self.to_text()
            case _:
                raise ValueError(f"Unknown report format '{fmt}'. Use one of: {', '.join(REPORT_FORMATS)}")

    def _location(self, finding) -> str:
        path = self.report.relative(finding.path)
        return f"{path}:{finding.line}" if finding.line else path

    def _summary(self) -> str:
        r = self.report
        return (
            f"{r.errors} error(s), {r.warnings} warning(s) "
            f"in {r.skills_checked} skill(s) across {r.plugins_checked} plugin(s)"
        )

    def to_text(self) -> str:
        """One line per finding, then a summary line."""
        lines = [
            f"{self._location(f)}: {f.severity} [{f.rule}] {f.message}"
            for f in self.report.findings
        ]
        if lines:
            lines.append("")
        lines.append(self._summary())
        return "\n".join(lines)

    def to_json(self) -> str:
        """Report in JSON format (for CI/CD parsing).

        Returns:
            Indented JSON string.
        """
        r = self.report
        data = {
            "root": str(r.root),
            "passed": r.passed,
            "summary": {
                "errors": r.errors,
                "warnings": r.warnings,
                "skills": r.skills_checked,
                "plugins": r.plugins_checked,
            },
            "rules": r.rules_run,
            "findings": [
                {
                    "rule": f.rule,
                    "severity": f.severity,
                    "path": r.relative(f.path),
                    "line": f.line,
                    "message": f.message,
                }
                for f in r.findings
            ],
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def to_markdown(self) -> str:
        """Human-readable Markdown report.

        Returns:
            String with the report formatted in Markdown.
        """
        r = self.report
        status = "PASS" if r.passed else "FAIL"
        lines = [
            "# Skill Lint Report",
            "",
            "## Summary",
            "| Field | Value |",
            "|-------|-------|",
            f"| Status | {status} |",
            f"| Plugins | {r.plugins_checked} |",
            f"| Skills | {r.skills_checked} |",
            f"| Errors | {r.errors} |",
            f"| Warnings | {r.warnings} |",
            "",
        ]

        if r.findings:
            lines.append("## Findings")
            lines.append("| Severity | Rule | Location | Message |")
            lines.append("|----------|------|----------|---------|")
            for f in r.findings:
                message = f.message.replace("|", "\\|")
                lines.append(f"| {f.severity} | `{f.rule}` | `{self._location(f)}` | {message} |")
            lines.append("")

        return "\n".join(lines)

    def to_github(self) -> str:
        """GitHub Actions workflow commands, one annotation per finding."""
        lines = []
        for f in self.report.findings:
            level = "error" if f.severity == "error" else "warning"
            props = [f"file={_escape_property(self.report.relative(f.path))}"]
            if f.line:
                props.append(f"line={f.line}")
            props.append(f"title={_escape_property(f.rule)}")
            lines.append(f"::{level} {','.join(props)}::{_escape_data(f.message)}")
        lines.append(self._summary())
        return "\n".join(lines)


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")
