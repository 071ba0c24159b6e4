"""
Lint -- static checks for skill corpora and report rendering.
"""

from .engine import RULES_BY_ID, LintReport, Linter
from .report import REPORT_FORMATS, ReportRenderer, infer_report_format
from .rules import ALL_RULES, Finding

__all__ = [
    "ALL_RULES",
    "Finding",
    "LintReport",
    "Linter",
    "REPORT_FORMATS",
    "RULES_BY_ID",
    "ReportRenderer",
    "infer_report_format",
]
