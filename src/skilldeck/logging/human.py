"""
Human Log -- Formatter and helper for the readable run trace.

Produces short lines on stderr so the maintainer sees what skilldeck does
step by step, while the report itself goes to stdout.

Example output:
    Corpus loaded: 3 plugins, 14 skills (./my-marketplace)
    Linting with 14 rules
    ✗ 2 errors, 1 warning in 14 skills
"""

import logging
import sys
from typing import Any

import structlog

from .levels import HUMAN

# Attributes every LogRecord carries; anything else came from the caller
_RECORD_ATTRS = frozenset((
    "msg", "args", "levelname", "levelno", "pathname",
    "filename", "module", "exc_info", "exc_text", "stack_info",
    "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message",
    "taskName", "name",
))


def _plural(count: Any, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


class HumanFormatter:
    """Formats skilldeck trace events as readable text.

    Each event type has its own format. Unknown events return None and
    are not printed.
    """

    def format_event(self, event: str, **kw) -> str | None:
        """Format an event as readable text.

        Args:
            event: Event name (e.g. "corpus.loaded", "lint.complete")
            **kw: Event parameters

        Returns:
            Formatted text, or None if the event has no defined format
        """
        match event:

            # ── CORPUS ───────────────────────────────────────────────────
            case "corpus.loaded":
                plugins = kw.get("plugins", "?")
                skills = kw.get("skills", "?")
                root = kw.get("root", ".")
                return f"Corpus loaded: {_plural(plugins, 'plugin')}, {_plural(skills, 'skill')} ({root})"

            case "corpus.load_error":
                return f"  ! {kw.get('path', '?')}: {kw.get('error', '?')}"

            # ── LINT ─────────────────────────────────────────────────────
            case "lint.start":
                return f"Linting with {_plural(kw.get('rules', '?'), 'rule')}"

            case "lint.complete":
                errors = kw.get("errors", 0)
                warnings = kw.get("warnings", 0)
                skills = kw.get("skills", "?")
                icon = "✓" if not errors else "✗"
                return (
                    f"{icon} {_plural(errors, 'error')}, {_plural(warnings, 'warning')} "
                    f"in {_plural(skills, 'skill')}"
                )

            # ── SCAFFOLD ─────────────────────────────────────────────────
            case "scaffold.created":
                kind = kw.get("kind", "file")
                return f"+ {kind} {kw.get('name', '?')} → {kw.get('path', '?')}"

            case "scaffold.removed":
                return f"- skill {kw.get('name', '?')}"

            case _:
                return None


class HumanLogHandler(logging.Handler):
    """Logging handler that keeps HUMAN records and formats them.

    Only processes records at exactly the HUMAN level (25). Writes to
    stderr so stdout stays clean for reports and piping.
    """

    def __init__(self, stream=None) -> None:
        super().__init__(level=HUMAN)
        self.stream = stream or sys.stderr
        self.formatter_inst = HumanFormatter()

    def emit(self, record: logging.LogRecord) -> None:
        try:
            if record.levelno != HUMAN:
                return

            event, kw = _extract_event(record)
            formatted = self.formatter_inst.format_event(event, **kw)
            if formatted is not None:
                self.stream.write(formatted + "\n")
                self.stream.flush()
        except Exception:
            self.handleError(record)


def _extract_event(record: logging.LogRecord) -> tuple[str, dict[str, Any]]:
    """Pull the event name and its keyword arguments out of a record.

    structlog's ProcessorFormatter.wrap_for_formatter hands the whole
    event dict over as record.msg; plain stdlib calls carry a string.
    """
    if isinstance(record.msg, dict):
        kw = {k: v for k, v in record.msg.items() if not k.startswith("_")}
        event = str(kw.pop("event", ""))
        return event, kw

    kw = {
        k: v for k, v in record.__dict__.items()
        if not k.startswith("_") and k not in _RECORD_ATTRS and k != "event"
    }
    event = getattr(record, "event", None) or record.getMessage()
    return event, kw


class HumanLog:
    """Typed helper for emitting HUMAN-level events from code.

    Instead of calling log.log(HUMAN, "event", ...) directly, use methods
    with clear semantic names.

    Until configure_logging() has run, structlog's default PrintLogger has
    no ``human`` method, so events go to the stdlib ``skilldeck`` logger
    as an event dict instead. HumanLogHandler reads both forms.

    Usage:
        hlog = HumanLog(structlog.get_logger())
        hlog.corpus_loaded(root="docs", plugins=2, skills=9)
    """

    def __init__(self, logger) -> None:
        self._log = logger

    def _emit(self, event: str, **kw) -> None:
        if structlog.is_configured():
            self._log.log(HUMAN, event, **kw)
        else:
            logging.getLogger("skilldeck").log(HUMAN, {"event": event, **kw})

    def corpus_loaded(self, root: str, plugins: int, skills: int) -> None:
        self._emit("corpus.loaded", root=root, plugins=plugins, skills=skills)

    def load_error(self, path: str, error: str) -> None:
        self._emit("corpus.load_error", path=path, error=error)

    def lint_start(self, rules: int) -> None:
        self._emit("lint.start", rules=rules)

    def lint_complete(self, skills: int, errors: int, warnings: int) -> None:
        self._emit("lint.complete", skills=skills, errors=errors, warnings=warnings)

    def created(self, kind: str, name: str, path: str) -> None:
        self._emit("scaffold.created", kind=kind, name=name, path=path)

    def removed(self, name: str) -> None:
        self._emit("scaffold.removed", name=name)
