"""
Structured logging configuration.

Three independent pipelines:
1. File (JSON) -- when config.file is set. Captures everything (DEBUG+).
2. Human handler (stderr) -- HUMAN events only: what the run is doing.
3. Technical console (stderr) -- WARNING by default, INFO with -v,
   DEBUG with -vv. Excludes HUMAN.

--quiet and --format json silence pipelines 2 and 3 so stdout and
stderr stay machine-readable.
"""

import logging
import sys
from pathlib import Path

import structlog

from ..config.schema import LoggingConfig
from .human import HumanLogHandler
from .levels import HUMAN


def configure_logging(
    config: LoggingConfig,
    json_output: bool = False,
    quiet: bool = False,
) -> None:
    """Configure the complete logging system with three pipelines.

    Args:
        config: Logging configuration (level, file, verbose)
        json_output: If True, disable human and console handlers
        quiet: If True, disable human and console handlers
    """
    logging.root.handlers.clear()
    structlog.reset_defaults()

    # Root logger captures everything; handlers filter by level
    logging.basicConfig(
        level=logging.DEBUG,
        format="%(message)s",
        handlers=[],
    )

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]

    show_human = not quiet and not json_output and config.level in ("debug", "info", "human")
    show_console = not quiet and not json_output

    # ── Pipeline 1: JSON file ─────────────────────────────────────────────
    if config.file:
        file_path = Path(config.file)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(str(file_path), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.processors.JSONRenderer(),
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(file_handler)

    # ── Pipeline 2: Human handler ─────────────────────────────────────────
    if show_human:
        human_handler = HumanLogHandler(stream=sys.stderr)
        human_handler.setLevel(HUMAN)
        human_handler.addFilter(lambda record: record.levelno == HUMAN)
        logging.root.addHandler(human_handler)

    # ── Pipeline 3: Technical console ─────────────────────────────────────
    if show_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(_console_level(config))
        console_handler.addFilter(lambda record: record.levelno != HUMAN)
        console_handler.setFormatter(
            structlog.stdlib.ProcessorFormatter(
                processor=structlog.dev.ConsoleRenderer(
                    colors=sys.stderr.isatty(),
                ),
                foreign_pre_chain=shared_processors,
            )
        )
        logging.root.addHandler(console_handler)

    # Every pipeline formats through ProcessorFormatter, so structlog
    # always hands the event dict over to stdlib untouched.
    structlog.configure(
        processors=shared_processors + [
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def _console_level(config: LoggingConfig) -> int:
    """Resolve the console handler level from -v count and config.level.

    Without -v  -> WARNING (human events go through their own handler)
    -v          -> INFO
    -vv         -> DEBUG

    An explicit level of "warn" or "error" raises the floor further.
    """
    by_verbose = {
        0: logging.WARNING,
        1: logging.INFO,
        2: logging.DEBUG,
    }.get(config.verbose, logging.DEBUG)

    by_name = {
        "debug": logging.DEBUG,
        "info": logging.INFO,
        "human": logging.WARNING,
        "warn": logging.WARNING,
        "error": logging.ERROR,
    }[config.level]

    if config.verbose:
        return by_verbose
    return max(by_verbose, by_name) if config.level in ("warn", "error") else min(by_verbose, by_name)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        structlog logger
    """
    return structlog.get_logger(name)
