"""
Logging module - structured logging with a HUMAN trace level.
"""

from .human import HumanLog, HumanLogHandler
from .levels import HUMAN
from .setup import configure_logging, get_logger

__all__ = [
    "configure_logging",
    "get_logger",
    "HUMAN",
    "HumanLog",
    "HumanLogHandler",
]
