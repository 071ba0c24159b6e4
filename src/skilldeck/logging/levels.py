"""
HUMAN logging level -- Readable trace of what skilldeck is doing.

Custom level between INFO (20) and WARNING (30). It does not indicate
severity: it marks the high-level steps a maintainer wants to follow
(corpus loaded, findings reported, lint finished) without technical noise.

Hierarchy:
    debug  (10) -> per-file parsing, rule timing
    info   (20) -> system operations (config loaded, rules selected)
    human  (25) -> * what the run does: load, check, summary
    warn   (30) -> non-fatal problems (unreadable file)
    error  (40) -> errors
"""

import logging

from structlog import _log_levels

HUMAN = 25
logging.addLevelName(HUMAN, "HUMAN")


def _human_method(self, message, *args, **kwargs):
    if self.isEnabledFor(HUMAN):
        self._log(HUMAN, message, args, **kwargs)


logging.Logger.human = _human_method

# structlog maps level numbers to method names in BoundLogger.log();
# the tables are public in recent releases and underscored in older ones.
for _name in ("LEVEL_TO_NAME", "_LEVEL_TO_NAME"):
    _table = getattr(_log_levels, _name, None)
    if isinstance(_table, dict):
        _table[HUMAN] = "human"
for _name in ("NAME_TO_LEVEL", "_NAME_TO_LEVEL"):
    _table = getattr(_log_levels, _name, None)
    if isinstance(_table, dict):
        _table["human"] = HUMAN
