"""
Exception hierarchy for skilldeck.

Content problems inside a corpus are never raised: the loader records them
on the model and the linter turns them into findings. Exceptions are kept
for problems that stop a run (bad configuration, missing corpus root).
"""


class SkilldeckError(Exception):
    """Base class for every error raised by skilldeck."""


class ConfigError(SkilldeckError):
    """Invalid configuration (unknown rule id, bad severity override, etc.)."""


class CorpusError(SkilldeckError):
    """The corpus root cannot be loaded at all."""


class FrontmatterError(SkilldeckError):
    """A Markdown file has a frontmatter block that cannot be parsed."""

    def __init__(self, message: str, line: int | None = None):
        super().__init__(message)
        self.line = line
