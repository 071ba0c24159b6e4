"""
Frontmatter parsing for Markdown skill files.

A frontmatter block is the YAML between a first line of ``---`` and the
next line of ``---``. Everything after the closing line is the body.
"""

from typing import Any

import yaml

from ..errors import FrontmatterError

_DELIMITER = "---"


def _normalize(text: str) -> list[str]:
    return text.lstrip("\ufeff").replace("\r\n", "\n").split("\n")


def _closing_index(lines: list[str]) -> int | None:
    """Index of the closing delimiter, or None if there is no frontmatter.

    Raises:
        FrontmatterError: If the opening delimiter is never closed.
    """
    if not lines or lines[0].rstrip() != _DELIMITER:
        return None
    for i in range(1, len(lines)):
        if lines[i].rstrip() == _DELIMITER:
            return i
    raise FrontmatterError("frontmatter block is not closed with '---'", line=1)


def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split a Markdown document into its frontmatter mapping and body.

    Args:
        text: Full file content.

    Returns:
        (metadata, body). A document without frontmatter returns ({}, text).

    Raises:
        FrontmatterError: If the block is not valid YAML or not a mapping,
            or if an opening ``---`` is never closed.
    """
    lines = _normalize(text)
    end = _closing_index(lines)
    if end is None:
        return {}, "\n".join(lines)

    raw = "\n".join(lines[1:end])
    try:
        meta = yaml.safe_load(raw)
    except yaml.YAMLError as e:
        line = None
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            # +2: the opening delimiter, and YAML marks are 0-based
            line = mark.line + 2
        raise FrontmatterError(f"invalid YAML in frontmatter: {e}", line=line) from e

    if meta is None:
        meta = {}
    if not isinstance(meta, dict):
        raise FrontmatterError(
            f"frontmatter must be a mapping, got {type(meta).__name__}", line=2
        )
    return meta, "\n".join(lines[end + 1:])


def body_start_line(text: str) -> int:
    """1-based line number on which the body of ``text`` begins."""
    lines = _normalize(text)
    try:
        end = _closing_index(lines)
    except FrontmatterError:
        return 1
    return 1 if end is None else end + 2
