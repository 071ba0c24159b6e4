"""
skilldeck - Loader and linter for AI-assistant skill and plugin corpora.

A corpus is a directory of Markdown skill files (YAML frontmatter + prose)
grouped into plugins and listed in a marketplace manifest. skilldeck loads
that layout the way a plugin host discovers it and checks it against the
host's static contract.
"""

__version__ = "0.4.0"
