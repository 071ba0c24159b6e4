"""
Corpus -- loading and scaffolding of skill/plugin corpora.
"""

from .frontmatter import parse_frontmatter
from .loader import CorpusLoader, find_skill, match_skills
from .models import Corpus, Marketplace, Plugin, PluginEntry, ReferenceDoc, Skill
from .scaffold import SkillScaffolder

__all__ = [
    "Corpus",
    "CorpusLoader",
    "Marketplace",
    "Plugin",
    "PluginEntry",
    "ReferenceDoc",
    "Skill",
    "SkillScaffolder",
    "find_skill",
    "match_skills",
    "parse_frontmatter",
]
