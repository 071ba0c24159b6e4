"""
Configuration module for skilldeck.

Exports the main components for convenient imports.
"""

from .loader import DEFAULT_CONFIG_NAME, load_config
from .schema import AppConfig, LintConfig, LoggingConfig, WorkspaceConfig

__all__ = [
    "DEFAULT_CONFIG_NAME",
    "load_config",
    "AppConfig",
    "LintConfig",
    "LoggingConfig",
    "WorkspaceConfig",
]
