"""Utility modules for Domain Analyzer."""

from .config import Settings, get_settings, DEFAULT_USER_AGENT

__all__ = [
    "Settings",
    "get_settings",
    "DEFAULT_USER_AGENT",
]
