"""Exceptions raised by fixcascade.

Read paths never raise: unreadable or corrupt pattern files load as empty
data. Only explicit writes and configuration loading surface errors.
"""

from __future__ import annotations


class PatternError(Exception):
    """Base class for all fixcascade errors."""


class PatternStoreError(PatternError):
    """A pattern data file could not be written."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        if path:
            message = f"{message}: {path}"
        super().__init__(message)


class ConfigError(PatternError):
    """Invalid or unreadable configuration."""
