"""CLI for fixcascade."""

from . import patterns  # noqa: F401  (registers the patterns command group)
from .main import main

__all__ = ["main"]
