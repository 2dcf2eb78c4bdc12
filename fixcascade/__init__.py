"""fixcascade — learn which validation errors follow which, and warn early."""

from .config import PatternsConfig, load_config
from .exceptions import ConfigError, PatternError, PatternStoreError
from .patterns import (
    Advisor,
    FailurePattern,
    FilePatternStore,
    PatternData,
    Recorder,
    SessionEntry,
    ensure_seed_data,
    run_pattern_tracking,
)

__version__ = "0.1.0"

__all__ = [
    "Advisor",
    "ConfigError",
    "FailurePattern",
    "FilePatternStore",
    "PatternData",
    "PatternError",
    "PatternStoreError",
    "PatternsConfig",
    "Recorder",
    "SessionEntry",
    "ensure_seed_data",
    "load_config",
    "run_pattern_tracking",
]
