"""Failure pattern tracking — learn which validation errors follow which.

Architecture:
    Recorder (sessions)  →  FilePatternStore (two tiers)  →  Advisor (hints)
                            ├── project tier: seeds, committed with the repo
                            └── global tier: learned counts + session state

After each validation round the Recorder pairs the session's previous blocking
codes with the current ones and records every cross pair in the global tier.
The Advisor reads the merged view and turns strong cascades into hints such as
"after fixing GIT013, GIT004 often follows".
"""

from .advisor import CODE_DESCRIPTIONS, Advisor, code_descriptions
from .backend import FileSystemPatternBackend
from .models import FailurePattern, PatternData, SessionEntry, pattern_key
from .recorder import Recorder
from .seeds import SEED_COUNT, ensure_seed_data, seed_patterns
from .store import FilePatternStore, hash_project_path, merge_patterns
from .tracking import open_store, run_pattern_tracking

__all__ = [
    "Advisor",
    "CODE_DESCRIPTIONS",
    "FailurePattern",
    "FilePatternStore",
    "FileSystemPatternBackend",
    "PatternData",
    "Recorder",
    "SEED_COUNT",
    "SessionEntry",
    "code_descriptions",
    "ensure_seed_data",
    "hash_project_path",
    "merge_patterns",
    "open_store",
    "pattern_key",
    "run_pattern_tracking",
    "seed_patterns",
]
