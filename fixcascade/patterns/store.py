"""Two-tier pattern store.

The project tier holds seed/shared patterns and is meant to be committed with
the repository. The global tier holds learned patterns and session state and
lives in a per-project file under the configured global directory. Every read
path goes through merge_patterns(), which sums the two tiers.
"""

from __future__ import annotations

import hashlib
import logging
import threading
from datetime import datetime, timedelta
from pathlib import Path

from ..config import PatternsConfig
from .backend import FileSystemPatternBackend
from .models import (
    ZERO_TIME,
    FailurePattern,
    PatternData,
    SessionEntry,
    pattern_key,
    utc_now,
)

logger = logging.getLogger(__name__)


def hash_project_path(project_dir: str | Path) -> str:
    """Short stable identifier for a project root: first 8 bytes of SHA-256."""
    digest = hashlib.sha256(str(project_dir).encode("utf-8")).digest()
    return digest[:8].hex()


def _cutoff(max_age: timedelta) -> datetime:
    """now - max_age, clamped to ZERO_TIME for ages reaching past year 1."""
    now = utc_now()
    if max_age >= now - ZERO_TIME:
        return ZERO_TIME
    return now - max_age


def merge_patterns(
    project: dict[str, FailurePattern],
    global_: dict[str, FailurePattern],
) -> dict[str, FailurePattern]:
    """Combine two tiers into a fresh map.

    Overlapping keys sum their counts, keep the earliest first_seen and the
    latest last_seen. Returned patterns are copies; mutating them never
    touches either tier.
    """
    merged = {key: p.copy() for key, p in project.items()}

    for key, p in global_.items():
        existing = merged.get(key)
        if existing is None:
            merged[key] = p.copy()
            continue
        existing.count += p.count
        if p.last_seen > existing.last_seen:
            existing.last_seen = p.last_seen
        if p.first_seen < existing.first_seen:
            existing.first_seen = p.first_seen

    return merged


class FilePatternStore:
    """File-backed pattern store with project and global tiers.

    Args:
        config: Patterns configuration (data file locations).
        project_dir: Project root. Resolved to an absolute path before hashing
            so the same project always maps to the same global file.
    """

    def __init__(self, config: PatternsConfig, project_dir: str | Path) -> None:
        root = Path(project_dir).resolve()
        self._project_backend = FileSystemPatternBackend(root / config.project_data_file)
        global_file = config.global_dir / f"{hash_project_path(root)}.json"
        self._global_backend = FileSystemPatternBackend(global_file)
        self._project_data = PatternData()
        self._global_data = PatternData()
        self._lock = threading.Lock()

    @property
    def project_path(self) -> Path:
        return self._project_backend.path

    @property
    def global_path(self) -> Path:
        return self._global_backend.path

    # =========================================================================
    # Persistence
    # =========================================================================

    def load(self) -> None:
        """Read both tiers. Missing or corrupt files load as empty data."""
        project = self._project_backend.load()
        global_ = self._global_backend.load()
        with self._lock:
            self._project_data = project
            self._global_data = global_
        logger.debug(
            "Loaded %d project and %d global patterns",
            len(project.patterns),
            len(global_.patterns),
        )

    def save(self) -> None:
        """Write the global tier (learned patterns and sessions).

        Raises:
            PatternStoreError: If the file can't be written.
        """
        with self._lock:
            self._global_data.last_updated = utc_now()
            data = self._global_data.copy()
        self._global_backend.save(data)

    def save_project(self) -> None:
        """Write the project tier (seed/shared patterns).

        Raises:
            PatternStoreError: If the file can't be written.
        """
        with self._lock:
            self._project_data.last_updated = utc_now()
            data = self._project_data.copy()
        self._project_backend.save(data)

    def has_project_data(self) -> bool:
        """True if the project tier file exists on disk."""
        return self._project_backend.exists()

    def set_project_data(self, data: PatternData) -> None:
        """Replace the project tier in memory. Call save_project() to persist."""
        with self._lock:
            self._project_data = data

    # =========================================================================
    # Patterns
    # =========================================================================

    def record_sequence(self, source_code: str, target_code: str) -> None:
        """Record one source -> target observation in the global tier."""
        key = pattern_key(source_code, target_code)
        now = utc_now()

        with self._lock:
            existing = self._global_data.patterns.get(key)
            if existing is not None:
                existing.count += 1
                existing.last_seen = now
            else:
                self._global_data.patterns[key] = FailurePattern(
                    source_code=source_code,
                    target_code=target_code,
                    count=1,
                    first_seen=now,
                    last_seen=now,
                )
        logger.debug("Recorded pattern %s", key)

    def get_follow_ups(self, source_code: str, min_count: int) -> list[FailurePattern]:
        """Merged patterns starting at source_code with count >= min_count."""
        return [
            p
            for p in self._merged().values()
            if p.source_code == source_code and p.count >= min_count
        ]

    def get_all_patterns(self) -> list[FailurePattern]:
        """All merged patterns from both tiers."""
        return list(self._merged().values())

    def cleanup(self, max_age: timedelta) -> int:
        """Remove global patterns last seen before now - max_age.

        Project-tier patterns are never evicted.

        Returns:
            Number of patterns removed.
        """
        cutoff = _cutoff(max_age)
        with self._lock:
            stale = [k for k, p in self._global_data.patterns.items() if p.last_seen < cutoff]
            for key in stale:
                del self._global_data.patterns[key]
        if stale:
            logger.debug("Evicted %d stale patterns", len(stale))
        return len(stale)

    def _merged(self) -> dict[str, FailurePattern]:
        with self._lock:
            return merge_patterns(self._project_data.patterns, self._global_data.patterns)

    # =========================================================================
    # Sessions (global tier)
    # =========================================================================

    def get_session_codes(self, session_id: str) -> list[str]:
        """Previous blocking codes for a session, or an empty list."""
        with self._lock:
            entry = self._global_data.sessions.get(session_id)
            return list(entry.codes) if entry else []

    def set_session_codes(self, session_id: str, codes: list[str]) -> None:
        """Store the blocking codes for a session. Empty codes delete it."""
        with self._lock:
            if not codes:
                self._global_data.sessions.pop(session_id, None)
                return
            self._global_data.sessions[session_id] = SessionEntry(
                codes=list(codes), last_seen=utc_now()
            )

    def clear_session_codes(self, session_id: str) -> None:
        with self._lock:
            self._global_data.sessions.pop(session_id, None)

    def cleanup_sessions(self, max_age: timedelta) -> int:
        """Remove sessions last seen before now - max_age.

        Returns:
            Number of sessions removed.
        """
        cutoff = _cutoff(max_age)
        with self._lock:
            stale = [
                sid for sid, e in self._global_data.sessions.items() if e.last_seen < cutoff
            ]
            for session_id in stale:
                del self._global_data.sessions[session_id]
        if stale:
            logger.debug("Evicted %d idle sessions", len(stale))
        return len(stale)

    def get_active_sessions(self) -> int:
        with self._lock:
            return len(self._global_data.sessions)

    def get_sessions(self) -> dict[str, SessionEntry]:
        """Copy of every stored session entry."""
        with self._lock:
            return {sid: e.copy() for sid, e in self._global_data.sessions.items()}
