"""Data models for failure pattern tracking.

A FailurePattern is a directed edge "source code -> target code": fixing the
source error was followed by the target error on the next validation pass.
PatternData is the persisted container; both storage tiers share its schema.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

# Current on-disk schema version
PATTERN_DATA_VERSION = 1

# Timestamp used for legacy session entries; always older than any cutoff
ZERO_TIME = datetime.min.replace(tzinfo=timezone.utc)


def pattern_key(source_code: str, target_code: str) -> str:
    """Identity key for a directed code pair."""
    return f"{source_code}->{target_code}"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_time(value: datetime) -> str:
    """Format a timestamp as RFC 3339."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    if value == ZERO_TIME:
        return "0001-01-01T00:00:00Z"
    return value.isoformat().replace("+00:00", "Z")


def parse_time(value: Any) -> datetime:
    """Parse an RFC 3339 timestamp. Missing values map to ZERO_TIME."""
    if value is None or value == "":
        return ZERO_TIME
    if not isinstance(value, str):
        raise ValueError(f"timestamp must be a string, got {type(value).__name__}")
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


# =============================================================================
# Core Models
# =============================================================================


@dataclass
class FailurePattern:
    """A known sequence where one error code follows another."""

    source_code: str
    target_code: str
    count: int = 1
    first_seen: datetime = field(default_factory=utc_now)
    last_seen: datetime = field(default_factory=utc_now)
    seed: bool = False  # Built-in, not learned

    @property
    def key(self) -> str:
        return pattern_key(self.source_code, self.target_code)

    def copy(self) -> FailurePattern:
        return FailurePattern(
            source_code=self.source_code,
            target_code=self.target_code,
            count=self.count,
            first_seen=self.first_seen,
            last_seen=self.last_seen,
            seed=self.seed,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "source_code": self.source_code,
            "target_code": self.target_code,
            "count": self.count,
            "first_seen": format_time(self.first_seen),
            "last_seen": format_time(self.last_seen),
        }
        if self.seed:
            data["seed"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FailurePattern:
        source = data.get("source_code")
        target = data.get("target_code")
        if not isinstance(source, str) or not source:
            raise ValueError("pattern is missing source_code")
        if not isinstance(target, str) or not target:
            raise ValueError("pattern is missing target_code")

        count = data.get("count", 0)
        if not isinstance(count, int) or isinstance(count, bool):
            raise ValueError(f"pattern {source}->{target} has non-integer count")

        return cls(
            source_code=source,
            target_code=target,
            count=count,
            first_seen=parse_time(data.get("first_seen")),
            last_seen=parse_time(data.get("last_seen")),
            seed=bool(data.get("seed", False)),
        )


@dataclass
class SessionEntry:
    """Blocking error codes last observed for one session."""

    codes: list[str] = field(default_factory=list)
    last_seen: datetime = field(default_factory=utc_now)

    def copy(self) -> SessionEntry:
        return SessionEntry(codes=list(self.codes), last_seen=self.last_seen)

    def to_dict(self) -> dict[str, Any]:
        return {"codes": list(self.codes), "last_seen": format_time(self.last_seen)}

    @classmethod
    def from_raw(cls, raw: Any) -> SessionEntry:
        """Decode either the current object shape or the legacy bare list."""
        if isinstance(raw, list):
            # Legacy format stored only the codes; zero time gets it evicted
            return cls(codes=_string_list(raw), last_seen=ZERO_TIME)
        if isinstance(raw, dict):
            return cls(
                codes=_string_list(raw.get("codes") or []),
                last_seen=parse_time(raw.get("last_seen")),
            )
        raise ValueError(f"unsupported session entry: {type(raw).__name__}")


@dataclass
class PatternData:
    """On-disk container for one storage tier."""

    patterns: dict[str, FailurePattern] = field(default_factory=dict)
    sessions: dict[str, SessionEntry] = field(default_factory=dict)
    last_updated: datetime = ZERO_TIME
    version: int = PATTERN_DATA_VERSION

    def copy(self) -> PatternData:
        return PatternData(
            patterns={key: p.copy() for key, p in self.patterns.items()},
            sessions={sid: e.copy() for sid, e in self.sessions.items()},
            last_updated=self.last_updated,
            version=self.version,
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "patterns": {key: p.to_dict() for key, p in self.patterns.items()},
        }
        if self.sessions:
            data["sessions"] = {sid: e.to_dict() for sid, e in self.sessions.items()}
        data["last_updated"] = format_time(self.last_updated)
        data["version"] = self.version
        return data

    @classmethod
    def from_dict(cls, data: Any) -> PatternData:
        """Decode a parsed JSON document into the canonical in-memory shape.

        Raises:
            ValueError: If the document does not match the schema.
        """
        if not isinstance(data, dict):
            raise ValueError("pattern data must be a JSON object")

        raw_patterns = data.get("patterns") or {}
        if not isinstance(raw_patterns, dict):
            raise ValueError("patterns must be an object")

        patterns: dict[str, FailurePattern] = {}
        for raw in raw_patterns.values():
            if not isinstance(raw, dict):
                raise ValueError("pattern entries must be objects")
            pattern = FailurePattern.from_dict(raw)
            if pattern.count <= 0:
                continue
            patterns[pattern.key] = pattern

        raw_sessions = data.get("sessions") or {}
        if not isinstance(raw_sessions, dict):
            raise ValueError("sessions must be an object")

        sessions: dict[str, SessionEntry] = {}
        for session_id, raw in raw_sessions.items():
            entry = SessionEntry.from_raw(raw)
            if entry.codes:
                sessions[session_id] = entry

        version = data.get("version", PATTERN_DATA_VERSION)
        if not isinstance(version, int) or isinstance(version, bool):
            raise ValueError("version must be an integer")

        return cls(
            patterns=patterns,
            sessions=sessions,
            last_updated=parse_time(data.get("last_updated")),
            version=version,
        )


def _string_list(raw: Any) -> list[str]:
    if not isinstance(raw, list) or not all(isinstance(c, str) for c in raw):
        raise ValueError("session codes must be a list of strings")
    return list(raw)
