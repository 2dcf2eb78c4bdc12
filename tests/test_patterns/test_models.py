"""Tests for pattern data models and the on-disk JSON shape."""

from datetime import datetime, timezone

import pytest

from fixcascade.patterns.models import (
    ZERO_TIME,
    FailurePattern,
    PatternData,
    SessionEntry,
    format_time,
    parse_time,
)


class TestFailurePattern:
    def test_key(self):
        p = FailurePattern(source_code="GIT013", target_code="GIT004")
        assert p.key == "GIT013->GIT004"

    def test_seed_flag_omitted_when_false(self):
        p = FailurePattern(source_code="A", target_code="B")
        assert "seed" not in p.to_dict()
        assert FailurePattern(source_code="A", target_code="B", seed=True).to_dict()["seed"]

    def test_from_dict_requires_codes(self):
        with pytest.raises(ValueError):
            FailurePattern.from_dict({"source_code": "", "target_code": "B", "count": 1})

    def test_copy_is_independent(self):
        p = FailurePattern(source_code="A", target_code="B", count=2)
        c = p.copy()
        c.count = 10
        assert p.count == 2


class TestTimestamps:
    def test_parses_go_rfc3339_with_nanoseconds(self):
        parsed = parse_time("2025-03-01T10:20:30.123456789+02:00")
        assert parsed.year == 2025
        assert parsed.utcoffset().total_seconds() == 7200

    def test_parses_utc_suffix(self):
        assert parse_time("2025-03-01T10:20:30Z").tzinfo is not None

    def test_zero_time_round_trip(self):
        assert format_time(ZERO_TIME) == "0001-01-01T00:00:00Z"
        assert parse_time("0001-01-01T00:00:00Z") == ZERO_TIME

    def test_missing_timestamp_is_zero(self):
        assert parse_time(None) == ZERO_TIME


class TestPatternData:
    def test_current_session_format(self):
        data = PatternData.from_dict(
            {
                "patterns": {},
                "sessions": {
                    "s1": {"codes": ["GIT013", "GIT004"], "last_seen": "2025-01-02T03:04:05Z"}
                },
                "last_updated": "2025-01-02T03:04:05Z",
                "version": 1,
            }
        )
        entry = data.sessions["s1"]
        assert entry.codes == ["GIT013", "GIT004"]
        assert entry.last_seen == datetime(2025, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

    def test_legacy_session_format_normalized(self):
        data = PatternData.from_dict(
            {
                "patterns": {},
                "sessions": {"old-session": ["GIT013"]},
                "last_updated": "2025-01-02T03:04:05Z",
                "version": 1,
            }
        )
        entry = data.sessions["old-session"]
        assert isinstance(entry, SessionEntry)
        assert entry.codes == ["GIT013"]
        assert entry.last_seen == ZERO_TIME

    def test_empty_session_codes_dropped(self):
        data = PatternData.from_dict({"patterns": {}, "sessions": {"s1": [], "s2": {"codes": []}}})
        assert data.sessions == {}

    def test_non_positive_counts_dropped(self):
        data = PatternData.from_dict(
            {
                "patterns": {
                    "A->B": {"source_code": "A", "target_code": "B", "count": 0},
                    "A->C": {"source_code": "A", "target_code": "C", "count": 2},
                }
            }
        )
        assert list(data.patterns) == ["A->C"]

    def test_to_dict_shape(self):
        p = FailurePattern(source_code="A", target_code="B", count=3)
        data = PatternData(
            patterns={p.key: p},
            sessions={"s1": SessionEntry(codes=["A"])},
        )
        raw = data.to_dict()
        assert set(raw) == {"patterns", "sessions", "last_updated", "version"}
        assert raw["patterns"]["A->B"]["count"] == 3
        assert raw["sessions"]["s1"]["codes"] == ["A"]
        assert raw["version"] == 1

    def test_sessions_omitted_when_empty(self):
        assert "sessions" not in PatternData().to_dict()

    def test_rejects_non_object(self):
        with pytest.raises(ValueError):
            PatternData.from_dict(["not", "an", "object"])
