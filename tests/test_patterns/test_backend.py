"""Tests for the JSON filesystem backend — atomic writes and soft reads."""

import json
import stat
from pathlib import Path

import pytest

from fixcascade.exceptions import PatternStoreError
from fixcascade.patterns.backend import FileSystemPatternBackend
from fixcascade.patterns.models import FailurePattern, PatternData


def _data() -> PatternData:
    p = FailurePattern(source_code="GIT013", target_code="GIT004", count=2)
    return PatternData(patterns={p.key: p})


class TestLoad:
    def test_missing_file_is_empty(self, tmp_path):
        data = FileSystemPatternBackend(tmp_path / "nope.json").load()
        assert data.patterns == {}
        assert data.sessions == {}

    def test_corrupt_json_is_empty(self, tmp_path):
        path = tmp_path / "patterns.json"
        path.write_text("{not json")
        assert FileSystemPatternBackend(path).load().patterns == {}

    def test_wrong_schema_is_empty(self, tmp_path):
        path = tmp_path / "patterns.json"
        path.write_text(json.dumps({"patterns": {"x": "not an object"}}))
        assert FileSystemPatternBackend(path).load().patterns == {}


class TestSave:
    def test_creates_directories_with_owner_only_permissions(self, tmp_path):
        path = tmp_path / "a" / "b" / "patterns.json"
        FileSystemPatternBackend(path).save(_data())

        assert path.exists()
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert stat.S_IMODE(path.parent.stat().st_mode) == 0o700

    def test_written_file_loads_back(self, tmp_path):
        backend = FileSystemPatternBackend(tmp_path / "patterns.json")
        backend.save(_data())
        assert backend.load().patterns["GIT013->GIT004"].count == 2

    def test_no_temp_files_left(self, tmp_path):
        FileSystemPatternBackend(tmp_path / "patterns.json").save(_data())
        assert [p.name for p in tmp_path.iterdir()] == ["patterns.json"]

    def test_rename_failure_cleans_up_and_raises(self, tmp_path, monkeypatch):
        path = tmp_path / "patterns.json"
        path.write_text('{"patterns": {}}')

        def fail_replace(self, target):
            raise OSError("rename failed")

        monkeypatch.setattr(Path, "replace", fail_replace)

        with pytest.raises(PatternStoreError) as exc_info:
            FileSystemPatternBackend(path).save(_data())

        assert isinstance(exc_info.value.__cause__, OSError)
        assert path.read_text() == '{"patterns": {}}'
        assert [p.name for p in tmp_path.iterdir()] == ["patterns.json"]

    def test_unwritable_directory_raises(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("a file, not a directory")

        with pytest.raises(PatternStoreError):
            FileSystemPatternBackend(blocker / "patterns.json").save(_data())
