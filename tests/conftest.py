"""Shared fixtures for fixcascade tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from fixcascade.config import PatternsConfig
from fixcascade.patterns.store import FilePatternStore


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Keep FIXCASCADE_* variables from the developer's shell out of tests."""
    for name in list(os.environ):
        if name.startswith("FIXCASCADE_"):
            monkeypatch.delenv(name)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def config(tmp_path: Path) -> PatternsConfig:
    return PatternsConfig(global_data_dir=str(tmp_path / "global"))


@pytest.fixture
def store(config: PatternsConfig, project_dir: Path) -> FilePatternStore:
    s = FilePatternStore(config, project_dir)
    s.load()
    return s
