"""Filesystem storage backend for pattern data.

Stores one PatternData tier as a JSON file with atomic writes.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from ..exceptions import PatternStoreError
from .models import PatternData

logger = logging.getLogger(__name__)

# Data files are owner read/write, directories owner rwx
STATE_FILE_PERMISSIONS = 0o600
STATE_DIR_PERMISSIONS = 0o700


class FileSystemPatternBackend:
    """JSON-file-backed storage for a single pattern tier.

    Characteristics:
    - Persists to a single JSON file
    - Atomic writes via temp file in the same directory + rename (POSIX)
    - Creates parent directories (mode 0700) on first save
    - Loads as empty data if the file is missing, unreadable or corrupt

    Args:
        path: Path to the JSON storage file.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.exists()

    def load(self) -> PatternData:
        """Load pattern data from the JSON file.

        Returns:
            Parsed data, or an empty PatternData if the file doesn't exist
            or can't be decoded.
        """
        if not self._path.exists():
            return PatternData()

        try:
            with open(self._path, encoding="utf-8") as f:
                raw = json.load(f)
            return PatternData.from_dict(raw)
        except (json.JSONDecodeError, UnicodeDecodeError, OSError, ValueError) as e:
            logger.warning("Failed to load pattern data from %s: %s", self._path, e)
            return PatternData()

    def save(self, data: PatternData) -> None:
        """Save pattern data to the JSON file with an atomic write.

        Raises:
            PatternStoreError: If the directory, temp file or rename fails.
                The original file is left untouched.
        """
        try:
            self._path.parent.mkdir(mode=STATE_DIR_PERMISSIONS, parents=True, exist_ok=True)
        except OSError as e:
            raise PatternStoreError("creating pattern directory", str(self._path.parent)) from e

        try:
            json_data = json.dumps(data.to_dict(), indent=2)
        except (TypeError, ValueError) as e:
            raise PatternStoreError("marshaling pattern data", str(self._path)) from e

        try:
            fd, tmp_path = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
        except OSError as e:
            raise PatternStoreError("creating temp pattern file", str(self._path)) from e

        try:
            with open(fd, "w", encoding="utf-8") as f:
                f.write(json_data)
            os.chmod(tmp_path, STATE_FILE_PERMISSIONS)
            Path(tmp_path).replace(self._path)
        except OSError as e:
            try:
                Path(tmp_path).unlink()
            except OSError:
                pass
            raise PatternStoreError("writing pattern file", str(self._path)) from e
