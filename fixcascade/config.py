"""Configuration for failure pattern tracking.

Defaults live in PatternsConfig. Environment variables override them at
construction time, and a project TOML file can override them again:

    # .fixcascade/config.toml
    [patterns]
    min_count = 4
    max_age = "720h"
    global_data_dir = "~/.local/share/fixcascade/patterns"

Environment overrides:
    FIXCASCADE_PATTERNS_ENABLED, FIXCASCADE_MIN_COUNT, FIXCASCADE_MAX_AGE,
    FIXCASCADE_SESSION_MAX_AGE, FIXCASCADE_MAX_WARNINGS_PER_ERROR,
    FIXCASCADE_MAX_WARNINGS_TOTAL, FIXCASCADE_PROJECT_DATA_FILE,
    FIXCASCADE_GLOBAL_DATA_DIR, FIXCASCADE_USE_SEED_DATA
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field, fields
from datetime import timedelta
from pathlib import Path
from typing import Any

from .exceptions import ConfigError

DEFAULT_MIN_COUNT = 3
DEFAULT_MAX_AGE = timedelta(days=90)
DEFAULT_SESSION_MAX_AGE = timedelta(hours=24)
DEFAULT_MAX_WARNINGS_PER_ERROR = 2
DEFAULT_MAX_WARNINGS_TOTAL = 3
DEFAULT_PROJECT_DATA_FILE = ".fixcascade/patterns.json"
DEFAULT_GLOBAL_DATA_DIR = "~/.fixcascade/patterns"
DEFAULT_CONFIG_FILE = ".fixcascade/config.toml"

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ms|d|h|m|s)")
_DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}
_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def parse_duration(value: str | int | float | timedelta) -> timedelta:
    """Parse a duration such as "2160h", "1h30m", "90d" or a number of seconds.

    Raises:
        ConfigError: If the value is not a valid, non-negative duration.
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, bool):
        raise ConfigError(f"invalid duration: {value!r}")
    try:
        if isinstance(value, (int, float)):
            return timedelta(seconds=value)

        text = value.strip()
        if not text:
            raise ConfigError("invalid duration: empty string")
        if text.isdigit():
            return timedelta(seconds=int(text))

        total = timedelta()
        pos = 0
        for match in _DURATION_PART.finditer(text):
            if match.start() != pos:
                break
            total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
            pos = match.end()
    except (OverflowError, ValueError) as e:
        raise ConfigError(f"invalid duration: {value!r}") from e
    if pos != len(text):
        raise ConfigError(f"invalid duration: {value!r}")
    return total


def expand_path(path: str) -> Path:
    """Expand a leading "~/" to the invoking user's home directory."""
    if path.startswith("~/") or path == "~":
        return Path(path).expanduser()
    return Path(path)


def _env_str(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name)
    if raw is None:
        return default
    lowered = raw.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def _env_duration(name: str, default: timedelta) -> timedelta:
    raw = os.environ.get(name)
    if raw is None:
        return default
    return parse_duration(raw)


@dataclass
class PatternsConfig:
    """Configuration for failure pattern tracking.

    Attributes:
        enabled: Whether pattern tracking runs at all.
        min_count: Merged observation count before a cascade is advised on.
        max_age: Learned patterns not seen for this long are evicted.
        session_max_age: Idle sessions older than this are evicted.
        max_warnings_per_error: Cap on hints emitted per blocking code.
        max_warnings_total: Cap on hints emitted per validation round.
        project_data_file: Project tier file, relative to the project root.
        global_data_dir: Directory holding per-project global tier files.
            A leading "~/" is expanded.
        use_seed_data: Whether to write the built-in seed catalog into a
            project that has no project tier yet.
    """

    enabled: bool = field(default_factory=lambda: _env_bool("FIXCASCADE_PATTERNS_ENABLED", True))
    min_count: int = field(
        default_factory=lambda: _env_int("FIXCASCADE_MIN_COUNT", DEFAULT_MIN_COUNT)
    )
    max_age: timedelta = field(
        default_factory=lambda: _env_duration("FIXCASCADE_MAX_AGE", DEFAULT_MAX_AGE)
    )
    session_max_age: timedelta = field(
        default_factory=lambda: _env_duration(
            "FIXCASCADE_SESSION_MAX_AGE", DEFAULT_SESSION_MAX_AGE
        )
    )
    max_warnings_per_error: int = field(
        default_factory=lambda: _env_int(
            "FIXCASCADE_MAX_WARNINGS_PER_ERROR", DEFAULT_MAX_WARNINGS_PER_ERROR
        )
    )
    max_warnings_total: int = field(
        default_factory=lambda: _env_int(
            "FIXCASCADE_MAX_WARNINGS_TOTAL", DEFAULT_MAX_WARNINGS_TOTAL
        )
    )
    project_data_file: str = field(
        default_factory=lambda: _env_str("FIXCASCADE_PROJECT_DATA_FILE", DEFAULT_PROJECT_DATA_FILE)
    )
    global_data_dir: str = field(
        default_factory=lambda: _env_str("FIXCASCADE_GLOBAL_DATA_DIR", DEFAULT_GLOBAL_DATA_DIR)
    )
    use_seed_data: bool = field(
        default_factory=lambda: _env_bool("FIXCASCADE_USE_SEED_DATA", True)
    )

    def __post_init__(self) -> None:
        self.max_age = parse_duration(self.max_age)
        self.session_max_age = parse_duration(self.session_max_age)
        self.validate()

    def validate(self) -> None:
        """Check value ranges.

        Raises:
            ConfigError: On the first invalid value.
        """
        if self.min_count < 1:
            raise ConfigError(f"min_count must be at least 1, got {self.min_count}")
        if self.max_warnings_per_error < 1:
            raise ConfigError(
                f"max_warnings_per_error must be at least 1, got {self.max_warnings_per_error}"
            )
        if self.max_warnings_total < 1:
            raise ConfigError(
                f"max_warnings_total must be at least 1, got {self.max_warnings_total}"
            )
        if self.max_age < timedelta(0):
            raise ConfigError("max_age must not be negative")
        if self.session_max_age < timedelta(0):
            raise ConfigError("session_max_age must not be negative")
        if not self.project_data_file:
            raise ConfigError("project_data_file must not be empty")
        if not self.global_data_dir:
            raise ConfigError("global_data_dir must not be empty")

    @property
    def global_dir(self) -> Path:
        """Global data directory with "~/" expanded."""
        return expand_path(self.global_data_dir)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> PatternsConfig:
        """Build a config from a mapping such as a TOML [patterns] table.

        Keys not present keep their default (or environment) value.

        Raises:
            ConfigError: On unknown keys or invalid values.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"unknown patterns config keys: {', '.join(unknown)}")

        values = dict(data)
        for key in ("max_age", "session_max_age"):
            if key in values:
                values[key] = parse_duration(values[key])
        for key in ("min_count", "max_warnings_per_error", "max_warnings_total"):
            if key in values and (
                not isinstance(values[key], int) or isinstance(values[key], bool)
            ):
                raise ConfigError(f"{key} must be an integer, got {values[key]!r}")
        for key in ("enabled", "use_seed_data"):
            if key in values and not isinstance(values[key], bool):
                raise ConfigError(f"{key} must be a boolean, got {values[key]!r}")
        for key in ("project_data_file", "global_data_dir"):
            if key in values and not isinstance(values[key], str):
                raise ConfigError(f"{key} must be a string, got {values[key]!r}")

        return cls(**values)


def load_config(
    path: str | os.PathLike[str] | None = None,
    project_dir: Path | None = None,
) -> PatternsConfig:
    """Load PatternsConfig from a TOML file.

    Args:
        path: Explicit config file. Must exist when given.
        project_dir: Project root used to find the default config file
            (``.fixcascade/config.toml``). Defaults to the current directory.

    Returns:
        The loaded config, or defaults if no config file exists.

    Raises:
        ConfigError: If the file can't be read or contains invalid values.
    """
    if path is not None:
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"config file not found: {config_path}")
    else:
        config_path = (project_dir or Path.cwd()) / DEFAULT_CONFIG_FILE
        if not config_path.exists():
            return PatternsConfig()

    try:
        raw = tomllib.loads(config_path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigError(f"failed to read config {config_path}: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {config_path}: {e}") from e

    section = raw.get("patterns", {})
    if not isinstance(section, dict):
        raise ConfigError(f"[patterns] in {config_path} must be a table")
    return PatternsConfig.from_dict(section)
