"""Advisor: ranked, human-readable cascade hints for blocking error codes."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from ..config import DEFAULT_MIN_COUNT, PatternsConfig
from .models import FailurePattern

# Short human-readable labels for known error codes
CODE_DESCRIPTIONS: dict[str, str] = {
    # Git
    "GIT001": "missing signoff",
    "GIT002": "missing GPG sign",
    "GIT003": "no staged files",
    "GIT004": "title too long",
    "GIT005": "body line too long",
    "GIT006": "infra scope misuse",
    "GIT007": "missing remote",
    "GIT008": "missing branch",
    "GIT009": "file not found",
    "GIT010": "missing flags",
    "GIT011": "PR ref in commit",
    "GIT012": "AI attribution",
    "GIT013": "conventional format",
    "GIT014": "forbidden pattern",
    "GIT015": "signoff mismatch",
    "GIT016": "list format",
    "GIT017": "merge message",
    "GIT018": "merge signoff",
    "GIT019": "blocked files",
    "GIT020": "branch naming",
    "GIT021": "no-verify flag",
    "GIT022": "org push",
    "GIT023": "PR validation",
    "GIT024": "fetch no remote",
    "GIT025": "blocked remote",
    # File
    "FILE001": "shellcheck",
    "FILE002": "terraform fmt",
    "FILE003": "tflint",
    "FILE004": "actionlint",
    "FILE005": "markdown lint",
    "FILE006": "gofumpt",
    "FILE007": "ruff",
    "FILE008": "oxlint",
    "FILE009": "rustfmt",
    "FILE010": "linter ignore",
    # Security
    "SEC001": "API key detected",
    "SEC002": "password detected",
    "SEC003": "private key detected",
    "SEC004": "token detected",
    "SEC005": "connection string",
    # Shell
    "SHELL001": "backtick substitution",
    # GitHub
    "GH001": "issue validation",
    # Plugin
    "PLUG001": "path traversal",
    "PLUG002": "path not allowed",
    "PLUG003": "invalid extension",
    "PLUG004": "insecure remote",
    "PLUG005": "dangerous chars",
    # Session
    "SESS001": "session poisoned",
}


def code_descriptions() -> dict[str, str]:
    """Copy of the code -> label table."""
    return dict(CODE_DESCRIPTIONS)


class FollowUpSource(Protocol):
    """Read side of a pattern store, as used by the Advisor."""

    def get_follow_ups(self, source_code: str, min_count: int) -> list[FailurePattern]: ...


class Advisor:
    """Generates warnings from known failure sequences.

    Args:
        store: Anything providing get_follow_ups().
        min_count: Merged count a cascade needs before it is advised on.
        max_per_error: Cap on warnings per input code. None means unlimited.
        max_total: Cap on warnings across all input codes. None means unlimited.
    """

    def __init__(
        self,
        store: FollowUpSource,
        min_count: int = DEFAULT_MIN_COUNT,
        max_per_error: int | None = None,
        max_total: int | None = None,
        descriptions: dict[str, str] | None = None,
    ):
        self.store = store
        self.min_count = min_count
        self.max_per_error = max_per_error
        self.max_total = max_total
        self._descriptions = CODE_DESCRIPTIONS if descriptions is None else descriptions

    @classmethod
    def from_config(cls, store: FollowUpSource, config: PatternsConfig) -> Advisor:
        return cls(
            store,
            min_count=config.min_count,
            max_per_error=config.max_warnings_per_error,
            max_total=config.max_warnings_total,
        )

    def advise(self, codes: Sequence[str]) -> list[str]:
        """Return cascade warnings for the given blocking codes.

        Codes are visited in input order; each code's follow-ups are ranked
        by count, highest first. Emission stops as soon as max_total is hit.
        """
        warnings: list[str] = []
        if not codes:
            return warnings

        for code in codes:
            if self._total_reached(warnings):
                break

            follow_ups = sorted(
                self.store.get_follow_ups(code, self.min_count),
                key=lambda p: -p.count,
            )

            for per_error, pattern in enumerate(follow_ups):
                if self.max_per_error is not None and per_error >= self.max_per_error:
                    break
                if self._total_reached(warnings):
                    break
                warnings.append(self.format_warning(pattern))

        return warnings

    def format_warning(self, pattern: FailurePattern) -> str:
        return (
            f"Pattern hint: after fixing {pattern.source_code} "
            f"({self.describe_code(pattern.source_code)}), {pattern.target_code} "
            f"({self.describe_code(pattern.target_code)}) often follows."
        )

    def describe_code(self, code: str) -> str:
        return self._descriptions.get(code, code)

    def _total_reached(self, warnings: list[str]) -> bool:
        return self.max_total is not None and len(warnings) >= self.max_total
