"""Built-in seed catalog of cross-validator cascades."""

from __future__ import annotations

import logging

from .models import FailurePattern, PatternData, utc_now
from .store import FilePatternStore

logger = logging.getLogger(__name__)

# Initial count for seed patterns, above the default min_count of 3
SEED_COUNT = 5

# (source, target): fixing source commonly surfaces target
_SEED_CASCADES = [
    ("GIT013", "GIT004"),  # conventional format -> title too long
    ("GIT004", "GIT005"),  # shortened title -> body line too long
    ("GIT005", "GIT016"),  # rewrapped body -> list format
    ("GIT013", "GIT006"),  # conventional format -> infra scope misuse
]


def seed_patterns() -> PatternData:
    """Fresh PatternData holding the seed catalog."""
    now = utc_now()
    patterns = {}
    for source, target in _SEED_CASCADES:
        pattern = FailurePattern(
            source_code=source,
            target_code=target,
            count=SEED_COUNT,
            first_seen=now,
            last_seen=now,
            seed=True,
        )
        patterns[pattern.key] = pattern
    return PatternData(patterns=patterns, last_updated=now)


def ensure_seed_data(store: FilePatternStore) -> bool:
    """Write seed patterns to the project tier unless it already exists.

    Existing project data is never overwritten or merged into.

    Returns:
        True if seeds were written.

    Raises:
        PatternStoreError: If the project tier can't be written.
    """
    if store.has_project_data():
        logger.debug("Project pattern data exists at %s, not seeding", store.project_path)
        return False

    store.set_project_data(seed_patterns())
    store.save_project()
    logger.debug("Seeded %d patterns into %s", len(_SEED_CASCADES), store.project_path)
    return True
