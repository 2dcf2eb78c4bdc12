"""One validation round: advise on the blocking codes, then learn from them."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from pathlib import Path

from ..config import PatternsConfig
from ..exceptions import PatternStoreError
from .advisor import Advisor
from .recorder import Recorder
from .seeds import ensure_seed_data
from .store import FilePatternStore

logger = logging.getLogger(__name__)


def open_store(config: PatternsConfig, project_dir: str | Path) -> FilePatternStore:
    """Create and load a store, seeding the project tier on first use."""
    store = FilePatternStore(config, project_dir)
    store.load()

    if config.use_seed_data:
        try:
            ensure_seed_data(store)
        except PatternStoreError as e:
            logger.warning("Failed to write seed patterns: %s", e)

    return store


def run_pattern_tracking(
    config: PatternsConfig,
    codes: Sequence[str],
    session_id: str,
    project_dir: str | Path,
) -> list[str]:
    """Run the advisor and recorder for one validation round.

    Warnings are computed before the round is recorded, so they reflect what
    was known going in. Recording, eviction and saving only happen when a
    session id is available. A failed save is logged; the warnings are still
    returned.

    Returns:
        Pattern warnings, or an empty list when tracking is disabled.
    """
    if not config.enabled:
        return []

    store = open_store(config, project_dir)
    warnings = Advisor.from_config(store, config).advise(codes)

    if session_id:
        recorded = Recorder(store).observe(session_id, codes)
        removed = store.cleanup(config.max_age)
        removed_sessions = store.cleanup_sessions(config.session_max_age)
        logger.debug(
            "Session %s: recorded %d sequences, evicted %d patterns and %d sessions",
            session_id,
            recorded,
            removed,
            removed_sessions,
        )
        try:
            store.save()
        except PatternStoreError as e:
            logger.warning("Failed to save pattern store: %s", e)

    return warnings
