"""Session tracker: turns per-session code snapshots into recorded cascades."""

from __future__ import annotations

import threading
from collections.abc import Sequence

from .store import FilePatternStore


class Recorder:
    """Records (previous, current) error code pairs per session.

    Session state is written through to the store's session map on every
    observation, so consecutive CLI invocations see each other's codes once
    the store is saved. One Recorder is created per store and passed to
    callers; it holds no module-level state.
    """

    def __init__(self, store: FilePatternStore) -> None:
        self._store = store
        self._lock = threading.Lock()

    def observe(self, session_id: str, codes: Sequence[str]) -> int:
        """Observe the current blocking codes for a session.

        Empty codes mean validation passed: the session history is cleared.
        Otherwise every (previous, current) pair with differing codes is
        recorded, then codes become the session's new previous snapshot.

        Returns:
            Number of sequences recorded.
        """
        current = list(codes)
        with self._lock:
            if not current:
                self._store.clear_session_codes(session_id)
                return 0

            recorded = 0
            for prev_code in self._store.get_session_codes(session_id):
                for cur_code in current:
                    if prev_code == cur_code:
                        continue
                    self._store.record_sequence(prev_code, cur_code)
                    recorded += 1

            self._store.set_session_codes(session_id, current)
            return recorded

    def clear_session(self, session_id: str) -> None:
        with self._lock:
            self._store.clear_session_codes(session_id)
