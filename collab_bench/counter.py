# =============================================================================
# collab-bench -- Success Counter
# =============================================================================

from __future__ import annotations

import threading


class SuccessCounter:
    """Shared tally of clients that completed the whole script.

    One instance is handed to every client of a run. Each client index
    is counted at most once; a second ``record_success`` for the same
    index is ignored and returns False.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._indices: set[int] = set()

    def record_success(self, index: int) -> bool:
        with self._lock:
            if index in self._indices:
                return False
            self._indices.add(index)
            return True

    @property
    def value(self) -> int:
        with self._lock:
            return len(self._indices)
