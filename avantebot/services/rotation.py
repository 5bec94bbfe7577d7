"""Per-query rotation of image results.

Every query keeps the set of URLs already shown for it. A selection picks a
random URL that is not in that set; once the whole pool has been shown the
set is cleared and a new cycle starts.

The shown sets are shared by all worker threads. Each query has its own lock
so that concurrent selections for the same query never work off a stale
remainder, while unrelated queries do not wait on each other.
"""

from __future__ import annotations

import random
import threading
from typing import Dict, Iterable, List, Optional, Set, Tuple

__all__ = ["RotationCache", "image_rotation"]


class RotationCache:
    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._shown: Dict[str, Set[str]] = {}
        self._locks: Dict[str, threading.Lock] = {}
        # only guards creation of per-query locks
        self._locks_guard = threading.Lock()

    def _lock_for(self, query: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(query)
            if lock is None:
                lock = threading.Lock()
                self._locks[query] = lock
            return lock

    def select(self, query: str, pool: Iterable[str]) -> Tuple[str, bool]:
        """Pick an unseen URL from *pool* and record it as shown.

        Returns ``(url, was_reset)``. ``was_reset`` is True when every URL in
        the pool had already been shown and a new cycle was started.
        """
        candidates: List[str] = list(dict.fromkeys(pool))
        if not candidates:
            raise ValueError("cannot select from an empty pool")

        with self._lock_for(query):
            shown = self._shown.setdefault(query, set())
            # the pool is fetched fresh each time and may have shrunk
            shown.intersection_update(candidates)

            remaining = [url for url in candidates if url not in shown]
            was_reset = False
            if not remaining:
                shown.clear()
                remaining = candidates
                was_reset = True

            choice = self._rng.choice(remaining)
            shown.add(choice)
            return choice, was_reset

    def shown(self, query: str) -> Set[str]:
        with self._lock_for(query):
            return set(self._shown.get(query, ()))

    def clear(self) -> None:
        with self._locks_guard:
            self._shown.clear()
            self._locks.clear()


image_rotation = RotationCache()
