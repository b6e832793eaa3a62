"""
One lock per competition.

Bracket reads and writes for a competition happen inside hold(); different
competitions never block each other. Locks are kept for the life of the
process, so a request still waiting on a deleted competition and one for
a new competition that reuses its id share the same lock.
"""

import threading
from contextlib import contextmanager
from typing import Dict, Iterator


class CompetitionLocks:
    def __init__(self):
        self._guard = threading.Lock()
        self._locks: Dict[int, threading.Lock] = {}

    def lock_for(self, competition_id: int) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(competition_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[competition_id] = lock
            return lock

    @contextmanager
    def hold(self, competition_id: int) -> Iterator[None]:
        with self.lock_for(competition_id):
            yield
