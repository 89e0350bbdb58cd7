"""Conversion guard: one checkout at a time per cart owner.

Relational providers catch a second conversion of the same cart at commit
(unique ``cart_id``, row versions). The in-memory provider commits whole
snapshots, last writer wins, so there the processor serializes conversions
for one owner instead. The loser of a race then sees the cart already
converted and is rejected rather than overwriting the winner.
"""

import threading
from contextlib import contextmanager


class ConversionGuard:
    """Keyed mutexes; a key's lock lives only while someone holds or waits on it."""

    def __init__(self):
        self._registry = threading.Lock()
        self._locks = {}  # key -> [lock, holders and waiters]

    @contextmanager
    def hold(self, key):
        with self._registry:
            entry = self._locks.setdefault(key, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._registry:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._locks[key]

    def __len__(self):
        with self._registry:
            return len(self._locks)


conversion_guard = ConversionGuard()
