"""Process-wide unique, monotonically increasing CPER record identifiers.

Record IDs index ERST storage, where records from several boots can co-exist,
so they must stay unique across process restarts too. The counter is seeded
from wall-clock seconds shifted into the upper 32 bits: a later start always
begins above any ID an earlier start could have handed out (unless more than
2**32 IDs were issued within one second).

Seeding is lazy and lock-free. Two callers racing on the very first call may
both compute a seed; ``dict.setdefault`` installs exactly one counter and the
loser's seed is discarded. After that every ID comes from ``next()`` on a
single ``itertools.count``, which is an atomic increment-and-return, so IDs
are never duplicated and follow call order. No lock is taken, so the call is
safe from contexts that must not block.
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable

_SEED_SHIFT = 32
_U64_MASK = (1 << 64) - 1


class RecordIdGenerator:
    """Hands out strictly increasing 64-bit record IDs."""

    def __init__(self, clock: Callable[[], float] = time.time) -> None:
        self._clock = clock
        self._state: dict[str, itertools.count] = {}

    def _counter(self) -> itertools.count:
        counter = self._state.get("seq")
        if counter is None:
            seed = (int(self._clock()) << _SEED_SHIFT) & _U64_MASK
            # first value returned is seed + 1
            counter = self._state.setdefault("seq", itertools.count(seed + 1))
        return counter

    def next_id(self) -> int:
        """Return the next record ID."""
        return next(self._counter())


_default_generator = RecordIdGenerator()


def next_record_id() -> int:
    """Return the next record ID from the process-wide generator."""
    return _default_generator.next_id()
