"""Host clock readings and the placeholder draw seed."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from .amounts import wrapping_add, wrapping_mul

SLOT_DURATION_MS = 400
SLOTS_PER_EPOCH = 432_000


@dataclass(frozen=True)
class ClockReading:
    """One reading of the host clock.

    Attributes
    ----------
    slot : int
        Monotonic slot counter.
    unix_timestamp : int
        Wall-clock time in whole seconds.
    epoch : int
        Host epoch counter (unrelated to the three epochs of a round).
    """

    slot: int
    unix_timestamp: int
    epoch: int

    @property
    def now_ms(self) -> int:
        return self.unix_timestamp * 1000

    @classmethod
    def at(
        cls,
        unix_timestamp: int,
        *,
        slot: Optional[int] = None,
        epoch: Optional[int] = None,
    ) -> "ClockReading":
        """Build a reading for ``unix_timestamp``, deriving slot and epoch if omitted."""

        if slot is None:
            slot = unix_timestamp * 1000 // SLOT_DURATION_MS
        if epoch is None:
            epoch = slot // SLOTS_PER_EPOCH
        return cls(slot=slot, unix_timestamp=unix_timestamp, epoch=epoch)


class SystemClock:
    """Clock backed by the local wall time."""

    def now(self) -> ClockReading:
        return ClockReading.at(int(time.time()))


SeedSource = Callable[[ClockReading], int]
"""Callable producing the 64-bit draw seed for a clock reading."""


def derive_clock_seed(reading: ClockReading) -> int:
    """Combine slot, timestamp and epoch into a 64-bit seed.

    This is publicly predictable and only a placeholder. Pass a different
    :data:`SeedSource` to the draw operations when fairness matters.
    """

    return wrapping_add(wrapping_mul(reading.slot, reading.unix_timestamp), reading.epoch)


__all__ = [
    "ClockReading",
    "SLOTS_PER_EPOCH",
    "SLOT_DURATION_MS",
    "SeedSource",
    "SystemClock",
    "derive_clock_seed",
]
