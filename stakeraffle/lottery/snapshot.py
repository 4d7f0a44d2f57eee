"""Per-epoch balance snapshots."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable

from ..errors import InvalidEpochError
from ..settings import EPOCHS_PER_ROUND

if TYPE_CHECKING:
    from ..models.participant import Participant


def epoch_index(epoch_in_round: int) -> int:
    """Map round epoch 1..3 to snapshot slot 0..2."""

    if not 1 <= epoch_in_round <= EPOCHS_PER_ROUND:
        raise InvalidEpochError(f"Epoch {epoch_in_round} has no snapshot slot")
    return epoch_in_round - 1


def snapshot_participants(participants: Iterable["Participant"], index: int) -> int:
    """Record the current balance of each participant in slot ``index``.

    Participants that already hold a snapshot for the slot are left alone.
    Returns the number of snapshots written.
    """

    written = 0
    for participant in participants:
        if participant.record_snapshot(index):
            written += 1
    return written


__all__ = ["epoch_index", "snapshot_participants"]
