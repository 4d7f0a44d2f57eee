"""Time-driven round lifecycle.

One deterministic step, shared by deposit processing and the permissionless
crank, advances the epoch counter from elapsed wall-clock time and finalizes
the round once the third epoch has run out.

States: epoch 1 (open) -> epoch 2 (open) -> epoch 3 (deposits closed) -> complete.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Iterable, Optional

from ..settings import EPOCHS_PER_ROUND
from .clock import ClockReading, SeedSource, derive_clock_seed
from .selection import UNDRAWN, TicketHolder, WinnerSlot, select_winner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RoundState:
    """Immutable copy of the lifecycle fields of a round."""

    round_id: int
    epoch_in_round: int
    start_time_ms: int
    end_time_ms: int = 0
    total_tickets_sold: int = 0
    total_prize: int = 0
    winner: WinnerSlot = UNDRAWN
    winning_ticket: int = 0
    is_complete: bool = False


@dataclass(frozen=True)
class FinalizationEvent:
    """Emitted when a step completes a round."""

    round_id: int
    winner: str
    winning_ticket: int
    prize_amount: int
    end_time_ms: int
    seed: int


@dataclass(frozen=True)
class LifecycleStep:
    """Outcome of :func:`advance_round`.

    Attributes
    ----------
    state : RoundState
        Round state after the step.
    finalization : Optional[FinalizationEvent]
        Present only when this step completed the round.
    previous_epoch : int
        Epoch before the step.
    unowned_ticket : Optional[int]
        Ticket drawn while finalizing that no holder owns. The round then stays
        open in epoch 3.
    """

    state: RoundState
    finalization: Optional[FinalizationEvent] = None
    previous_epoch: int = 0
    unowned_ticket: Optional[int] = None

    @property
    def epoch_advanced(self) -> bool:
        return self.state.epoch_in_round > self.previous_epoch


def target_epoch(start_time_ms: int, now_ms: int, epoch_duration_ms: int) -> int:
    """Epoch the round should be in at ``now_ms``, capped at 3."""

    elapsed_ms = max(now_ms - start_time_ms, 0)
    return min(elapsed_ms // epoch_duration_ms + 1, EPOCHS_PER_ROUND)


def round_end_ms(start_time_ms: int, epoch_duration_ms: int) -> int:
    return start_time_ms + EPOCHS_PER_ROUND * epoch_duration_ms


def finalization_due(state: RoundState, now_ms: int, epoch_duration_ms: int) -> bool:
    return (
        not state.is_complete
        and state.epoch_in_round >= EPOCHS_PER_ROUND
        and now_ms >= round_end_ms(state.start_time_ms, epoch_duration_ms)
        and state.total_tickets_sold > 0
    )


def advance_round(
    state: RoundState,
    clock: ClockReading,
    holders: Iterable[TicketHolder],
    *,
    epoch_duration_ms: int,
    prize_amount: int,
    seed_source: SeedSource = derive_clock_seed,
) -> LifecycleStep:
    """Advance ``state`` to ``clock`` and finalize it when due.

    Parameters
    ----------
    state : RoundState
        Current round state. A complete round is returned unchanged.
    clock : ClockReading
        Host clock reading; ``clock.now_ms`` drives epoch progression.
    holders : Iterable[TicketHolder]
        Ticket blocks considered when drawing the winner.
    epoch_duration_ms : int
        Length of one epoch.
    prize_amount : int
        Prize recorded on the round if it is finalized.
    seed_source : SeedSource, default: derive_clock_seed
        Produces the draw seed from ``clock``.

    Returns
    -------
    LifecycleStep
        New state plus the finalization event, if any.

    Notes
    -----
    If the drawn ticket has no owner the round is not completed; the step
    reports the ticket in ``unowned_ticket`` and an administrator has to
    intervene. The epoch counter never moves backwards.
    """

    previous_epoch = state.epoch_in_round
    if state.is_complete:
        return LifecycleStep(state=state, previous_epoch=previous_epoch)

    now_ms = clock.now_ms
    target = target_epoch(state.start_time_ms, now_ms, epoch_duration_ms)
    if target > state.epoch_in_round:
        logger.info(
            f"Round #{state.round_id}: advancing epoch {state.epoch_in_round} -> {target}"
        )
        state = replace(state, epoch_in_round=target)

    if not finalization_due(state, now_ms, epoch_duration_ms):
        return LifecycleStep(state=state, previous_epoch=previous_epoch)

    seed = seed_source(clock)
    selection = select_winner(seed, state.total_tickets_sold, state.round_id, holders)
    if not selection.winner.is_drawn:
        logger.warning(
            f"Round #{state.round_id}: ticket #{selection.winning_ticket} has no owner "
            "among the supplied participants; round left open"
        )
        return LifecycleStep(
            state=state,
            previous_epoch=previous_epoch,
            unowned_ticket=selection.winning_ticket,
        )

    state = replace(
        state,
        winner=selection.winner,
        winning_ticket=selection.winning_ticket,
        total_prize=prize_amount,
        end_time_ms=now_ms,
        is_complete=True,
    )
    event = FinalizationEvent(
        round_id=state.round_id,
        winner=selection.winner.identity or "",
        winning_ticket=selection.winning_ticket,
        prize_amount=prize_amount,
        end_time_ms=now_ms,
        seed=seed,
    )
    logger.info(
        f"Round #{state.round_id} complete: winner={event.winner} "
        f"ticket=#{event.winning_ticket} prize={event.prize_amount}"
    )
    return LifecycleStep(state=state, finalization=event, previous_epoch=previous_epoch)


__all__ = [
    "FinalizationEvent",
    "LifecycleStep",
    "RoundState",
    "advance_round",
    "finalization_due",
    "round_end_ms",
    "target_epoch",
]
