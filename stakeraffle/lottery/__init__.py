"""Pure round logic: clock, ticket arithmetic, winner selection, lifecycle."""

from .clock import ClockReading, SeedSource, SystemClock, derive_clock_seed
from .lifecycle import (
    FinalizationEvent,
    LifecycleStep,
    RoundState,
    advance_round,
    target_epoch,
)
from .selection import (
    UNDRAWN,
    Drawn,
    Selection,
    TicketHolder,
    Undrawn,
    WinnerSlot,
    select_winner,
)
from .tickets import format_ticket_range, ticket_count, tickets_for_amount

__all__ = [
    "ClockReading",
    "Drawn",
    "FinalizationEvent",
    "LifecycleStep",
    "RoundState",
    "SeedSource",
    "Selection",
    "SystemClock",
    "TicketHolder",
    "UNDRAWN",
    "Undrawn",
    "WinnerSlot",
    "advance_round",
    "derive_clock_seed",
    "format_ticket_range",
    "select_winner",
    "target_epoch",
    "ticket_count",
    "tickets_for_amount",
]
