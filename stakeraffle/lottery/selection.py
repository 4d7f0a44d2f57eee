"""Winner selection: map a seed onto the ticket ranges of a round."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from ..errors import InvalidAmountError, NoTicketsSoldError
from .amounts import U64_MASK


class WinnerSlot:
    """Either :data:`UNDRAWN` or a :class:`Drawn` identity."""

    @property
    def identity(self) -> Optional[str]:
        return None

    @property
    def is_drawn(self) -> bool:
        return False


@dataclass(frozen=True)
class Undrawn(WinnerSlot):
    """No winner has been drawn yet."""

    def __repr__(self) -> str:
        return "UNDRAWN"


@dataclass(frozen=True)
class Drawn(WinnerSlot):
    """A winner has been drawn; ``owner`` is never empty."""

    owner: str

    def __post_init__(self) -> None:
        if not self.owner:
            raise ValueError("A drawn winner must have an identity")

    @property
    def identity(self) -> Optional[str]:
        return self.owner

    @property
    def is_drawn(self) -> bool:
        return True


UNDRAWN = Undrawn()


@dataclass(frozen=True)
class TicketHolder:
    """A contiguous block of tickets owned by one participant in one round."""

    owner: str
    round_id: int
    ticket_start: int
    ticket_end: int

    def owns(self, ticket: int) -> bool:
        return self.ticket_start <= ticket <= self.ticket_end


@dataclass(frozen=True)
class Selection:
    seed: int
    winning_ticket: int
    winner: WinnerSlot


def draw_winning_ticket(seed: int, total_tickets_sold: int) -> int:
    """Reduce ``seed`` onto ``[0, total_tickets_sold)``."""

    if total_tickets_sold <= 0:
        raise NoTicketsSoldError()
    if seed < 0 or seed > U64_MASK:
        raise InvalidAmountError(f"Seed must be an unsigned 64-bit integer, got {seed}")
    return seed % total_tickets_sold


def find_ticket_owner(
    ticket: int, round_id: int, holders: Iterable[TicketHolder]
) -> WinnerSlot:
    """Return the first holder of ``round_id`` whose block contains ``ticket``.

    Blocks tagged with another round are ignored.
    """

    for holder in holders:
        if holder.round_id != round_id:
            continue
        if holder.owns(ticket):
            return Drawn(holder.owner)
    return UNDRAWN


def select_winner(
    seed: int,
    total_tickets_sold: int,
    round_id: int,
    holders: Iterable[TicketHolder],
) -> Selection:
    """Draw the winning ticket and resolve its owner.

    The result is fully determined by ``seed`` and the holder blocks; an
    unowned ticket yields :data:`UNDRAWN` and callers decide how to react.
    """

    winning_ticket = draw_winning_ticket(seed, total_tickets_sold)
    winner = find_ticket_owner(winning_ticket, round_id, holders)
    return Selection(seed=seed, winning_ticket=winning_ticket, winner=winner)


__all__ = [
    "Drawn",
    "Selection",
    "TicketHolder",
    "UNDRAWN",
    "Undrawn",
    "WinnerSlot",
    "draw_winning_ticket",
    "find_ticket_owner",
    "select_winner",
]
