"""Ticket pricing helpers.

Tickets are numbered from zero inside a round; display helpers shift them to
one-based numbers.
"""

from __future__ import annotations

from ..errors import InvalidAmountError, InvalidTicketAmountError


def is_valid_ticket_amount(amount: int, ticket_price: int) -> bool:
    """Return ``True`` when ``amount`` buys a whole, positive number of tickets."""

    return amount > 0 and amount % ticket_price == 0


def tickets_for_amount(amount: int, ticket_price: int) -> int:
    """Number of tickets bought by ``amount``.

    Raises
    ------
    InvalidAmountError
        If ``amount`` is not positive.
    InvalidTicketAmountError
        If ``amount`` is not an exact multiple of ``ticket_price``.
    """

    if amount <= 0:
        raise InvalidAmountError(f"Deposit amount must be positive, got {amount}")
    if amount % ticket_price != 0:
        raise InvalidTicketAmountError(
            f"Amount {amount} is not a multiple of the ticket price {ticket_price}"
        )
    return amount // ticket_price


def amount_for_tickets(tickets: int, ticket_price: int) -> int:
    return tickets * ticket_price


def ticket_count(ticket_start: int, ticket_end: int) -> int:
    """Size of the inclusive range ``[ticket_start, ticket_end]``."""

    if ticket_end < ticket_start:
        return 0
    return ticket_end - ticket_start + 1


def format_ticket_range(ticket_start: int, ticket_end: int) -> str:
    """Format a zero-based inclusive range for display, e.g. ``#1`` or ``#1-#5``."""

    display_start = ticket_start + 1
    display_end = ticket_end + 1
    if display_start == display_end:
        return f"#{display_start}"
    return f"#{display_start}-#{display_end}"


__all__ = [
    "amount_for_tickets",
    "format_ticket_range",
    "is_valid_ticket_amount",
    "ticket_count",
    "tickets_for_amount",
]
