"""Exceptions raised by raffle operations.

Every failure aborts the whole operation; the records it touched keep their
previous values.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .lottery.lifecycle import FinalizationEvent


class RaffleError(Exception):
    """Base class for all protocol errors."""

    code = "RaffleError"
    default_message = "Raffle operation failed"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.default_message)


class InvalidAmountError(RaffleError, ValueError):
    code = "InvalidAmount"
    default_message = "Invalid amount"


class InvalidTicketAmountError(RaffleError, ValueError):
    code = "InvalidTicketAmount"
    default_message = "Amount must be an exact multiple of the ticket price"


class ArithmeticOverflowError(RaffleError, ValueError):
    code = "ArithmeticOverflow"
    default_message = "Arithmetic overflow"


class ArithmeticUnderflowError(RaffleError, ValueError):
    code = "ArithmeticUnderflow"
    default_message = "Arithmetic underflow"


class InvalidRecordError(RaffleError):
    code = "MissingOrInvalidAuxiliaryRecord"
    default_message = "A required record is missing or does not belong to this protocol"


class DuplicateRecordError(RaffleError):
    code = "DuplicateRecord"
    default_message = "Record already exists"


class UnauthorizedError(RaffleError):
    code = "Unauthorized"
    default_message = "Caller is not the protocol admin"


class InvalidEpochError(RaffleError):
    code = "InvalidEpoch"
    default_message = "Invalid epoch state"


class InsufficientFundsError(RaffleError):
    code = "InsufficientFunds"
    default_message = "Insufficient funds"


class DepositsClosedError(RaffleError):
    code = "DepositsClosed"
    default_message = "Deposits closed: epoch 3 has started, waiting for round to complete"


class RoundCompleteError(RaffleError):
    """Deposit refused because the round is (or just became) complete.

    Unlike other errors, the lifecycle step computed before the refusal has
    already been written when this is raised.
    """

    code = "RoundComplete"
    default_message = "Round is complete, deposits blocked"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        finalization: Optional["FinalizationEvent"] = None,
    ) -> None:
        super().__init__(message)
        self.finalization = finalization


class RoundNotCompleteError(RaffleError):
    code = "RoundNotComplete"
    default_message = "Round not complete yet"


class NoTicketsSoldError(RaffleError):
    code = "NoTicketsSold"
    default_message = "No tickets sold in this round"


class WinnerNotFoundError(RaffleError):
    code = "WinnerNotFound"
    default_message = "No participant owns the drawn ticket"


class AlreadyClaimedError(RaffleError):
    code = "AlreadyClaimed"
    default_message = "Prize already claimed"


class NotWinnerError(RaffleError):
    code = "NotWinner"
    default_message = "Not the winner of this round"


class WinnerMustClaimError(RaffleError):
    code = "WinnerMustClaim"
    default_message = "Winner must use claim_prize, not process_withdrawal"


class NothingToWithdrawError(RaffleError):
    code = "NothingToWithdraw"
    default_message = "Nothing to withdraw"


class WrongRoundError(RaffleError):
    code = "WrongRound"
    default_message = "Participant did not take part in this round"


class UnclaimedLiabilityError(RaffleError):
    code = "UnclaimedLiabilityExists"
    default_message = "Cannot close protocol: unclaimed prizes exist"


__all__ = [
    "AlreadyClaimedError",
    "ArithmeticOverflowError",
    "ArithmeticUnderflowError",
    "DepositsClosedError",
    "DuplicateRecordError",
    "InsufficientFundsError",
    "InvalidAmountError",
    "InvalidEpochError",
    "InvalidRecordError",
    "InvalidTicketAmountError",
    "NoTicketsSoldError",
    "NotWinnerError",
    "NothingToWithdrawError",
    "RaffleError",
    "RoundCompleteError",
    "RoundNotCompleteError",
    "UnauthorizedError",
    "UnclaimedLiabilityError",
    "WinnerMustClaimError",
    "WinnerNotFoundError",
    "WrongRoundError",
]
