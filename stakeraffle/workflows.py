"""Protocol operations.

Every function takes the caller's active :class:`~sqlalchemy.orm.Session` and
the records it works on, runs inside a SAVEPOINT and either applies all of its
changes or none of them. Callers own the surrounding transaction and commit it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .errors import (
    AlreadyClaimedError,
    DepositsClosedError,
    DuplicateRecordError,
    InvalidAmountError,
    InvalidEpochError,
    InvalidRecordError,
    NoTicketsSoldError,
    NothingToWithdrawError,
    NotWinnerError,
    RoundCompleteError,
    RoundNotCompleteError,
    UnclaimedLiabilityError,
    WinnerMustClaimError,
    WinnerNotFoundError,
    WrongRoundError,
)
from .lottery.amounts import U64_MASK, checked_add, checked_sub, saturating_sub
from .lottery.clock import ClockReading, SeedSource, SystemClock, derive_clock_seed
from .lottery.lifecycle import LifecycleStep, advance_round
from .lottery.selection import Selection, TicketHolder, select_winner
from .lottery.snapshot import epoch_index, snapshot_participants
from .lottery.tickets import format_ticket_range, tickets_for_amount
from .models import ClaimRecord, LedgerAccount, Participant, ProtocolRegistry, Round
from .models.ledger import transfer
from .settings import EPOCHS_PER_ROUND, RaffleSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DepositReceipt:
    """Tickets issued by a successful deposit."""

    owner: str
    round_id: int
    amount: int
    tickets: int
    ticket_start: int
    ticket_end: int


def _now(clock: Optional[ClockReading]) -> ClockReading:
    return clock if clock is not None else SystemClock().now()


def _require_round(registry: ProtocolRegistry, round_: Optional[Round]) -> Round:
    if round_ is None:
        raise InvalidRecordError("A round record must be supplied")
    if round_.registry_id != registry.id:
        raise InvalidRecordError(
            f"Round #{round_.round_id} does not belong to protocol '{registry.label}'"
        )
    return round_


def _load_round(session: Session, registry: ProtocolRegistry, round_id: int) -> Round:
    round_ = Round.get(session, registry, round_id)
    if round_ is None:
        raise InvalidRecordError(f"Round #{round_id} does not exist")
    return round_


def current_round(session: Session, registry: ProtocolRegistry) -> Optional[Round]:
    """Return the round that currently accepts deposits, if it was created."""

    return Round.get(session, registry, registry.current_round_id)


def resolve_candidates(
    session: Session,
    registry: ProtocolRegistry,
    candidates: Optional[Iterable[Any]],
    round_id: int,
) -> list[Participant]:
    """Turn an externally supplied candidate list into participant records.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    registry : ProtocolRegistry
        Protocol the participants must belong to.
    candidates : Optional[Iterable[Any]]
        Ordered mix of :class:`Participant` records and owner identities. When
        ``None``, the participants of ``round_id`` are loaded instead.
    round_id : int
        Round used for the default lookup.

    Returns
    -------
    list[Participant]
        Resolved participants in input order, without duplicates. Entries that
        are not participant records of ``registry`` are skipped.
    """

    if candidates is None:
        return Participant.for_round(session, registry, round_id)

    resolved: list[Participant] = []
    seen: set[str] = set()
    for candidate in candidates:
        participant: Optional[Participant] = None
        if isinstance(candidate, Participant):
            participant = candidate
        elif isinstance(candidate, str):
            participant = Participant.get_by_owner(session, registry, candidate)

        if participant is None or participant.registry_id != registry.id:
            logger.debug(f"Skipping candidate {candidate!r}: not a participant of '{registry.label}'")
            continue
        if participant.owner in seen:
            continue
        seen.add(participant.owner)
        resolved.append(participant)
    return resolved


def _holders(participants: Iterable[Participant], round_id: int) -> list[TicketHolder]:
    holders: list[TicketHolder] = []
    for participant in participants:
        holders.extend(participant.ticket_holders(round_id))
    return holders


def _run_lifecycle(
    session: Session,
    registry: ProtocolRegistry,
    round_: Round,
    candidates: Optional[Iterable[Any]],
    clock: ClockReading,
    seed_source: SeedSource,
) -> LifecycleStep:
    """Apply the shared advance/finalize step to ``round_``."""

    if round_.is_complete:
        return LifecycleStep(state=round_.to_state(), previous_epoch=round_.epoch_in_round)
    participants = resolve_candidates(session, registry, candidates, round_.round_id)
    step = advance_round(
        round_.to_state(),
        clock,
        _holders(participants, round_.round_id),
        epoch_duration_ms=registry.epoch_duration_ms,
        prize_amount=registry.prize_seed_total,
        seed_source=seed_source,
    )
    round_.apply_state(step.state)
    return step


# -------- protocol setup --------
def initialize(
    session: Session,
    admin: str,
    validator: str,
    *,
    settings: Optional[RaffleSettings] = None,
    label: str = "main",
) -> ProtocolRegistry:
    """Create the protocol registry and its escrow pool.

    The admin funds the pool's reserve floor, so the admin's ledger account must
    hold at least ``settings.reserve_floor``.

    Raises
    ------
    DuplicateRecordError
        If a registry named ``label`` already exists.
    InsufficientFundsError
        If the admin cannot pay the reserve floor.
    """

    settings = settings or RaffleSettings.from_env()
    try:
        with session.begin_nested():
            registry = ProtocolRegistry(
                label=label,
                admin_id=admin,
                validator_id=validator,
                ticket_price=settings.ticket_price,
                epoch_duration_ms=settings.epoch_duration_ms,
                reserve_floor=settings.reserve_floor,
            )
            session.add(registry)
            session.flush()
            LedgerAccount.get_or_create(session, registry.pool_address)
            if settings.reserve_floor > 0:
                transfer(
                    session,
                    admin,
                    registry.pool_address,
                    settings.reserve_floor,
                    memo="reserve",
                )
    except IntegrityError as exc:
        raise DuplicateRecordError(f"Protocol '{label}' is already initialized") from exc

    logger.info(f"Protocol '{label}' initialized: admin={admin} validator={validator}")
    return registry


def seed_prize(
    session: Session, registry: ProtocolRegistry, admin: str, amount: int
) -> ProtocolRegistry:
    """Move ``amount`` from the admin into the pool and add it to the prize seed."""

    registry.require_admin(admin)
    if amount <= 0:
        raise InvalidAmountError(f"Seed amount must be positive, got {amount}")
    new_total = checked_add(registry.prize_seed_total, amount)
    with session.begin_nested():
        transfer(session, admin, registry.pool_address, amount, memo="seed_prize")
        registry.prize_seed_total = new_total

    logger.info(f"Prize pool seeded with {amount} (total {new_total})")
    return registry


def init_round(
    session: Session,
    registry: ProtocolRegistry,
    round_id: int,
    start_time_ms: Optional[int] = None,
    *,
    clock: Optional[ClockReading] = None,
) -> Round:
    """Open round ``round_id`` in epoch 1 and make it the current round.

    ``start_time_ms`` defaults to the clock's current time.

    Raises
    ------
    DuplicateRecordError
        If the round already exists.
    """

    if round_id < 0:
        raise InvalidAmountError(f"Round id must not be negative, got {round_id}")
    if start_time_ms is None:
        start_time_ms = _now(clock).now_ms
    try:
        with session.begin_nested():
            round_ = Round(
                registry_id=registry.id, round_id=round_id, start_time_ms=start_time_ms
            )
            session.add(round_)
            session.flush()
            registry.current_round_id = round_id
    except IntegrityError as exc:
        raise DuplicateRecordError(f"Round #{round_id} already exists") from exc

    logger.info(f"Round #{round_id} opened at {start_time_ms}")
    return round_


# -------- deposits --------
def deposit(
    session: Session,
    registry: ProtocolRegistry,
    payer: str,
    amount: int,
    round_: Optional[Round],
    *,
    candidates: Optional[Iterable[Any]] = None,
    clock: Optional[ClockReading] = None,
    seed_source: SeedSource = derive_clock_seed,
) -> DepositReceipt:
    """Buy tickets in the current round.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    registry : ProtocolRegistry
        Protocol the deposit goes to.
    payer : str
        Identity paying ``amount`` from its ledger account.
    amount : int
        Positive multiple of ``registry.ticket_price``.
    round_ : Optional[Round]
        The current round of ``registry``. It must already exist.
    candidates : Optional[Iterable[Any]], default: None
        Participants considered if this deposit finalizes the round. Defaults
        to every participant of the round.
    clock : Optional[ClockReading], default: None
        Host clock reading; the system clock when omitted.
    seed_source : SeedSource, default: derive_clock_seed
        Draw seed provider used if the round is finalized.

    Returns
    -------
    DepositReceipt
        The tickets issued to ``payer``.

    Notes
    -----
    The lifecycle step runs first. If it leaves the round complete the deposit
    is refused with :class:`RoundCompleteError`, but the epoch advance and
    finalization it computed stay in ``session``. Every other failure leaves
    all records untouched.

    The outer transaction belongs to the caller. To persist a finalization,
    catch :class:`RoundCompleteError` and commit before re-raising or
    reporting it. A ``with Session.begin() as session:`` block that lets the
    error escape rolls the finalization back along with everything else.

    Raises
    ------
    InvalidAmountError, InvalidTicketAmountError
        If ``amount`` does not buy a whole number of tickets.
    InvalidRecordError
        If ``round_`` is missing or is not the current round.
    RoundCompleteError
        If the round is complete.
    DepositsClosedError
        If the round is in epoch 3.
    InsufficientFundsError
        If the payer cannot cover ``amount``.
    ArithmeticOverflowError
        If a running total would overflow.
    """

    num_tickets = tickets_for_amount(amount, registry.ticket_price)
    round_ = _require_round(registry, round_)
    if round_.round_id != registry.current_round_id:
        raise InvalidRecordError(
            f"Round #{round_.round_id} is not the current round #{registry.current_round_id}"
        )
    reading = _now(clock)

    rejection: Optional[RoundCompleteError] = None
    with session.begin_nested():
        step = _run_lifecycle(session, registry, round_, candidates, reading, seed_source)
        if round_.is_complete:
            rejection = RoundCompleteError(
                f"Round #{round_.round_id} is complete, deposits blocked. "
                f"Next round: #{round_.round_id + 1}",
                finalization=step.finalization,
            )
        else:
            if round_.epoch_in_round >= EPOCHS_PER_ROUND:
                raise DepositsClosedError()

            ticket_start = round_.total_tickets_sold
            new_total_tickets = checked_add(ticket_start, num_tickets)
            new_total_staked = checked_add(round_.total_staked, amount)

            participant = Participant.get_by_owner(session, registry, payer)
            if participant is None:
                participant = Participant(registry_id=registry.id, owner=payer)
                session.add(participant)

            transfer(session, payer, registry.pool_address, amount, memo="deposit")

            round_.total_tickets_sold = new_total_tickets
            round_.total_staked = new_total_staked
            participant.reset_for_round(round_.round_id)
            participant.issue_tickets(round_.round_id, ticket_start, num_tickets)
            participant.credit(amount)

    if rejection is not None:
        logger.info(f"Deposit from {payer} refused: {rejection}")
        raise rejection

    ticket_end = ticket_start + num_tickets - 1
    logger.info(
        f"Deposited {num_tickets} tickets ({amount}) for {payer} in round "
        f"#{round_.round_id}: tickets {format_ticket_range(ticket_start, ticket_end)}"
    )
    return DepositReceipt(
        owner=payer,
        round_id=round_.round_id,
        amount=amount,
        tickets=num_tickets,
        ticket_start=ticket_start,
        ticket_end=ticket_end,
    )


def request_withdrawal(
    session: Session, registry: ProtocolRegistry, owner: str, amount: int
) -> Participant:
    """Move ``amount`` of the live balance into the pending withdrawal.

    The snapshot history is forfeited. The participant's tickets remain in the
    draw for the current round.
    """

    if amount <= 0:
        raise InvalidAmountError(f"Withdrawal amount must be positive, got {amount}")
    participant = Participant.get_by_owner(session, registry, owner)
    if participant is None:
        raise InvalidRecordError(f"{owner} has no participant record")
    if participant.balance < amount:
        raise InvalidAmountError(
            f"Withdrawal of {amount} exceeds the balance of {participant.balance}"
        )
    new_pending = checked_add(participant.pending_withdrawal_amount, amount)
    with session.begin_nested():
        participant.snapshot_mask = 0
        participant.balance = checked_sub(participant.balance, amount)
        participant.pending_withdrawal_amount = new_pending
        participant.pending_withdrawal_round = registry.current_round_id

    logger.info(f"{owner} requested withdrawal of {amount} (pending {new_pending})")
    return participant


def take_snapshot_batch(
    session: Session,
    registry: ProtocolRegistry,
    round_: Optional[Round],
    candidates: Optional[Iterable[Any]] = None,
) -> int:
    """Snapshot the balances of ``candidates`` for the round's current epoch.

    Returns the number of participants snapshotted by this call; participants
    already snapshotted for the epoch, and candidates that are not participant
    records, are skipped.
    """

    round_ = _require_round(registry, round_)
    index = epoch_index(round_.epoch_in_round)
    participants = resolve_candidates(session, registry, candidates, round_.round_id)
    with session.begin_nested():
        written = snapshot_participants(participants, index)

    logger.info(
        f"Round #{round_.round_id}: epoch {round_.epoch_in_round} snapshot "
        f"recorded for {written} of {len(participants)} participants"
    )
    return written


# -------- admin controls --------
def advance_epoch(
    session: Session, registry: ProtocolRegistry, admin: str, round_: Optional[Round]
) -> Round:
    """Move ``round_`` to its next epoch regardless of the clock."""

    registry.require_admin(admin)
    round_ = _require_round(registry, round_)
    if round_.epoch_in_round >= EPOCHS_PER_ROUND:
        raise InvalidEpochError(f"Round #{round_.round_id} is already in epoch 3")
    with session.begin_nested():
        round_.epoch_in_round = round_.epoch_in_round + 1

    logger.info(f"Round #{round_.round_id}: epoch manually advanced to {round_.epoch_in_round}")
    return round_


def select_winner_local(
    session: Session,
    registry: ProtocolRegistry,
    admin: str,
    round_: Optional[Round],
    seed: int,
    candidates: Optional[Iterable[Any]] = None,
    *,
    clock: Optional[ClockReading] = None,
) -> Selection:
    """Draw the winner of ``round_`` from an admin supplied ``seed``.

    Unlike the automatic finalization, a drawn ticket that no candidate owns is
    an error here.

    Raises
    ------
    UnauthorizedError
        If ``admin`` is not the protocol admin.
    RoundCompleteError
        If the round already has a winner.
    NoTicketsSoldError
        If no tickets were sold.
    WinnerNotFoundError
        If no candidate owns the drawn ticket.
    """

    registry.require_admin(admin)
    round_ = _require_round(registry, round_)
    if round_.is_complete:
        raise RoundCompleteError(f"Round #{round_.round_id} already has a winner")
    if round_.total_tickets_sold == 0:
        raise NoTicketsSoldError()
    if seed < 0 or seed > U64_MASK:
        raise InvalidAmountError(f"Seed must be an unsigned 64-bit integer, got {seed}")

    participants = resolve_candidates(session, registry, candidates, round_.round_id)
    selection = select_winner(
        seed,
        round_.total_tickets_sold,
        round_.round_id,
        _holders(participants, round_.round_id),
    )
    if not selection.winner.is_drawn:
        raise WinnerNotFoundError(
            f"No participant owns ticket #{selection.winning_ticket} of round #{round_.round_id}"
        )

    reading = _now(clock)
    with session.begin_nested():
        round_.winner = selection.winner.identity
        round_.winning_ticket = selection.winning_ticket
        round_.total_prize = registry.prize_seed_total
        round_.end_time_ms = reading.now_ms
        round_.is_complete = True

    logger.info(
        f"Round #{round_.round_id}: manual draw of ticket #{selection.winning_ticket} "
        f"of {round_.total_tickets_sold}, winner={selection.winner.identity}"
    )
    return selection


# -------- settlement --------
def create_claim_ticket(
    session: Session,
    registry: ProtocolRegistry,
    admin: str,
    round_id: int,
    prize_amount: int,
    stake_amount: int,
) -> ClaimRecord:
    """Issue the claim record of a round's winner with admin chosen amounts.

    Raises
    ------
    RoundNotCompleteError
        If the round is still open.
    NoTicketsSoldError
        If the round has no winner.
    DuplicateRecordError
        If the claim record was already issued.
    """

    registry.require_admin(admin)
    if prize_amount < 0 or stake_amount < 0:
        raise InvalidAmountError("Claim amounts must not be negative")
    round_ = _load_round(session, registry, round_id)
    if not round_.is_complete:
        raise RoundNotCompleteError()
    if not round_.draw.is_drawn:
        raise NoTicketsSoldError(f"Round #{round_id} has no winner")
    claim = _issue_claim_record(
        session, registry, round_, round_.winner or "", prize_amount, stake_amount
    )
    logger.info(
        f"Claim record issued by admin for round #{round_id}: winner={claim.winner} "
        f"prize={prize_amount} stake={stake_amount}"
    )
    return claim


def create_claim_ticket_winner(
    session: Session, registry: ProtocolRegistry, caller: str, round_id: int
) -> ClaimRecord:
    """Let the winner issue their own claim record.

    The stake is the winner's balance and the prize is the rest of the round's
    stake (``total_staked - stake``).

    Raises
    ------
    NotWinnerError
        If ``caller`` is not the recorded winner.
    WrongRoundError
        If the winner's participant record has moved on to another round.
    DuplicateRecordError
        If the claim record was already issued.
    """

    round_ = _load_round(session, registry, round_id)
    if not round_.is_complete:
        raise RoundNotCompleteError()
    if not round_.draw.is_drawn:
        raise NoTicketsSoldError(f"Round #{round_id} has no winner")
    if round_.winner != caller:
        raise NotWinnerError()
    participant = Participant.get_by_owner(session, registry, caller)
    if participant is None:
        raise InvalidRecordError(f"{caller} has no participant record")
    if participant.round_joined != round_id:
        raise WrongRoundError(
            f"{caller}'s balance belongs to round #{participant.round_joined}"
        )

    stake_amount = participant.balance
    prize_amount = saturating_sub(round_.total_staked, stake_amount)
    claim = _issue_claim_record(session, registry, round_, caller, prize_amount, stake_amount)
    logger.info(
        f"Claim record issued by winner for round #{round_id}: "
        f"prize={prize_amount} stake={stake_amount}"
    )
    return claim


def _issue_claim_record(
    session: Session,
    registry: ProtocolRegistry,
    round_: Round,
    winner: str,
    prize_amount: int,
    stake_amount: int,
) -> ClaimRecord:
    new_liability = checked_add(registry.unclaimed_liability, prize_amount)
    try:
        with session.begin_nested():
            claim = ClaimRecord(
                registry_id=registry.id,
                round_id=round_.round_id,
                winner=winner,
                prize_amount=prize_amount,
                stake_amount=stake_amount,
            )
            session.add(claim)
            session.flush()
            registry.unclaimed_liability = new_liability
    except IntegrityError as exc:
        raise DuplicateRecordError(
            f"Claim record for round #{round_.round_id} and {winner} already exists"
        ) from exc
    return claim


def claim_prize(
    session: Session, registry: ProtocolRegistry, caller: str, round_id: int
) -> ClaimRecord:
    """Pay the winner the stake and prize fixed on their claim record.

    Raises
    ------
    RoundNotCompleteError
        If the round is still open.
    NotWinnerError
        If no claim record exists for ``caller``.
    AlreadyClaimedError
        If the claim record has been paid.
    InsufficientFundsError
        If the pool cannot pay without dipping below its reserve floor.
    """

    round_ = _load_round(session, registry, round_id)
    if not round_.is_complete:
        raise RoundNotCompleteError()
    claim = ClaimRecord.get(session, registry, round_id, caller)
    if claim is None:
        raise NotWinnerError(f"{caller} holds no claim record for round #{round_id}")
    if claim.claimed:
        raise AlreadyClaimedError()

    payout = claim.payout
    new_withdrawn = checked_add(round_.total_withdrawn, claim.stake_amount)
    with session.begin_nested():
        transfer(
            session,
            registry.pool_address,
            caller,
            payout,
            memo="claim_prize",
            keep=registry.reserve_floor,
        )
        claim.mark_claimed()
        registry.unclaimed_liability = saturating_sub(
            registry.unclaimed_liability, claim.prize_amount
        )
        round_.prize_claimed = True
        round_.total_withdrawn = new_withdrawn
        participant = Participant.get_by_owner(session, registry, caller)
        if participant is not None and participant.round_joined == round_id:
            participant.clear_tickets()

    logger.info(
        f"Prize claimed for round #{round_id} by {caller}: stake={claim.stake_amount} "
        f"prize={claim.prize_amount} total={payout}"
    )
    return claim


def process_withdrawal(
    session: Session, registry: ProtocolRegistry, caller: str, round_id: int
) -> int:
    """Return a non-winner's stake (pending withdrawal plus live balance).

    Returns the amount paid.

    Raises
    ------
    RoundNotCompleteError
        If the round is still open.
    WinnerMustClaimError
        If ``caller`` won the round.
    WrongRoundError
        If the caller's deposits belong to another round.
    NothingToWithdrawError
        If nothing is owed.
    InsufficientFundsError
        If the pool cannot pay without dipping below its reserve floor.
    """

    round_ = _load_round(session, registry, round_id)
    if not round_.is_complete:
        raise RoundNotCompleteError()
    if round_.winner is not None and round_.winner == caller:
        raise WinnerMustClaimError()
    participant = Participant.get_by_owner(session, registry, caller)
    if participant is None:
        raise InvalidRecordError(f"{caller} has no participant record")
    if participant.round_joined != round_id:
        raise WrongRoundError()

    amount = checked_add(participant.pending_withdrawal_amount, participant.balance)
    if amount == 0:
        raise NothingToWithdrawError()
    new_withdrawn = checked_add(round_.total_withdrawn, amount)

    with session.begin_nested():
        transfer(
            session,
            registry.pool_address,
            caller,
            amount,
            memo="withdrawal",
            keep=registry.reserve_floor,
        )
        participant.clear_tickets()
        participant.pending_withdrawal_amount = 0
        participant.pending_withdrawal_round = None
        round_.total_withdrawn = new_withdrawn

    logger.info(f"Withdrawal from round #{round_id} processed for {caller}: {amount}")
    return amount


# -------- scheduler --------
def crank(
    session: Session,
    registry: ProtocolRegistry,
    round_: Optional[Round],
    candidates: Optional[Iterable[Any]] = None,
    *,
    clock: Optional[ClockReading] = None,
    seed_source: SeedSource = derive_clock_seed,
) -> LifecycleStep:
    """Advance epochs and finalize ``round_`` from elapsed time. Callable by anyone.

    A complete round is left untouched, and repeating the call with the same
    clock reading changes nothing.
    """

    round_ = _require_round(registry, round_)
    if round_.is_complete:
        logger.info(f"Round #{round_.round_id} already complete, no action needed")
        return LifecycleStep(state=round_.to_state(), previous_epoch=round_.epoch_in_round)

    with session.begin_nested():
        step = _run_lifecycle(session, registry, round_, candidates, _now(clock), seed_source)

    logger.info(
        f"Crank complete for round #{round_.round_id}: epoch {round_.epoch_in_round}, "
        f"complete={round_.is_complete}"
    )
    return step


# -------- teardown --------
def close_protocol_state(
    session: Session, registry: ProtocolRegistry, admin: str
) -> int:
    """Delete the registry and return the pool's balance to the admin.

    Rounds, participants and claim records of the registry are deleted with it.
    Returns the amount sent to the admin.

    Raises
    ------
    UnclaimedLiabilityError
        If issued claim records are still unpaid.
    """

    registry.require_admin(admin)
    logger.info(
        f"Closing protocol '{registry.label}': admin={registry.admin_id} "
        f"current_round={registry.current_round_id} "
        f"unclaimed={registry.unclaimed_liability}"
    )
    if registry.unclaimed_liability != 0:
        raise UnclaimedLiabilityError()

    pool = session.get(LedgerAccount, registry.pool_address)
    recovered = pool.balance if pool is not None else 0
    with session.begin_nested():
        if recovered > 0:
            transfer(session, registry.pool_address, admin, recovered, memo="close")
        session.delete(registry)

    logger.info(f"Protocol '{registry.label}' closed, {recovered} returned to {admin}")
    return recovered


__all__ = [
    "DepositReceipt",
    "advance_epoch",
    "claim_prize",
    "close_protocol_state",
    "crank",
    "create_claim_ticket",
    "create_claim_ticket_winner",
    "current_round",
    "deposit",
    "init_round",
    "initialize",
    "process_withdrawal",
    "request_withdrawal",
    "resolve_candidates",
    "select_winner_local",
    "seed_prize",
    "take_snapshot_batch",
]
