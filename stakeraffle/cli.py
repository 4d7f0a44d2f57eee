"""Operator command line: inspect the protocol and run admin actions.

Usage::

    python scripts/manage.py [--db-url URL] [--label LABEL] [--as ADMIN] COMMAND ...

``--label`` defaults to ``RAFFLE_LABEL`` (``main``) and ``--as`` to
``RAFFLE_ADMIN_ID``. Every command runs in one transaction that is committed
only when the command succeeds.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Optional

from dotenv import load_dotenv

from .db.engine import get_sessionmaker, make_engine
from .errors import RaffleError
from .lottery.tickets import format_ticket_range
from .models import Participant, ProtocolRegistry
from .models.ledger import balance_of
from .workflows import (
    advance_epoch,
    close_protocol_state,
    create_claim_ticket,
    current_round,
    select_winner_local,
)

logger = logging.getLogger(__name__)

ADMIN_COMMANDS = {"advance-epoch", "select-winner", "create-claim", "close"}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Stake raffle operator tools")
    parser.add_argument("--db-url", help="Database URL (default: DB_URL)")
    parser.add_argument("--label", help="Protocol label (default: RAFFLE_LABEL or main)")
    parser.add_argument(
        "--as", dest="operator", help="Admin identity (default: RAFFLE_ADMIN_ID)"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    subparsers.add_parser("status", help="Show the registry and its current round")

    participants_parser = subparsers.add_parser(
        "participants", help="List participants and their tickets"
    )
    participants_parser.add_argument(
        "--round", type=int, dest="round_id", help="Round number (default: current)"
    )

    subparsers.add_parser("advance-epoch", help="Move the current round to its next epoch")

    select_parser = subparsers.add_parser(
        "select-winner", help="Draw the current round's winner from SEED"
    )
    select_parser.add_argument("seed", type=int)

    claim_parser = subparsers.add_parser(
        "create-claim", help="Issue a claim record with explicit amounts"
    )
    claim_parser.add_argument("round_id", type=int)
    claim_parser.add_argument("prize", type=int)
    claim_parser.add_argument("stake", type=int)

    subparsers.add_parser("close", help="Delete the protocol and return the pool to the admin")
    return parser


def cmd_status(session, registry: ProtocolRegistry, args) -> None:
    print(f"Protocol:        {registry.label}")
    print(f"Admin:           {registry.admin_id}")
    print(f"Validator:       {registry.validator_id}")
    print(f"Pool:            {registry.pool_address} ({balance_of(session, registry.pool_address)})")
    print(f"Ticket price:    {registry.ticket_price}")
    print(f"Epoch duration:  {registry.epoch_duration_ms} ms")
    print(f"Reserve floor:   {registry.reserve_floor}")
    print(f"Prize seed:      {registry.prize_seed_total}")
    print(f"Unclaimed:       {registry.unclaimed_liability}")
    print(f"Current round:   {registry.current_round_id}")

    round_ = current_round(session, registry)
    if round_ is None:
        print("No round opened yet")
        return
    print(f"  Epoch:         {round_.epoch_in_round}")
    print(f"  Tickets sold:  {round_.total_tickets_sold}")
    print(f"  Outstanding:   {round_.outstanding_stake}")
    if round_.is_complete:
        print(
            f"  Winner:        {round_.winner} "
            f"(ticket {format_ticket_range(round_.winning_ticket, round_.winning_ticket)})"
        )
    else:
        print("  Winner:        not drawn")


def cmd_participants(session, registry: ProtocolRegistry, args) -> None:
    round_id = args.round_id if args.round_id is not None else registry.current_round_id
    participants = Participant.for_round(session, registry, round_id)
    if not participants:
        print(f"No participants in round #{round_id}")
        return
    print(f"Round #{round_id}: {len(participants)} participants")
    for participant in participants:
        blocks = ", ".join(
            format_ticket_range(block.ticket_start, block.ticket_end)
            for block in participant.blocks_for_round(round_id)
        )
        line = f"  {participant.owner}: balance={participant.balance} tickets={blocks}"
        if participant.pending_withdrawal_amount:
            line += f" pending_withdrawal={participant.pending_withdrawal_amount}"
        print(line)


def cmd_advance_epoch(session, registry: ProtocolRegistry, args) -> None:
    round_ = advance_epoch(session, registry, args.operator, current_round(session, registry))
    print(f"Round #{round_.round_id} is now in epoch {round_.epoch_in_round}")


def cmd_select_winner(session, registry: ProtocolRegistry, args) -> None:
    round_ = current_round(session, registry)
    selection = select_winner_local(session, registry, args.operator, round_, args.seed)
    print(
        f"Round #{round_.round_id}: ticket "
        f"{format_ticket_range(selection.winning_ticket, selection.winning_ticket)} "
        f"won by {selection.winner.identity}"
    )


def cmd_create_claim(session, registry: ProtocolRegistry, args) -> None:
    claim = create_claim_ticket(
        session, registry, args.operator, args.round_id, args.prize, args.stake
    )
    print(f"Claim issued for {claim.winner} in round #{claim.round_id}: {claim.payout}")


def cmd_close(session, registry: ProtocolRegistry, args) -> None:
    recovered = close_protocol_state(session, registry, args.operator)
    print(f"Protocol '{registry.label}' closed, {recovered} returned to {args.operator}")


COMMANDS = {
    "status": cmd_status,
    "participants": cmd_participants,
    "advance-epoch": cmd_advance_epoch,
    "select-winner": cmd_select_winner,
    "create-claim": cmd_create_claim,
    "close": cmd_close,
}


def main(argv: Optional[list[str]] = None) -> int:
    load_dotenv()
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        return 2

    label = args.label or os.getenv("RAFFLE_LABEL", "main")
    args.operator = args.operator or os.getenv("RAFFLE_ADMIN_ID")
    if args.command in ADMIN_COMMANDS and not args.operator:
        print(f"{args.command} needs --as or RAFFLE_ADMIN_ID", file=sys.stderr)
        return 2

    engine = make_engine(args.db_url)
    Session = get_sessionmaker(engine)
    try:
        with Session.begin() as session:
            registry = ProtocolRegistry.get_by_label(session, label)
            if registry is None:
                print(f"Protocol '{label}' not found", file=sys.stderr)
                return 1
            COMMANDS[args.command](session, registry, args)
    except RaffleError as exc:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"{args.command} failed: {exc}", file=sys.stderr)
        return 1
    finally:
        engine.dispose()
    return 0
