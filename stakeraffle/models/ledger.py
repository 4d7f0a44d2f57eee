"""Fund balances and the single value-transfer primitive."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, String
from sqlalchemy.orm import Mapped, Session, mapped_column

from ..errors import InsufficientFundsError, InvalidAmountError
from ..lottery.amounts import checked_add, checked_sub
from .base import Base
from .id_type import AMOUNT_TYPE, ID_TYPE, IDENTITY_TYPE

logger = logging.getLogger(__name__)


class LedgerAccount(Base):
    """Balance held by a wallet or by a protocol escrow pool."""

    __tablename__ = "ledger_accounts"

    address: Mapped[str] = mapped_column(IDENTITY_TYPE, primary_key=True)
    """Wallet identity or pool address."""

    balance: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    """Spendable balance in base units."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (CheckConstraint("balance >= 0", name="balance_non_negative"),)

    def __init__(self, *, address: str, balance: int = 0) -> None:
        self.address = address
        self.balance = balance

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return f"<LedgerAccount(address={self.address}, balance={self.balance})>"

    @classmethod
    def get_or_create(cls, session: Session, address: str) -> "LedgerAccount":
        account = session.get(cls, address)
        if account is None:
            account = cls(address=address)
            session.add(account)
            session.flush()
        return account


class FundTransfer(Base):
    """Append-only record of every balance movement."""

    __tablename__ = "fund_transfers"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    source: Mapped[Optional[str]] = mapped_column(IDENTITY_TYPE, nullable=True)
    """Debited address; ``None`` for externally minted funds."""
    destination: Mapped[str] = mapped_column(IDENTITY_TYPE, nullable=False)
    amount: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    memo: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
        Index("ix_fund_transfers_memo", "memo"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<FundTransfer(id={self.id}, {self.source} -> {self.destination}, "
            f"amount={self.amount}, memo={self.memo})>"
        )


def balance_of(session: Session, address: str) -> int:
    account = session.get(LedgerAccount, address)
    return account.balance if account is not None else 0


def mint(session: Session, address: str, amount: int, memo: str = "mint") -> LedgerAccount:
    """Credit ``amount`` to ``address`` from outside the ledger (airdrop/faucet)."""

    if amount <= 0:
        raise InvalidAmountError(f"Mint amount must be positive, got {amount}")
    account = LedgerAccount.get_or_create(session, address)
    account.balance = checked_add(account.balance, amount)
    session.add(FundTransfer(source=None, destination=address, amount=amount, memo=memo))
    return account


def transfer(
    session: Session,
    source: str,
    destination: str,
    amount: int,
    *,
    memo: str,
    keep: int = 0,
) -> FundTransfer:
    """Move ``amount`` from ``source`` to ``destination``.

    Parameters
    ----------
    session : Session
        Active SQLAlchemy session.
    source, destination : str
        Ledger addresses. The destination account is created on demand.
    amount : int
        Positive amount in base units.
    memo : str
        Short label stored on the transfer row.
    keep : int, default: 0
        Balance ``source`` must still hold afterwards.

    Raises
    ------
    InvalidAmountError
        If ``amount`` is not positive.
    InsufficientFundsError
        If ``source`` cannot pay ``amount`` while keeping ``keep``.
    ArithmeticOverflowError
        If the destination balance would overflow.

    Both balances are validated before either is written.
    """

    if amount <= 0:
        raise InvalidAmountError(f"Transfer amount must be positive, got {amount}")
    if source == destination:
        raise InvalidAmountError(f"Cannot transfer from {source} to itself")
    source_account = session.get(LedgerAccount, source)
    if source_account is None:
        raise InsufficientFundsError(f"{source} has no ledger account, {amount} requested")
    available = max(source_account.balance - keep, 0)
    if available < amount:
        raise InsufficientFundsError(
            f"{source} can pay {available} (keeping {keep}), {amount} requested"
        )
    destination_account = LedgerAccount.get_or_create(session, destination)
    new_destination_balance = checked_add(destination_account.balance, amount)
    source_account.balance = checked_sub(source_account.balance, amount)
    destination_account.balance = new_destination_balance

    record = FundTransfer(source=source, destination=destination, amount=amount, memo=memo)
    session.add(record)
    logger.debug(f"Transferred {amount} from {source} to {destination} ({memo})")
    return record


__all__ = ["FundTransfer", "LedgerAccount", "balance_of", "mint", "transfer"]
