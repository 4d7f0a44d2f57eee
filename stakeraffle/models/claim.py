"""Claim records authorizing a winner's payout."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    UniqueConstraint,
    false,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..lottery.amounts import checked_add
from .base import Base
from .id_type import AMOUNT_TYPE, ID_TYPE, IDENTITY_TYPE

if TYPE_CHECKING:
    from .protocol import ProtocolRegistry


class ClaimRecord(Base):
    """Fixed payout owed to the winner of a round.

    Created once per (round, winner); only :attr:`claimed` changes afterwards.
    """

    __tablename__ = "claim_records"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    registry_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("protocol_registries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    round_id: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    winner: Mapped[str] = mapped_column(IDENTITY_TYPE, nullable=False)
    prize_amount: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    stake_amount: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    claimed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    claimed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    protocol: Mapped["ProtocolRegistry"] = relationship(back_populates="claim_records")

    __table_args__ = (
        UniqueConstraint(
            "registry_id", "round_id", "winner", name="uq_claim_records_round_winner"
        ),
        CheckConstraint("prize_amount >= 0", name="prize_non_negative"),
        CheckConstraint("stake_amount >= 0", name="stake_non_negative"),
    )

    def __init__(
        self,
        *,
        round_id: int,
        winner: str,
        prize_amount: int,
        stake_amount: int,
        protocol: Optional["ProtocolRegistry"] = None,
        registry_id: Optional[int] = None,
    ) -> None:
        if protocol is not None:
            self.protocol = protocol
        if registry_id is not None:
            self.registry_id = registry_id
        self.round_id = round_id
        self.winner = winner
        self.prize_amount = prize_amount
        self.stake_amount = stake_amount
        self.claimed = False

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<ClaimRecord(round_id={self.round_id}, winner={self.winner}, "
            f"prize={self.prize_amount}, stake={self.stake_amount}, claimed={self.claimed})>"
        )

    @property
    def payout(self) -> int:
        """Stake plus prize, as fixed when the record was issued."""

        return checked_add(self.stake_amount, self.prize_amount)

    def mark_claimed(self) -> None:
        self.claimed = True
        self.claimed_at = datetime.now(timezone.utc)

    @classmethod
    def get(
        cls,
        session: Session,
        registry: "ProtocolRegistry",
        round_id: int,
        winner: str,
    ) -> Optional["ClaimRecord"]:
        """Return the claim record of ``winner`` for ``round_id`` if issued."""

        return session.scalar(
            select(cls).where(
                cls.registry_id == registry.id,
                cls.round_id == round_id,
                cls.winner == winner,
            )
        )


__all__ = ["ClaimRecord"]
