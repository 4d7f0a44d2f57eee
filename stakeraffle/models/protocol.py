"""The protocol registry record."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import CheckConstraint, DateTime, String, UniqueConstraint, select
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..errors import UnauthorizedError
from .base import Base
from .id_type import AMOUNT_TYPE, ID_TYPE, IDENTITY_TYPE

if TYPE_CHECKING:
    from .claim import ClaimRecord
    from .participant import Participant
    from .round import Round


class ProtocolRegistry(Base):
    """Process-wide protocol state, passed explicitly to every operation.

    Holds the admin identity, the current round pointer, the prize seed pool and
    the total prize liability of issued but unclaimed claim records. The pool's
    funds live in the :class:`~stakeraffle.models.ledger.LedgerAccount` named by
    :attr:`pool_address`.
    """

    __tablename__ = "protocol_registries"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Primary key."""

    label: Mapped[str] = mapped_column(String(64), nullable=False)
    """Unique name of this protocol instance."""

    admin_id: Mapped[str] = mapped_column(IDENTITY_TYPE, nullable=False)
    """Identity allowed to run admin-gated operations."""

    validator_id: Mapped[str] = mapped_column(IDENTITY_TYPE, nullable=False)
    """Validator the escrowed stake is meant to be delegated to."""

    pool_address: Mapped[str] = mapped_column(IDENTITY_TYPE, nullable=False)
    """Ledger address of the escrow pool."""

    current_round_id: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    """Round that accepts deposits."""

    prize_seed_total: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    """Cumulative amount seeded into the prize pool."""

    unclaimed_liability: Mapped[int] = mapped_column(
        AMOUNT_TYPE, nullable=False, default=0
    )
    """Sum of ``prize_amount`` over issued, unclaimed claim records."""

    ticket_price: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    epoch_duration_ms: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    reserve_floor: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    rounds: Mapped[list["Round"]] = relationship(
        back_populates="protocol", cascade="all, delete-orphan"
    )
    participants: Mapped[list["Participant"]] = relationship(
        back_populates="protocol", cascade="all, delete-orphan"
    )
    claim_records: Mapped[list["ClaimRecord"]] = relationship(
        back_populates="protocol", cascade="all, delete-orphan"
    )

    __table_args__ = (
        UniqueConstraint("label", name="uq_protocol_registries_label"),
        UniqueConstraint("pool_address", name="uq_protocol_registries_pool_address"),
        CheckConstraint("ticket_price > 0", name="ticket_price_positive"),
        CheckConstraint("epoch_duration_ms > 0", name="epoch_duration_positive"),
        CheckConstraint("unclaimed_liability >= 0", name="liability_non_negative"),
    )

    def __init__(
        self,
        *,
        label: str,
        admin_id: str,
        validator_id: str,
        ticket_price: int,
        epoch_duration_ms: int,
        reserve_floor: int,
        pool_address: Optional[str] = None,
    ) -> None:
        self.label = label
        self.admin_id = admin_id
        self.validator_id = validator_id
        self.pool_address = pool_address or self.pool_address_for(label)
        self.current_round_id = 0
        self.prize_seed_total = 0
        self.unclaimed_liability = 0
        self.ticket_price = ticket_price
        self.epoch_duration_ms = epoch_duration_ms
        self.reserve_floor = reserve_floor

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<ProtocolRegistry(label={self.label}, admin={self.admin_id}, "
            f"current_round={self.current_round_id}, "
            f"liability={self.unclaimed_liability})>"
        )

    @staticmethod
    def pool_address_for(label: str) -> str:
        return f"pool:{label}"

    def require_admin(self, caller: str) -> None:
        """Raise :class:`UnauthorizedError` unless ``caller`` is the admin."""

        if caller != self.admin_id:
            raise UnauthorizedError(f"{caller} is not the admin of protocol '{self.label}'")

    @classmethod
    def get_by_label(cls, session: Session, label: str) -> Optional["ProtocolRegistry"]:
        """Return the registry named ``label`` if it exists."""

        return session.scalar(select(cls).where(cls.label == label))


__all__ = ["ProtocolRegistry"]
