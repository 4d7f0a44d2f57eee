"""Participant records and the ticket blocks they hold."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    UniqueConstraint,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship

from ..lottery.amounts import checked_add
from ..lottery.selection import TicketHolder
from ..settings import EPOCHS_PER_ROUND
from .base import Base
from .id_type import AMOUNT_TYPE, ID_TYPE, IDENTITY_TYPE

if TYPE_CHECKING:
    from .protocol import ProtocolRegistry


class Participant(Base):
    """Per-identity deposit state, reused from round to round.

    ``ticket_start``/``ticket_end`` summarise the first and last ticket held in
    :attr:`round_joined`; ownership itself is tracked by :class:`TicketBlock`
    rows so that interleaved deposits never overlap.
    """

    __tablename__ = "participants"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    registry_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("protocol_registries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    owner: Mapped[str] = mapped_column(IDENTITY_TYPE, nullable=False)
    balance: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    ticket_start: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    """First ticket of the earliest block this round.

    A summary for display. Another participant may hold tickets between
    ``ticket_start`` and ``ticket_end``; ownership lives in ``blocks``.
    """
    ticket_end: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    """Last ticket of the latest block this round. Not an ownership bound."""
    snapshot_balance_0: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    snapshot_balance_1: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    snapshot_balance_2: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    snapshot_mask: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    """Bit ``i`` is set once epoch ``i + 1`` has been snapshotted."""
    round_joined: Mapped[Optional[int]] = mapped_column(AMOUNT_TYPE, nullable=True)
    """Round of the current deposits; ``NULL`` before the first deposit."""
    pending_withdrawal_amount: Mapped[int] = mapped_column(
        AMOUNT_TYPE, nullable=False, default=0
    )
    pending_withdrawal_round: Mapped[Optional[int]] = mapped_column(
        AMOUNT_TYPE, nullable=True
    )
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

    protocol: Mapped["ProtocolRegistry"] = relationship(back_populates="participants")
    blocks: Mapped[list["TicketBlock"]] = relationship(
        back_populates="participant",
        cascade="all, delete-orphan",
        order_by="TicketBlock.ticket_start",
    )

    __table_args__ = (
        UniqueConstraint("registry_id", "owner", name="uq_participants_registry_owner"),
        CheckConstraint("balance >= 0", name="balance_non_negative"),
        CheckConstraint("snapshot_mask BETWEEN 0 AND 7", name="snapshot_mask_range"),
        Index("ix_participants_round_joined", "registry_id", "round_joined"),
    )

    def __init__(
        self,
        *,
        owner: str,
        protocol: Optional["ProtocolRegistry"] = None,
        registry_id: Optional[int] = None,
    ) -> None:
        if protocol is not None:
            self.protocol = protocol
        if registry_id is not None:
            self.registry_id = registry_id
        self.owner = owner
        self.balance = 0
        self.ticket_start = 0
        self.ticket_end = 0
        self.snapshot_balance_0 = 0
        self.snapshot_balance_1 = 0
        self.snapshot_balance_2 = 0
        self.snapshot_mask = 0
        self.round_joined = None
        self.pending_withdrawal_amount = 0
        self.pending_withdrawal_round = None

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Participant(owner={self.owner}, balance={self.balance}, "
            f"tickets={self.ticket_start}-{self.ticket_end}, "
            f"round_joined={self.round_joined})>"
        )

    # -------- snapshots --------
    @property
    def snapshot_balances(self) -> tuple[int, int, int]:
        return (self.snapshot_balance_0, self.snapshot_balance_1, self.snapshot_balance_2)

    def has_snapshot(self, index: int) -> bool:
        return bool(self.snapshot_mask & (1 << index))

    def record_snapshot(self, index: int) -> bool:
        """Copy the balance into slot ``index`` unless it is already recorded."""

        if not 0 <= index < EPOCHS_PER_ROUND:
            raise ValueError(f"Snapshot index {index} out of range")
        if self.has_snapshot(index):
            return False
        setattr(self, f"snapshot_balance_{index}", self.balance)
        self.snapshot_mask = self.snapshot_mask | (1 << index)
        return True

    # -------- tickets --------
    def blocks_for_round(self, round_id: int) -> list["TicketBlock"]:
        return [block for block in self.blocks if block.round_id == round_id]

    def ticket_holders(self, round_id: int) -> list[TicketHolder]:
        """Ticket blocks of ``round_id`` as selection inputs.

        Empty unless the participant's deposits belong to ``round_id``.
        """

        if self.round_joined != round_id:
            return []
        return [block.as_holder(self.owner) for block in self.blocks_for_round(round_id)]

    def reset_for_round(self, round_id: int) -> None:
        """Drop state left over from an earlier round and join ``round_id``."""

        if self.round_joined is not None and self.round_joined != round_id:
            self.balance = 0
            self.ticket_start = 0
            self.ticket_end = 0
            self.snapshot_balance_0 = 0
            self.snapshot_balance_1 = 0
            self.snapshot_balance_2 = 0
            self.snapshot_mask = 0
            self.pending_withdrawal_amount = 0
            self.pending_withdrawal_round = None
        self.round_joined = round_id

    def issue_tickets(self, round_id: int, first_ticket: int, count: int) -> "TicketBlock":
        """Attach tickets ``[first_ticket, first_ticket + count - 1]`` of ``round_id``.

        The participant must already have joined ``round_id``. A block that
        continues the previous block of the round extends it.
        """

        if self.round_joined != round_id:
            raise ValueError("Participant must join the round before receiving tickets")
        if count <= 0:
            raise ValueError("Ticket count must be positive")
        last_ticket = first_ticket + count - 1
        existing = self.blocks_for_round(round_id)
        if existing:
            self.ticket_end = last_ticket
            tail = existing[-1]
            if tail.ticket_end + 1 == first_ticket:
                tail.ticket_end = last_ticket
                return tail
        else:
            self.ticket_start = first_ticket
            self.ticket_end = last_ticket
        block = TicketBlock(round_id=round_id, ticket_start=first_ticket, ticket_end=last_ticket)
        self.blocks.append(block)
        return block

    def credit(self, amount: int) -> None:
        self.balance = checked_add(self.balance, amount)

    def clear_tickets(self) -> None:
        """Zero the live balance and ticket summary after settlement."""

        self.balance = 0
        self.ticket_start = 0
        self.ticket_end = 0

    # -------- lookups --------
    @classmethod
    def get_by_owner(
        cls, session: Session, registry: "ProtocolRegistry", owner: str
    ) -> Optional["Participant"]:
        """Return the participant record of ``owner`` if it exists."""

        return session.scalar(
            select(cls).where(cls.registry_id == registry.id, cls.owner == owner)
        )

    @classmethod
    def for_round(
        cls, session: Session, registry: "ProtocolRegistry", round_id: int
    ) -> list["Participant"]:
        """Participants whose deposits belong to ``round_id``, by first ticket.

        Participants that moved their whole balance into a pending withdrawal
        are included; their tickets stay in the draw.
        """

        stmt = (
            select(cls)
            .where(cls.registry_id == registry.id, cls.round_joined == round_id)
            .order_by(cls.ticket_start, cls.id)
        )
        return list(session.scalars(stmt).all())


class TicketBlock(Base):
    """Contiguous tickets issued to one participant in one round."""

    __tablename__ = "ticket_blocks"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    participant_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("participants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    round_id: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    ticket_start: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    ticket_end: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    participant: Mapped["Participant"] = relationship(back_populates="blocks")

    __table_args__ = (
        CheckConstraint("ticket_end >= ticket_start", name="range_ordered"),
        Index("ix_ticket_blocks_round_start", "round_id", "ticket_start"),
    )

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<TicketBlock(round_id={self.round_id}, "
            f"tickets={self.ticket_start}-{self.ticket_end})>"
        )

    def as_holder(self, owner: str) -> TicketHolder:
        return TicketHolder(
            owner=owner,
            round_id=self.round_id,
            ticket_start=self.ticket_start,
            ticket_end=self.ticket_end,
        )


__all__ = ["Participant", "TicketBlock"]
