"""Round records."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    UniqueConstraint,
    false,
    select,
)
from sqlalchemy.orm import Mapped, Session, mapped_column, relationship, validates

from ..lottery.amounts import saturating_sub
from ..lottery.lifecycle import RoundState
from ..lottery.selection import UNDRAWN, Drawn, WinnerSlot
from .base import Base
from .id_type import AMOUNT_TYPE, ID_TYPE, IDENTITY_TYPE

if TYPE_CHECKING:
    from .protocol import ProtocolRegistry


class Round(Base):
    """One lottery round spanning three epochs."""

    __tablename__ = "rounds"

    id: Mapped[int] = mapped_column(ID_TYPE, primary_key=True, autoincrement=True)
    """Surrogate primary key."""

    registry_id: Mapped[int] = mapped_column(
        ID_TYPE,
        ForeignKey("protocol_registries.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    round_id: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    """Round number, unique per registry."""

    epoch_in_round: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    """1 and 2 accept deposits, 3 waits for finalization. Never decreases."""

    start_time_ms: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False)
    end_time_ms: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    """Completion time; 0 while the round is open."""

    total_staked: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    """Sum of all deposits into this round."""

    total_withdrawn: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    """Stake already paid back through withdrawals and claims."""

    total_prize: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    total_tickets_sold: Mapped[int] = mapped_column(
        AMOUNT_TYPE, nullable=False, default=0
    )

    winner: Mapped[Optional[str]] = mapped_column(IDENTITY_TYPE, nullable=True)
    """Drawn winner; ``NULL`` until the draw. Use :attr:`draw` for the tagged view."""

    winning_ticket: Mapped[int] = mapped_column(AMOUNT_TYPE, nullable=False, default=0)
    is_complete: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )
    prize_claimed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=false()
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    protocol: Mapped["ProtocolRegistry"] = relationship(back_populates="rounds")

    __table_args__ = (
        UniqueConstraint("registry_id", "round_id", name="uq_rounds_registry_round"),
        CheckConstraint("epoch_in_round BETWEEN 1 AND 3", name="epoch_range"),
        CheckConstraint(
            "winner IS NULL OR winning_ticket < total_tickets_sold",
            name="winning_ticket_in_range",
        ),
    )

    def __init__(
        self,
        *,
        round_id: int,
        start_time_ms: int,
        protocol: Optional["ProtocolRegistry"] = None,
        registry_id: Optional[int] = None,
    ) -> None:
        if protocol is not None:
            self.protocol = protocol
        if registry_id is not None:
            self.registry_id = registry_id
        self.round_id = round_id
        self.epoch_in_round = 1
        self.start_time_ms = start_time_ms
        self.end_time_ms = 0
        self.total_staked = 0
        self.total_withdrawn = 0
        self.total_prize = 0
        self.total_tickets_sold = 0
        self.winner = None
        self.winning_ticket = 0
        self.is_complete = False
        self.prize_claimed = False

    def __repr__(self) -> str:  # pragma: no cover - repr is trivial
        return (
            f"<Round(round_id={self.round_id}, epoch={self.epoch_in_round}, "
            f"tickets={self.total_tickets_sold}, complete={self.is_complete}, "
            f"winner={self.winner})>"
        )

    @validates("epoch_in_round")
    def _validate_epoch(self, _key: str, value: int) -> int:
        current = self.__dict__.get("epoch_in_round")
        if current is not None and value < current:
            raise ValueError(f"Epoch cannot move backwards ({current} -> {value})")
        return value

    @validates("winner")
    def _validate_winner(self, _key: str, value: Optional[str]) -> Optional[str]:
        if value is not None and not value:
            raise ValueError("Winner identity must not be empty")
        current = self.__dict__.get("winner")
        if current is not None and value != current:
            raise ValueError(f"Round #{self.round_id} already has winner {current}")
        return value

    @property
    def draw(self) -> WinnerSlot:
        """Tagged winner: :data:`UNDRAWN` or :class:`Drawn`."""

        return Drawn(self.winner) if self.winner is not None else UNDRAWN

    @property
    def outstanding_stake(self) -> int:
        """Stake still held in escrow for this round."""

        return saturating_sub(self.total_staked, self.total_withdrawn)

    def to_state(self) -> RoundState:
        return RoundState(
            round_id=self.round_id,
            epoch_in_round=self.epoch_in_round,
            start_time_ms=self.start_time_ms,
            end_time_ms=self.end_time_ms,
            total_tickets_sold=self.total_tickets_sold,
            total_prize=self.total_prize,
            winner=self.draw,
            winning_ticket=self.winning_ticket,
            is_complete=self.is_complete,
        )

    def apply_state(self, state: RoundState) -> None:
        """Write the lifecycle fields of ``state`` back onto this record."""

        if state.round_id != self.round_id:
            raise ValueError("Lifecycle state belongs to another round")
        if state.epoch_in_round != self.epoch_in_round:
            self.epoch_in_round = state.epoch_in_round
        if state.is_complete and not self.is_complete:
            self.winner = state.winner.identity
            self.winning_ticket = state.winning_ticket
            self.total_prize = state.total_prize
            self.end_time_ms = state.end_time_ms
            self.is_complete = True

    @classmethod
    def get(
        cls, session: Session, registry: "ProtocolRegistry", round_id: int
    ) -> Optional["Round"]:
        """Return round ``round_id`` of ``registry`` if it exists."""

        return session.scalar(
            select(cls).where(cls.registry_id == registry.id, cls.round_id == round_id)
        )


__all__ = ["Round"]
