"""initial raffle schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-17 09:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = "0001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ID_TYPE = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamp(name: str, nullable: bool = False) -> sa.Column:
    return sa.Column(name, sa.DateTime(timezone=True), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "ledger_accounts",
        sa.Column("address", sa.String(length=128), nullable=False),
        sa.Column("balance", sa.BigInteger(), nullable=False),
        _timestamp("created_at"),
        sa.CheckConstraint("balance >= 0", name=op.f("ck_ledger_accounts_balance_non_negative")),
        sa.PrimaryKeyConstraint("address", name=op.f("pk_ledger_accounts")),
    )
    op.create_table(
        "fund_transfers",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("source", sa.String(length=128), nullable=True),
        sa.Column("destination", sa.String(length=128), nullable=False),
        sa.Column("amount", sa.BigInteger(), nullable=False),
        sa.Column("memo", sa.String(length=64), nullable=False),
        _timestamp("created_at"),
        sa.CheckConstraint("amount > 0", name=op.f("ck_fund_transfers_amount_positive")),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_fund_transfers")),
    )
    op.create_index("ix_fund_transfers_memo", "fund_transfers", ["memo"], unique=False)

    op.create_table(
        "protocol_registries",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("label", sa.String(length=64), nullable=False),
        sa.Column("admin_id", sa.String(length=128), nullable=False),
        sa.Column("validator_id", sa.String(length=128), nullable=False),
        sa.Column("pool_address", sa.String(length=128), nullable=False),
        sa.Column("current_round_id", sa.BigInteger(), nullable=False),
        sa.Column("prize_seed_total", sa.BigInteger(), nullable=False),
        sa.Column("unclaimed_liability", sa.BigInteger(), nullable=False),
        sa.Column("ticket_price", sa.BigInteger(), nullable=False),
        sa.Column("epoch_duration_ms", sa.BigInteger(), nullable=False),
        sa.Column("reserve_floor", sa.BigInteger(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint(
            "ticket_price > 0", name=op.f("ck_protocol_registries_ticket_price_positive")
        ),
        sa.CheckConstraint(
            "epoch_duration_ms > 0",
            name=op.f("ck_protocol_registries_epoch_duration_positive"),
        ),
        sa.CheckConstraint(
            "unclaimed_liability >= 0",
            name=op.f("ck_protocol_registries_liability_non_negative"),
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_protocol_registries")),
        sa.UniqueConstraint("label", name="uq_protocol_registries_label"),
        sa.UniqueConstraint("pool_address", name="uq_protocol_registries_pool_address"),
    )

    op.create_table(
        "rounds",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("registry_id", ID_TYPE, nullable=False),
        sa.Column("round_id", sa.BigInteger(), nullable=False),
        sa.Column("epoch_in_round", sa.Integer(), nullable=False),
        sa.Column("start_time_ms", sa.BigInteger(), nullable=False),
        sa.Column("end_time_ms", sa.BigInteger(), nullable=False),
        sa.Column("total_staked", sa.BigInteger(), nullable=False),
        sa.Column("total_withdrawn", sa.BigInteger(), nullable=False),
        sa.Column("total_prize", sa.BigInteger(), nullable=False),
        sa.Column("total_tickets_sold", sa.BigInteger(), nullable=False),
        sa.Column("winner", sa.String(length=128), nullable=True),
        sa.Column("winning_ticket", sa.BigInteger(), nullable=False),
        sa.Column("is_complete", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("prize_claimed", sa.Boolean(), server_default=sa.false(), nullable=False),
        _timestamp("created_at"),
        sa.CheckConstraint("epoch_in_round BETWEEN 1 AND 3", name=op.f("ck_rounds_epoch_range")),
        sa.CheckConstraint(
            "winner IS NULL OR winning_ticket < total_tickets_sold",
            name=op.f("ck_rounds_winning_ticket_in_range"),
        ),
        sa.ForeignKeyConstraint(
            ["registry_id"],
            ["protocol_registries.id"],
            name=op.f("fk_rounds_registry_id_protocol_registries"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_rounds")),
        sa.UniqueConstraint("registry_id", "round_id", name="uq_rounds_registry_round"),
    )
    op.create_index(op.f("ix_rounds_registry_id"), "rounds", ["registry_id"], unique=False)

    op.create_table(
        "participants",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("registry_id", ID_TYPE, nullable=False),
        sa.Column("owner", sa.String(length=128), nullable=False),
        sa.Column("balance", sa.BigInteger(), nullable=False),
        sa.Column("ticket_start", sa.BigInteger(), nullable=False),
        sa.Column("ticket_end", sa.BigInteger(), nullable=False),
        sa.Column("snapshot_balance_0", sa.BigInteger(), nullable=False),
        sa.Column("snapshot_balance_1", sa.BigInteger(), nullable=False),
        sa.Column("snapshot_balance_2", sa.BigInteger(), nullable=False),
        sa.Column("snapshot_mask", sa.Integer(), nullable=False),
        sa.Column("round_joined", sa.BigInteger(), nullable=True),
        sa.Column("pending_withdrawal_amount", sa.BigInteger(), nullable=False),
        sa.Column("pending_withdrawal_round", sa.BigInteger(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("balance >= 0", name=op.f("ck_participants_balance_non_negative")),
        sa.CheckConstraint(
            "snapshot_mask BETWEEN 0 AND 7", name=op.f("ck_participants_snapshot_mask_range")
        ),
        sa.ForeignKeyConstraint(
            ["registry_id"],
            ["protocol_registries.id"],
            name=op.f("fk_participants_registry_id_protocol_registries"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_participants")),
        sa.UniqueConstraint("registry_id", "owner", name="uq_participants_registry_owner"),
    )
    op.create_index(
        op.f("ix_participants_registry_id"), "participants", ["registry_id"], unique=False
    )
    op.create_index(
        "ix_participants_round_joined",
        "participants",
        ["registry_id", "round_joined"],
        unique=False,
    )

    op.create_table(
        "ticket_blocks",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("participant_id", ID_TYPE, nullable=False),
        sa.Column("round_id", sa.BigInteger(), nullable=False),
        sa.Column("ticket_start", sa.BigInteger(), nullable=False),
        sa.Column("ticket_end", sa.BigInteger(), nullable=False),
        _timestamp("issued_at"),
        sa.CheckConstraint(
            "ticket_end >= ticket_start", name=op.f("ck_ticket_blocks_range_ordered")
        ),
        sa.ForeignKeyConstraint(
            ["participant_id"],
            ["participants.id"],
            name=op.f("fk_ticket_blocks_participant_id_participants"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_ticket_blocks")),
    )
    op.create_index(
        op.f("ix_ticket_blocks_participant_id"),
        "ticket_blocks",
        ["participant_id"],
        unique=False,
    )
    op.create_index(
        "ix_ticket_blocks_round_start",
        "ticket_blocks",
        ["round_id", "ticket_start"],
        unique=False,
    )

    op.create_table(
        "claim_records",
        sa.Column("id", ID_TYPE, autoincrement=True, nullable=False),
        sa.Column("registry_id", ID_TYPE, nullable=False),
        sa.Column("round_id", sa.BigInteger(), nullable=False),
        sa.Column("winner", sa.String(length=128), nullable=False),
        sa.Column("prize_amount", sa.BigInteger(), nullable=False),
        sa.Column("stake_amount", sa.BigInteger(), nullable=False),
        sa.Column("claimed", sa.Boolean(), server_default=sa.false(), nullable=False),
        _timestamp("created_at"),
        _timestamp("claimed_at", nullable=True),
        sa.CheckConstraint(
            "prize_amount >= 0", name=op.f("ck_claim_records_prize_non_negative")
        ),
        sa.CheckConstraint(
            "stake_amount >= 0", name=op.f("ck_claim_records_stake_non_negative")
        ),
        sa.ForeignKeyConstraint(
            ["registry_id"],
            ["protocol_registries.id"],
            name=op.f("fk_claim_records_registry_id_protocol_registries"),
            ondelete="CASCADE",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_claim_records")),
        sa.UniqueConstraint(
            "registry_id", "round_id", "winner", name="uq_claim_records_round_winner"
        ),
    )
    op.create_index(
        op.f("ix_claim_records_registry_id"), "claim_records", ["registry_id"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_claim_records_registry_id"), table_name="claim_records")
    op.drop_table("claim_records")
    op.drop_index("ix_ticket_blocks_round_start", table_name="ticket_blocks")
    op.drop_index(op.f("ix_ticket_blocks_participant_id"), table_name="ticket_blocks")
    op.drop_table("ticket_blocks")
    op.drop_index("ix_participants_round_joined", table_name="participants")
    op.drop_index(op.f("ix_participants_registry_id"), table_name="participants")
    op.drop_table("participants")
    op.drop_index(op.f("ix_rounds_registry_id"), table_name="rounds")
    op.drop_table("rounds")
    op.drop_table("protocol_registries")
    op.drop_index("ix_fund_transfers_memo", table_name="fund_transfers")
    op.drop_table("fund_transfers")
    op.drop_table("ledger_accounts")
