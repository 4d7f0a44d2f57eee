"""Staking-backed no-loss raffle protocol on a relational ledger."""

__version__ = "0.1.0"
