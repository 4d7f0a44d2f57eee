"""Runtime configuration for the raffle protocol."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

DEFAULT_TICKET_PRICE = 10_000_000
"""Fixed ticket price in base units (0.01 of a 10**9 unit coin)."""

DEFAULT_EPOCH_DURATION_SECONDS = 120
"""Length of one epoch; three epochs make a round."""

DEFAULT_RESERVE_FLOOR = 1_566_000
"""Minimum balance the escrow pool keeps after any payout."""

DEFAULT_KEEPER_INTERVAL_SECONDS = 30

EPOCHS_PER_ROUND = 3


def _read_int(
    env: Mapping[str, str], name: str, default: int, *, allow_zero: bool = False
) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw.strip().replace("_", ""))
    except ValueError as exc:
        raise ValueError(f"Environment variable '{name}' must be an integer") from exc
    if value < 0 or (value == 0 and not allow_zero):
        raise ValueError(f"Environment variable '{name}' must be positive")
    return value


@dataclass(frozen=True)
class RaffleSettings:
    """Tunable protocol parameters.

    Attributes
    ----------
    ticket_price : int
        Price of one ticket in base units. Deposits must be exact multiples.
    epoch_duration_seconds : int
        Wall-clock length of each of the three epochs of a round.
    reserve_floor : int
        Balance the escrow pool must retain; payouts only draw on the excess.
    keeper_interval_seconds : int
        Pause between two keeper cycles.
    """

    ticket_price: int = DEFAULT_TICKET_PRICE
    epoch_duration_seconds: int = DEFAULT_EPOCH_DURATION_SECONDS
    reserve_floor: int = DEFAULT_RESERVE_FLOOR
    keeper_interval_seconds: int = DEFAULT_KEEPER_INTERVAL_SECONDS

    def __post_init__(self) -> None:
        if self.ticket_price <= 0:
            raise ValueError("ticket_price must be positive")
        if self.epoch_duration_seconds <= 0:
            raise ValueError("epoch_duration_seconds must be positive")
        if self.reserve_floor < 0:
            raise ValueError("reserve_floor must not be negative")
        if self.keeper_interval_seconds <= 0:
            raise ValueError("keeper_interval_seconds must be positive")

    @property
    def epoch_duration_ms(self) -> int:
        return self.epoch_duration_seconds * 1000

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "RaffleSettings":
        """Build settings from ``RAFFLE_*`` environment variables.

        ``.env`` is loaded first when reading the process environment.
        """

        if env is None:
            load_dotenv()
            env = os.environ
        return cls(
            ticket_price=_read_int(env, "RAFFLE_TICKET_PRICE", DEFAULT_TICKET_PRICE),
            epoch_duration_seconds=_read_int(
                env, "RAFFLE_EPOCH_DURATION_SECONDS", DEFAULT_EPOCH_DURATION_SECONDS
            ),
            reserve_floor=_read_int(
                env, "RAFFLE_RESERVE_FLOOR", DEFAULT_RESERVE_FLOOR, allow_zero=True
            ),
            keeper_interval_seconds=_read_int(
                env,
                "RAFFLE_KEEPER_INTERVAL_SECONDS",
                DEFAULT_KEEPER_INTERVAL_SECONDS,
            ),
        )


__all__ = [
    "DEFAULT_EPOCH_DURATION_SECONDS",
    "DEFAULT_KEEPER_INTERVAL_SECONDS",
    "DEFAULT_RESERVE_FLOOR",
    "DEFAULT_TICKET_PRICE",
    "EPOCHS_PER_ROUND",
    "RaffleSettings",
]
