"""Automated keeper: snapshots, cranks and rolls rounds over on a timer."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional

from sqlalchemy.orm import sessionmaker

from .errors import InvalidRecordError
from .lottery.clock import SeedSource, SystemClock, derive_clock_seed
from .lottery.lifecycle import FinalizationEvent
from .models import ProtocolRegistry
from .settings import RaffleSettings
from .workflows import crank, current_round, init_round, take_snapshot_batch

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class KeeperReport:
    """What one keeper cycle did."""

    round_id: Optional[int]
    epoch_in_round: int = 0
    snapshots_taken: int = 0
    finalization: Optional[FinalizationEvent] = None
    opened_round_id: Optional[int] = None


class RaffleKeeper:
    """Periodically drive the lifecycle of one protocol instance.

    Parameters
    ----------
    session_factory : sessionmaker
        Factory for the sessions each cycle runs in.
    registry_label : str
        Label of the protocol to drive.
    operator : str
        Identity of the keeper. When it is the protocol admin the keeper also
        opens the next round after a round completes.
    clock : Optional[SystemClock], default: None
        Anything with a ``now()`` method returning a ``ClockReading``.
    settings : Optional[RaffleSettings], default: None
        Provides the cycle interval; read from the environment when omitted.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        registry_label: str,
        operator: str,
        *,
        clock: Optional[SystemClock] = None,
        settings: Optional[RaffleSettings] = None,
        seed_source: SeedSource = derive_clock_seed,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.Session = session_factory
        self.registry_label = registry_label
        self.operator = operator
        self.clock = clock or SystemClock()
        self.settings = settings or RaffleSettings.from_env()
        self.seed_source = seed_source
        self._sleep = sleep

    def tick(self) -> KeeperReport:
        """Run one cycle in its own transaction."""

        reading = self.clock.now()
        with self.Session.begin() as session:
            registry = ProtocolRegistry.get_by_label(session, self.registry_label)
            if registry is None:
                raise InvalidRecordError(f"Protocol '{self.registry_label}' is not initialized")

            round_ = current_round(session, registry)
            if round_ is None:
                logger.warning(
                    f"Protocol '{registry.label}' has no round #{registry.current_round_id}"
                )
                return KeeperReport(round_id=None)

            snapshots = 0
            if not round_.is_complete:
                snapshots = take_snapshot_batch(session, registry, round_)
            step = crank(session, registry, round_, clock=reading, seed_source=self.seed_source)

            opened: Optional[int] = None
            if round_.is_complete and self.operator == registry.admin_id:
                opened = init_round(session, registry, round_.round_id + 1, clock=reading).round_id

            return KeeperReport(
                round_id=round_.round_id,
                epoch_in_round=round_.epoch_in_round,
                snapshots_taken=snapshots,
                finalization=step.finalization,
                opened_round_id=opened,
            )

    def run_forever(self, max_cycles: Optional[int] = None) -> None:
        """Call :meth:`tick` every ``keeper_interval_seconds`` until interrupted."""

        interval = self.settings.keeper_interval_seconds
        logger.info(
            f"Keeper started for protocol '{self.registry_label}' (every {interval}s)"
        )
        cycles = 0
        while max_cycles is None or cycles < max_cycles:
            cycles += 1
            try:
                report = self.tick()
            except Exception:
                logger.exception(f"Keeper cycle {cycles} failed")
            else:
                logger.info(f"Keeper cycle {cycles}: {report}")
            if max_cycles is None or cycles < max_cycles:
                self._sleep(interval)


__all__ = ["KeeperReport", "RaffleKeeper"]
