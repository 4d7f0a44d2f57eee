import unittest

from stakeraffle.db.engine import get_sessionmaker, make_engine
from stakeraffle.errors import InvalidRecordError
from stakeraffle.keeper import RaffleKeeper
from stakeraffle.lottery.clock import ClockReading
from stakeraffle.models import Base, Participant, ProtocolRegistry, Round
from stakeraffle.models.ledger import mint
from stakeraffle.settings import RaffleSettings
from stakeraffle.workflows import deposit, init_round, initialize

PRICE = 1_000
SETTINGS = RaffleSettings(
    ticket_price=PRICE,
    epoch_duration_seconds=60,
    reserve_floor=0,
    keeper_interval_seconds=5,
)
T0 = 1_700_000_000


class FixedClock:
    def __init__(self, seconds: int = 0):
        self.seconds = seconds

    def now(self) -> ClockReading:
        return ClockReading.at(T0 + self.seconds)


class RaffleKeeperTestCase(unittest.TestCase):
    def setUp(self):
        self.engine = make_engine("sqlite+pysqlite:///:memory:")
        Base.metadata.create_all(self.engine)
        self.Session = get_sessionmaker(self.engine)
        self.clock = FixedClock()

        with self.Session.begin() as session:
            mint(session, "admin", PRICE)
            mint(session, "alice", 10 * PRICE)
            mint(session, "bob", 10 * PRICE)
            registry = initialize(session, "admin", "validator", settings=SETTINGS)
            round_ = init_round(session, registry, 1, T0 * 1000)
            deposit(session, registry, "alice", 2 * PRICE, round_, clock=ClockReading.at(T0 + 1))
            deposit(session, registry, "bob", PRICE, round_, clock=ClockReading.at(T0 + 2))

    def tearDown(self):
        self.engine.dispose()

    def _keeper(self, operator="admin", label="main", sleep=None):
        return RaffleKeeper(
            self.Session,
            label,
            operator,
            clock=self.clock,
            settings=SETTINGS,
            seed_source=lambda reading: 2,
            sleep=sleep or (lambda seconds: None),
        )

    def test_tick_snapshots_and_advances(self):
        keeper = self._keeper()
        self.clock.seconds = 10
        report = keeper.tick()
        self.assertEqual(report.round_id, 1)
        self.assertEqual(report.epoch_in_round, 1)
        self.assertEqual(report.snapshots_taken, 2)
        self.assertIsNone(report.finalization)

        self.clock.seconds = 70
        report = keeper.tick()
        self.assertEqual(report.epoch_in_round, 2)
        self.assertEqual(report.snapshots_taken, 0)

        with self.Session.begin() as session:
            registry = ProtocolRegistry.get_by_label(session, "main")
            alice = Participant.get_by_owner(session, registry, "alice")
            self.assertEqual(alice.snapshot_mask, 0b001)

    def test_admin_keeper_finalizes_and_opens_next_round(self):
        keeper = self._keeper()
        self.clock.seconds = 200
        report = keeper.tick()
        self.assertEqual(report.finalization.winner, "bob")
        self.assertEqual(report.opened_round_id, 2)

        with self.Session.begin() as session:
            registry = ProtocolRegistry.get_by_label(session, "main")
            self.assertEqual(registry.current_round_id, 2)
            next_round = Round.get(session, registry, 2)
            self.assertEqual(next_round.start_time_ms, (T0 + 200) * 1000)
            self.assertTrue(Round.get(session, registry, 1).is_complete)

        report = keeper.tick()
        self.assertEqual(report.round_id, 2)
        self.assertIsNone(report.opened_round_id)

    def test_other_keepers_only_crank(self):
        keeper = self._keeper(operator="someone")
        self.clock.seconds = 200
        report = keeper.tick()
        self.assertIsNotNone(report.finalization)
        self.assertIsNone(report.opened_round_id)
        report = keeper.tick()
        self.assertEqual(report.round_id, 1)
        self.assertIsNone(report.finalization)

    def test_unknown_protocol(self):
        with self.assertRaises(InvalidRecordError):
            self._keeper(label="missing").tick()

    def test_run_forever_survives_failed_cycles(self):
        pauses = []
        keeper = self._keeper(label="missing", sleep=pauses.append)
        with self.assertLogs("stakeraffle.keeper", level="ERROR") as logs:
            keeper.run_forever(max_cycles=3)
        self.assertEqual(len([r for r in logs.records if r.levelname == "ERROR"]), 3)
        self.assertEqual(pauses, [5, 5])


if __name__ == "__main__":
    unittest.main()
