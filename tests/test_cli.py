import io
import os
import tempfile
import unittest
from contextlib import redirect_stderr, redirect_stdout
from pathlib import Path
from unittest import mock

from stakeraffle.cli import main
from stakeraffle.db.engine import get_sessionmaker, make_engine
from stakeraffle.lottery.clock import ClockReading
from stakeraffle.models import Base, ClaimRecord, ProtocolRegistry, Round
from stakeraffle.models.ledger import balance_of, mint
from stakeraffle.settings import RaffleSettings
from stakeraffle.workflows import deposit, init_round, initialize

PRICE = 1_000
SETTINGS = RaffleSettings(ticket_price=PRICE, epoch_duration_seconds=60, reserve_floor=0)
T0 = 1_700_000_000


class ManageCommandTestCase(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.url = f"sqlite+pysqlite:///{Path(self.tmpdir.name) / 'raffle.db'}"
        self.engine = make_engine(self.url)
        Base.metadata.create_all(self.engine)
        self.Session = get_sessionmaker(self.engine)

        with self.Session.begin() as session:
            mint(session, "admin", PRICE)
            for owner in ("alice", "bob", "carol"):
                mint(session, owner, 10 * PRICE)
            registry = initialize(session, "admin", "validator", settings=SETTINGS)
            round_ = init_round(session, registry, 1, T0 * 1000)
            for seconds, owner in enumerate(("alice", "bob", "carol"), start=1):
                deposit(session, registry, owner, PRICE, round_, clock=ClockReading.at(T0 + seconds))

        env = {k: v for k, v in os.environ.items() if k not in ("RAFFLE_ADMIN_ID", "RAFFLE_LABEL")}
        patcher = mock.patch.dict(os.environ, env, clear=True)
        patcher.start()
        self.addCleanup(patcher.stop)

    def tearDown(self):
        self.engine.dispose()
        self.tmpdir.cleanup()

    def _run(self, *args):
        out, err = io.StringIO(), io.StringIO()
        with redirect_stdout(out), redirect_stderr(err):
            code = main(["--db-url", self.url, *args])
        return code, out.getvalue(), err.getvalue()

    def _round(self, session):
        registry = ProtocolRegistry.get_by_label(session, "main")
        return registry, Round.get(session, registry, 1)

    def test_status_shows_registry_and_round(self):
        code, out, _ = self._run("status")
        self.assertEqual(code, 0)
        self.assertRegex(out, r"Protocol:\s+main")
        self.assertRegex(out, r"Current round:\s+1")
        self.assertRegex(out, r"Tickets sold:\s+3")
        self.assertIn("not drawn", out)

    def test_participants_lists_ticket_blocks(self):
        code, out, _ = self._run("participants")
        self.assertEqual(code, 0)
        self.assertIn("Round #1: 3 participants", out)
        self.assertIn("alice: balance=1000 tickets=#1", out)
        self.assertIn("carol: balance=1000 tickets=#3", out)

        code, out, _ = self._run("participants", "--round", "2")
        self.assertEqual(code, 0)
        self.assertIn("No participants in round #2", out)

    def test_advance_epoch_until_epoch_three(self):
        for expected in (2, 3):
            code, out, _ = self._run("--as", "admin", "advance-epoch")
            self.assertEqual(code, 0)
            self.assertIn(f"now in epoch {expected}", out)

        code, _, err = self._run("--as", "admin", "advance-epoch")
        self.assertEqual(code, 1)
        self.assertIn("already in epoch 3", err)

        with self.Session.begin() as session:
            _, round_ = self._round(session)
            self.assertEqual(round_.epoch_in_round, 3)

    def test_select_winner_then_create_claim(self):
        code, out, _ = self._run("--as", "admin", "select-winner", "4")
        self.assertEqual(code, 0)
        self.assertIn("won by bob", out)

        code, out, _ = self._run("--as", "admin", "create-claim", "1", "2000", "1000")
        self.assertEqual(code, 0)
        self.assertIn("Claim issued for bob in round #1: 3000", out)

        with self.Session.begin() as session:
            registry, round_ = self._round(session)
            self.assertTrue(round_.is_complete)
            self.assertEqual(round_.winner, "bob")
            self.assertIsNotNone(ClaimRecord.get(session, registry, 1, "bob"))
            self.assertEqual(registry.unclaimed_liability, 2000)

    def test_failed_command_changes_nothing(self):
        code, _, err = self._run("--as", "mallory", "close")
        self.assertEqual(code, 1)
        self.assertIn("close failed", err)
        with self.Session.begin() as session:
            self.assertIsNotNone(ProtocolRegistry.get_by_label(session, "main"))

    def test_close_returns_pool_to_admin(self):
        with mock.patch.dict(os.environ, {"RAFFLE_ADMIN_ID": "admin"}):
            code, out, _ = self._run("close")
        self.assertEqual(code, 0)
        self.assertIn("3000 returned to admin", out)
        with self.Session.begin() as session:
            self.assertIsNone(ProtocolRegistry.get_by_label(session, "main"))
            self.assertEqual(balance_of(session, "admin"), 4 * PRICE)

    def test_admin_commands_need_an_identity(self):
        code, _, err = self._run("select-winner", "4")
        self.assertEqual(code, 2)
        self.assertIn("RAFFLE_ADMIN_ID", err)

    def test_unknown_protocol(self):
        code, _, err = self._run("--label", "missing", "status")
        self.assertEqual(code, 1)
        self.assertIn("Protocol 'missing' not found", err)


if __name__ == "__main__":
    unittest.main()
