import unittest

from stakeraffle.settings import (
    DEFAULT_EPOCH_DURATION_SECONDS,
    DEFAULT_RESERVE_FLOOR,
    DEFAULT_TICKET_PRICE,
    RaffleSettings,
)


class RaffleSettingsTestCase(unittest.TestCase):
    def test_defaults_match_reference_configuration(self):
        settings = RaffleSettings.from_env({})
        self.assertEqual(settings.ticket_price, 10_000_000)
        self.assertEqual(settings.epoch_duration_seconds, 120)
        self.assertEqual(settings.epoch_duration_ms, 120_000)
        self.assertEqual(settings.reserve_floor, DEFAULT_RESERVE_FLOOR)
        self.assertEqual(settings, RaffleSettings())

    def test_reads_environment_overrides(self):
        settings = RaffleSettings.from_env(
            {
                "RAFFLE_TICKET_PRICE": "5_000",
                "RAFFLE_EPOCH_DURATION_SECONDS": " 60 ",
                "RAFFLE_RESERVE_FLOOR": "0",
                "RAFFLE_KEEPER_INTERVAL_SECONDS": "5",
            }
        )
        self.assertEqual(settings.ticket_price, 5_000)
        self.assertEqual(settings.epoch_duration_ms, 60_000)
        self.assertEqual(settings.reserve_floor, 0)
        self.assertEqual(settings.keeper_interval_seconds, 5)

    def test_blank_values_fall_back_to_defaults(self):
        settings = RaffleSettings.from_env(
            {"RAFFLE_TICKET_PRICE": "", "RAFFLE_EPOCH_DURATION_SECONDS": "   "}
        )
        self.assertEqual(settings.ticket_price, DEFAULT_TICKET_PRICE)
        self.assertEqual(settings.epoch_duration_seconds, DEFAULT_EPOCH_DURATION_SECONDS)

    def test_rejects_non_integer_values(self):
        with self.assertRaises(ValueError):
            RaffleSettings.from_env({"RAFFLE_TICKET_PRICE": "ten"})

    def test_rejects_zero_ticket_price_and_duration(self):
        with self.assertRaises(ValueError):
            RaffleSettings.from_env({"RAFFLE_TICKET_PRICE": "0"})
        with self.assertRaises(ValueError):
            RaffleSettings.from_env({"RAFFLE_EPOCH_DURATION_SECONDS": "0"})
        with self.assertRaises(ValueError):
            RaffleSettings(ticket_price=0)

    def test_rejects_negative_reserve_floor(self):
        with self.assertRaises(ValueError):
            RaffleSettings.from_env({"RAFFLE_RESERVE_FLOOR": "-1"})
        with self.assertRaises(ValueError):
            RaffleSettings(reserve_floor=-1)


if __name__ == "__main__":
    unittest.main()
