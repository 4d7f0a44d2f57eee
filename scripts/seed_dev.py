import logging

from stakeraffle.db.engine import get_sessionmaker, make_engine
from stakeraffle.lottery.clock import SystemClock
from stakeraffle.models import Base
from stakeraffle.models.ledger import mint
from stakeraffle.settings import RaffleSettings
from stakeraffle.workflows import deposit, init_round, initialize, seed_prize

ADMIN = "admin-wallet"
VALIDATOR = "validator-vote-account"
WALLETS = {
    "alice-wallet": 5,
    "bob-wallet": 3,
    "carol-wallet": 8,
}
"""Sample wallets and the number of tickets each buys."""


def main() -> None:
    """Reset the development database and open a round with sample deposits."""
    logging.basicConfig(level=logging.INFO)
    engine = make_engine()

    # Drop and recreate all tables with foreign key checks off so the drop
    # order does not matter on SQLite.
    with engine.connect() as conn:
        conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
        Base.metadata.drop_all(bind=conn)
        conn.exec_driver_sql("PRAGMA foreign_keys=ON")

    Base.metadata.create_all(engine)
    Session = get_sessionmaker(engine)
    settings = RaffleSettings.from_env()
    now = SystemClock().now()

    with Session.begin() as session:
        mint(session, ADMIN, settings.reserve_floor + 100 * settings.ticket_price)
        for wallet, tickets in WALLETS.items():
            mint(session, wallet, 2 * tickets * settings.ticket_price)
        session.flush()

        registry = initialize(session, ADMIN, VALIDATOR, settings=settings)
        seed_prize(session, registry, ADMIN, 10 * settings.ticket_price)
        round_ = init_round(session, registry, 1, clock=now)

        for wallet, tickets in WALLETS.items():
            deposit(session, registry, wallet, tickets * settings.ticket_price, round_, clock=now)

    print("Development database seeded.")


if __name__ == "__main__":
    main()
