from __future__ import annotations

import logging
import os
import sys

from dotenv import load_dotenv

from stakeraffle.db.engine import get_sessionmaker, make_engine
from stakeraffle.keeper import RaffleKeeper
from stakeraffle.settings import RaffleSettings


def main(argv: list[str]) -> int:
    """Run the keeper for ``RAFFLE_LABEL`` (default ``main``) as ``RAFFLE_KEEPER_ID``.

    An optional argument limits the number of cycles.
    """
    load_dotenv()
    logging.basicConfig(
        level=os.getenv("LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    operator = os.getenv("RAFFLE_KEEPER_ID")
    if not operator:
        print("RAFFLE_KEEPER_ID must name the keeper's identity", file=sys.stderr)
        return 2

    engine = make_engine()
    keeper = RaffleKeeper(
        get_sessionmaker(engine),
        os.getenv("RAFFLE_LABEL", "main"),
        operator,
        settings=RaffleSettings.from_env(),
    )
    try:
        keeper.run_forever(max_cycles=int(argv[0]) if argv else None)
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Keeper stopped")
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
