import logging
import os
import sys

from stakeraffle.cli import main

if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING"))
    raise SystemExit(main(sys.argv[1:]))
