from __future__ import annotations

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect

from stakeraffle.db.engine import make_engine
from stakeraffle.models import Base

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def alembic_config() -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return cfg


def upgrade_db(target_revision: str = "head") -> None:
    """Migrate the configured database to ``target_revision``."""
    command.upgrade(alembic_config(), target_revision)


def report_tables() -> list[str]:
    """Print the raffle tables and return any the database is still missing."""
    engine = make_engine()
    try:
        present = set(inspect(engine).get_table_names())
    finally:
        engine.dispose()
    expected = set(Base.metadata.tables)
    print("Raffle tables:", ", ".join(sorted(expected & present)) or "(none)")
    missing = sorted(expected - present)
    if missing:
        print("Missing tables:", ", ".join(missing))
    return missing


def main(argv: list[str]) -> int:
    """Apply migrations (``head`` unless a revision is given) and check the schema."""
    upgrade_db(argv[0] if argv else "head")
    return 1 if report_tables() else 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
