"""Compare the ORM schema of the raffle with the configured database.

Exit codes: 0 no drift, 1 drift found, 2 the comparison could not run.
"""

from __future__ import annotations

import sys

from alembic.autogenerate import api as ag_api
from alembic.runtime.migration import MigrationContext
from sqlalchemy.exc import SQLAlchemyError

from stakeraffle.db.engine import make_engine
from stakeraffle.models import Base


def _describe(ops, depth: int = 0) -> list[str]:
    lines = []
    for op in ops:
        lines.append(f"{'  ' * depth}- {op}")
        lines.extend(_describe(getattr(op, "ops", None) or [], depth + 1))
    return lines


def diff_lines(connection) -> list[str]:
    """Operations needed to bring the database in line with the models."""
    context = MigrationContext.configure(
        connection=connection,
        opts={
            "compare_type": True,
            "compare_server_default": True,
            "render_as_batch": connection.dialect.name == "sqlite",
        },
    )
    upgrade_ops = ag_api.produce_migrations(context, Base.metadata).upgrade_ops
    if upgrade_ops is None or upgrade_ops.is_empty():
        return []
    return _describe(upgrade_ops.ops or [])


def main() -> int:
    engine = make_engine()
    target = engine.url.render_as_string(hide_password=True)
    try:
        with engine.connect() as connection:
            lines = diff_lines(connection)
    except SQLAlchemyError as exc:
        print(f"Schema drift check could not run against {target}: {exc}", file=sys.stderr)
        return 2
    finally:
        engine.dispose()

    if not lines:
        print(f"Schema drift check: {target} matches the models.")
        return 0
    print(f"Schema drift check: {target} differs from the models:")
    print("\n".join(lines))
    return 1


if __name__ == "__main__":
    raise SystemExit(main())
