from __future__ import annotations

import argparse
import asyncio
import re

import asyncpg
from alembic import command
from alembic.config import Config
from sqlalchemy.engine import make_url

from shellff.core.config import get_settings
from shellff.db.integration_target import inspect_integration_target

IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Create the local integration test database")
    parser.add_argument(
        "--migrate",
        action="store_true",
        help="run alembic upgrade head after the database exists",
    )
    parser.add_argument("--alembic-ini", default="alembic.ini")
    return parser.parse_args()


def _validate_target(database_url: str) -> str:
    target = inspect_integration_target(database_url)
    if not target.is_safe:
        raise RuntimeError(
            f"Refusing to create database '{target.database_name}': {'; '.join(target.problems)}"
        )
    if IDENTIFIER_RE.fullmatch(target.database_name) is None:
        raise RuntimeError(
            f"Unsupported database name '{target.database_name}'. "
            "Only [A-Za-z0-9_] identifiers are supported."
        )
    return target.database_name


async def _ensure_database_exists(database_url: str) -> bool:
    db_name = _validate_target(database_url)
    parsed = make_url(database_url)
    if parsed.username is None:
        raise RuntimeError("DATABASE_URL username is required.")

    conn = await asyncpg.connect(
        host=parsed.host or "localhost",
        port=int(parsed.port or 5432),
        user=parsed.username,
        password=parsed.password,
        database="postgres",
    )
    try:
        exists = await conn.fetchval("SELECT 1 FROM pg_database WHERE datname = $1", db_name)
        if exists:
            return False
        await conn.execute(f'CREATE DATABASE "{db_name}"')
        return True
    finally:
        await conn.close()


def main() -> int:
    args = _parse_args()
    database_url = get_settings().database_url

    created = asyncio.run(_ensure_database_exists(database_url))
    parsed = make_url(database_url)
    print(  # noqa: T201
        f"ensure_test_db: {'created' if created else 'exists'} db={parsed.database} "
        f"host={parsed.host}:{parsed.port or 5432}"
    )

    if args.migrate:
        command.upgrade(Config(args.alembic_ini), "head")
        print("ensure_test_db: migrated to head")  # noqa: T201
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
