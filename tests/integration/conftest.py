from __future__ import annotations

from collections.abc import AsyncIterator

import pytest
from sqlalchemy import text

from shellff.core.config import get_settings
from shellff.db.database import Database
from shellff.db.integration_target import require_integration_target, reset_unlock_tables


@pytest.fixture(scope="session", autouse=True)
def guard_integration_db_target() -> None:
    require_integration_target(get_settings().database_url)


@pytest.fixture
async def database() -> AsyncIterator[Database]:
    # One engine per test to avoid cross-event-loop asyncpg reuse.
    db = Database.from_settings(get_settings())

    try:
        async with db.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # pragma: no cover - environment-dependent
        await db.dispose()
        pytest.skip(f"Postgres is required for integration tests: {exc}")

    await reset_unlock_tables(db)

    yield db

    await db.dispose()
