"""Guard for the destructive reset that integration tests run between cases.

``reset_unlock_tables`` is the only place that truncates the Shellff tables and it
refuses to touch anything but a local PostgreSQL database whose name says "test".
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy import text
from sqlalchemy.engine import URL, make_url

from shellff.db.database import Database

LOCAL_DATABASE_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "postgres", "shellff_postgres"})

# Children first so the CASCADE never has to reach past this list.
UNLOCK_TABLES = (
    "code_redemption_logs",
    "release_access",
    "unlock_codes",
    "unlock_code_batches",
    "release_tracks",
    "releases",
    "users",
)


class UnsafeIntegrationTargetError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class IntegrationTarget:
    database_name: str
    host: str
    problems: tuple[str, ...]

    @property
    def is_safe(self) -> bool:
        return not self.problems


def inspect_integration_target(database_url: str | URL) -> IntegrationTarget:
    url = make_url(database_url)
    database_name = (url.database or "").strip()
    host = (url.host or "").strip().lower()

    problems: list[str] = []
    if url.get_backend_name() != "postgresql":
        problems.append(f"backend '{url.get_backend_name()}' is not postgresql")
    if "test" not in database_name.lower():
        problems.append(f"database name '{database_name}' does not contain 'test'")
    if host not in LOCAL_DATABASE_HOSTS:
        problems.append(f"host '{host}' is not a local database host")

    return IntegrationTarget(database_name=database_name, host=host, problems=tuple(problems))


def require_integration_target(database_url: str | URL) -> IntegrationTarget:
    target = inspect_integration_target(database_url)
    if not target.is_safe:
        raise UnsafeIntegrationTargetError(
            "Refusing to reset Shellff tables on this database: "
            + "; ".join(target.problems)
            + ". Point DATABASE_URL at a local test database such as 'shellff_test'."
        )
    return target


def truncate_statement(tables: tuple[str, ...] = UNLOCK_TABLES) -> str:
    return f"TRUNCATE TABLE {', '.join(tables)} RESTART IDENTITY CASCADE"


async def reset_unlock_tables(database: Database) -> IntegrationTarget:
    # The engine URL is what will actually be connected to, whatever Settings said.
    target = require_integration_target(database.engine.url)
    async with database.engine.begin() as conn:
        await conn.execute(text(truncate_statement()))
    return target
