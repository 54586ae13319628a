from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from shellff.core.config import Settings


class Database:
    """Owns the async engine and the session factory of one application instance.

    Built once by ``create_app`` and disposed on shutdown; request handlers get
    it through ``shellff.api.deps.get_database`` instead of importing a global.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_url(cls, database_url: str, *, pool_size: int = 10, echo: bool = False) -> Database:
        engine = create_async_engine(
            database_url,
            pool_size=pool_size,
            pool_pre_ping=True,
            echo=echo,
        )
        return cls(engine)

    @classmethod
    def from_settings(cls, settings: Settings) -> Database:
        return cls.from_url(
            settings.database_url,
            pool_size=settings.database_pool_size,
            echo=settings.database_echo,
        )

    def session(self) -> AsyncSession:
        return self.session_factory()

    @asynccontextmanager
    async def begin(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory.begin() as session:
            yield session

    async def dispose(self) -> None:
        await self.engine.dispose()
