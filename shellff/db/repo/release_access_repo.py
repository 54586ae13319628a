from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.models.release_access import ReleaseAccess


class ReleaseAccessRepo:
    @staticmethod
    async def get_by_release_and_user(
        session: AsyncSession,
        *,
        release_id: int,
        user_id: int,
    ) -> ReleaseAccess | None:
        stmt = select(ReleaseAccess).where(
            ReleaseAccess.release_id == release_id,
            ReleaseAccess.user_id == user_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def grant(
        session: AsyncSession,
        *,
        release_id: int,
        user_id: int,
        source: str,
        unlock_code_id: int | None,
        granted_at: datetime,
    ) -> tuple[ReleaseAccess, bool]:
        """Insert the access row unless one exists; the flag is True when this call created it."""
        stmt = (
            insert(ReleaseAccess)
            .values(
                release_id=release_id,
                user_id=user_id,
                source=source,
                unlock_code_id=unlock_code_id,
                granted_at=granted_at,
            )
            .on_conflict_do_nothing(constraint="uq_release_access_release_user")
            .returning(ReleaseAccess.id)
        )
        result = await session.execute(stmt)
        inserted = result.scalar_one_or_none() is not None

        access = await ReleaseAccessRepo.get_by_release_and_user(
            session,
            release_id=release_id,
            user_id=user_id,
        )
        if access is None:
            raise RuntimeError("release access row missing after grant")
        return access, inserted

    @staticmethod
    async def count_by_user(session: AsyncSession, *, user_id: int) -> int:
        stmt = select(func.count(ReleaseAccess.id)).where(ReleaseAccess.user_id == user_id)
        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)
