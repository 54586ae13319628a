from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.models.releases import Release
from shellff.db.models.unlock_code_batches import UnlockCodeBatch
from shellff.db.models.unlock_codes import UnlockCode
from shellff.db.models.users import User


class UnlockCodesRepo:
    @staticmethod
    async def get_by_code(session: AsyncSession, code: str) -> UnlockCode | None:
        stmt = select(UnlockCode).where(UnlockCode.code == code)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def mark_redeemed(
        session: AsyncSession,
        *,
        unlock_code_id: int,
        user_id: int,
        now_utc: datetime,
    ) -> bool:
        """Flip UNUSED -> REDEEMED in one guarded UPDATE.

        Returns False when another transaction already redeemed the code; the
        row lock taken by the winner makes concurrent callers re-check the
        status predicate after it commits.
        """
        stmt = (
            update(UnlockCode)
            .where(
                UnlockCode.id == unlock_code_id,
                UnlockCode.status == "UNUSED",
                UnlockCode.redeemed_by_user_id.is_(None),
            )
            .values(status="REDEEMED", redeemed_by_user_id=user_id, redeemed_at=now_utc)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return int(getattr(result, "rowcount", 0) or 0) == 1

    @staticmethod
    async def list_existing_codes(session: AsyncSession, codes: Sequence[str]) -> set[str]:
        values = tuple(codes)
        if not values:
            return set()
        stmt = select(UnlockCode.code).where(UnlockCode.code.in_(values))
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def create_batch(session: AsyncSession, *, batch: UnlockCodeBatch) -> UnlockCodeBatch:
        session.add(batch)
        await session.flush()
        return batch

    @staticmethod
    async def create_codes(
        session: AsyncSession,
        *,
        codes: Sequence[UnlockCode],
    ) -> list[UnlockCode]:
        rows = list(codes)
        session.add_all(rows)
        await session.flush()
        return rows

    @staticmethod
    async def list_redemptions_by_user(
        session: AsyncSession,
        *,
        user_id: int,
    ) -> list[tuple[str, int, str, str | None, datetime]]:
        stmt = (
            select(
                UnlockCode.code,
                UnlockCode.release_id,
                Release.title,
                User.display_name,
                UnlockCode.redeemed_at,
            )
            .join(Release, Release.id == UnlockCode.release_id)
            .join(User, User.id == Release.creator_user_id)
            .where(
                UnlockCode.redeemed_by_user_id == user_id,
                UnlockCode.status == "REDEEMED",
            )
            .order_by(UnlockCode.redeemed_at.asc(), UnlockCode.id.asc())
        )
        result = await session.execute(stmt)
        return [
            (str(code), int(release_id), str(title), artist_name, redeemed_at)
            for code, release_id, title, artist_name, redeemed_at in result.all()
        ]

    @staticmethod
    async def count_by_status_for_release(
        session: AsyncSession,
        *,
        release_id: int,
    ) -> dict[str, int]:
        stmt = (
            select(UnlockCode.status, func.count(UnlockCode.id))
            .where(UnlockCode.release_id == release_id)
            .group_by(UnlockCode.status)
        )
        result = await session.execute(stmt)
        return {str(status): int(count) for status, count in result.all()}
