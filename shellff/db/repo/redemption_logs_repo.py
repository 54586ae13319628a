from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.models.code_redemption_logs import CodeRedemptionLog


class RedemptionLogsRepo:
    @staticmethod
    async def create_attempt(
        session: AsyncSession,
        *,
        attempt: CodeRedemptionLog,
    ) -> CodeRedemptionLog:
        session.add(attempt)
        await session.flush()
        return attempt

    @staticmethod
    async def count_attempts(
        session: AsyncSession,
        *,
        user_id: int | None = None,
        ip_address: str | None = None,
        since_utc: datetime | None = None,
        attempt_results: Iterable[str] | None = None,
    ) -> int:
        stmt = select(func.count(CodeRedemptionLog.id))
        if user_id is not None:
            stmt = stmt.where(CodeRedemptionLog.user_id == user_id)
        if ip_address is not None:
            stmt = stmt.where(CodeRedemptionLog.ip_address == ip_address)
        if since_utc is not None:
            stmt = stmt.where(CodeRedemptionLog.attempted_at >= since_utc)
        if attempt_results is not None:
            values = tuple(attempt_results)
            if not values:
                return 0
            stmt = stmt.where(CodeRedemptionLog.result.in_(values))

        result = await session.execute(stmt)
        return int(result.scalar_one() or 0)
