from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.database import Database
from shellff.db.models.code_redemption_logs import CodeRedemptionLog
from shellff.db.repo.redemption_logs_repo import RedemptionLogsRepo
from shellff.unlock.codes import normalize_unlock_code
from shellff.unlock.constants import ATTEMPTED_CODE_MAX_LENGTH
from shellff.unlock.types import Identity, RedemptionContext


async def record_attempt(
    session: AsyncSession,
    *,
    identity: Identity,
    raw_code: str,
    result: str,
    context: RedemptionContext,
    now_utc: datetime,
    unlock_code_id: int | None = None,
) -> None:
    await RedemptionLogsRepo.create_attempt(
        session,
        attempt=CodeRedemptionLog(
            user_id=identity.user_id,
            unlock_code_id=unlock_code_id,
            attempted_code=normalize_unlock_code(raw_code)[:ATTEMPTED_CODE_MAX_LENGTH],
            result=result,
            ip_address=context.client_ip,
            user_agent=context.user_agent,
            device_fingerprint=context.device_fingerprint,
            attempted_at=now_utc,
        ),
    )


async def record_failed_attempt(
    database: Database,
    *,
    identity: Identity,
    raw_code: str,
    result: str,
    context: RedemptionContext,
    now_utc: datetime,
    unlock_code_id: int | None = None,
) -> None:
    # Own transaction: the redeem transaction is rolled back on failure.
    async with database.begin() as attempt_session:
        await record_attempt(
            attempt_session,
            identity=identity,
            raw_code=raw_code,
            result=result,
            context=context,
            now_utc=now_utc,
            unlock_code_id=unlock_code_id,
        )
