from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.repo.redemption_logs_repo import RedemptionLogsRepo
from shellff.unlock.constants import (
    FAILED_ATTEMPT_RESULTS,
    REDEEM_MAX_FAILED_ATTEMPTS,
    REDEEM_RATE_LIMIT_WINDOW,
)
from shellff.unlock.errors import UnlockRateLimitedError
from shellff.unlock.types import Identity


async def enforce_rate_limit(
    session: AsyncSession,
    *,
    identity: Identity,
    client_ip: str | None,
    now_utc: datetime,
) -> None:
    window_start = now_utc - REDEEM_RATE_LIMIT_WINDOW
    user_failures = await RedemptionLogsRepo.count_attempts(
        session,
        user_id=identity.user_id,
        since_utc=window_start,
        attempt_results=FAILED_ATTEMPT_RESULTS,
    )
    if user_failures >= REDEEM_MAX_FAILED_ATTEMPTS:
        raise UnlockRateLimitedError

    if client_ip is None:
        return

    ip_failures = await RedemptionLogsRepo.count_attempts(
        session,
        ip_address=client_ip,
        since_utc=window_start,
        attempt_results=FAILED_ATTEMPT_RESULTS,
    )
    if ip_failures >= REDEEM_MAX_FAILED_ATTEMPTS:
        raise UnlockRateLimitedError
