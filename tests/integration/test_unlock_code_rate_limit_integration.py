from __future__ import annotations

from datetime import datetime, timedelta

import pytest
from sqlalchemy import func, select

from shellff.db.models.code_redemption_logs import CodeRedemptionLog
from shellff.unlock.errors import UnlockCodeNotFoundError, UnlockRateLimitedError
from shellff.unlock.service import UnlockCodeService
from shellff.unlock.types import RedemptionContext
from tests.integration.unlock_fixtures import UTC, _create_release, _create_user, _issue_codes


@pytest.mark.asyncio
async def test_ten_failed_attempts_block_even_valid_codes(database) -> None:
    release_id = await _create_release(database)
    [code] = await _issue_codes(database, release_id=release_id, quantity=1)
    listener = await _create_user(database)
    service = UnlockCodeService(database)
    now_utc = datetime.now(UTC)

    for attempt in range(10):
        with pytest.raises(UnlockCodeNotFoundError):
            await service.redeem(
                identity=listener,
                raw_code=f"SHF-MISS-{attempt:04d}",
                now_utc=now_utc,
            )

    with pytest.raises(UnlockRateLimitedError):
        await service.redeem(identity=listener, raw_code=code, now_utc=now_utc)

    later = now_utc + timedelta(hours=1, seconds=1)
    result = await service.redeem(identity=listener, raw_code=code, now_utc=later)
    assert result.code == code

    async with database.session() as session:
        rate_limited = await session.scalar(
            select(func.count(CodeRedemptionLog.id)).where(
                CodeRedemptionLog.user_id == listener.user_id,
                CodeRedemptionLog.result == "RATE_LIMITED",
            )
        )
    assert rate_limited == 1


@pytest.mark.asyncio
async def test_failed_attempts_from_one_ip_block_other_users(database) -> None:
    release_id = await _create_release(database)
    [code] = await _issue_codes(database, release_id=release_id, quantity=1)
    service = UnlockCodeService(database)
    context = RedemptionContext(client_ip="198.51.100.23")
    now_utc = datetime.now(UTC)

    for attempt in range(10):
        guesser = await _create_user(database)
        with pytest.raises(UnlockCodeNotFoundError):
            await service.redeem(
                identity=guesser,
                raw_code=f"SHF-MISS-{attempt:04d}",
                context=context,
                now_utc=now_utc,
            )

    newcomer = await _create_user(database)
    with pytest.raises(UnlockRateLimitedError):
        await service.redeem(identity=newcomer, raw_code=code, context=context, now_utc=now_utc)
