from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.repo.redemption_logs_repo import RedemptionLogsRepo
from shellff.db.repo.release_access_repo import ReleaseAccessRepo
from shellff.db.repo.unlock_codes_repo import UnlockCodesRepo
from shellff.unlock.constants import FAILED_ATTEMPT_RESULTS, UNKNOWN_ARTIST_NAME
from shellff.unlock.types import Identity, RedemptionEntry, RedemptionStats


async def get_user_redemption_stats(
    session: AsyncSession,
    *,
    identity: Identity,
) -> RedemptionStats:
    rows = await UnlockCodesRepo.list_redemptions_by_user(session, user_id=identity.user_id)
    failed_attempts = await RedemptionLogsRepo.count_attempts(
        session,
        user_id=identity.user_id,
        attempt_results=FAILED_ATTEMPT_RESULTS,
    )
    active_access_count = await ReleaseAccessRepo.count_by_user(session, user_id=identity.user_id)

    entries = [
        RedemptionEntry(
            code=code,
            release_id=release_id,
            release_title=release_title,
            artist_name=artist_name or UNKNOWN_ARTIST_NAME,
            redeemed_at=redeemed_at,
        )
        for code, release_id, release_title, artist_name, redeemed_at in rows
    ]
    return RedemptionStats(
        total_redemptions=len(entries),
        failed_attempts=failed_attempts,
        active_access_count=active_access_count,
        first_redeemed_at=entries[0].redeemed_at if entries else None,
        last_redeemed_at=entries[-1].redeemed_at if entries else None,
        redemptions=entries,
    )
