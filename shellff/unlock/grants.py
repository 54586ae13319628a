from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.models.release_access import ReleaseAccess
from shellff.db.repo.release_access_repo import ReleaseAccessRepo
from shellff.unlock.constants import ACCESS_SOURCE_UNLOCK_CODE
from shellff.unlock.types import Identity, ReleaseAccessSummary


async def grant_release_access(
    session: AsyncSession,
    *,
    identity: Identity,
    release_id: int,
    unlock_code_id: int,
    now_utc: datetime,
) -> tuple[ReleaseAccess, bool]:
    return await ReleaseAccessRepo.grant(
        session,
        release_id=release_id,
        user_id=identity.user_id,
        source=ACCESS_SOURCE_UNLOCK_CODE,
        unlock_code_id=unlock_code_id,
        granted_at=now_utc,
    )


def summarize_access(access: ReleaseAccess) -> ReleaseAccessSummary:
    return ReleaseAccessSummary(
        release_id=access.release_id,
        granted_at=access.granted_at,
        source=access.source,
    )
