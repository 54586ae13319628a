from __future__ import annotations

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.models.release_tracks import ReleaseTrack
from shellff.db.models.releases import Release
from shellff.db.models.users import User


class ReleasesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, release_id: int) -> Release | None:
        return await session.get(Release, release_id)

    @staticmethod
    async def get_summary_row(
        session: AsyncSession,
        release_id: int,
    ) -> tuple[Release, str | None, int] | None:
        """Release together with its creator's display name and track count."""
        track_count = (
            select(func.count(ReleaseTrack.id))
            .where(ReleaseTrack.release_id == Release.id)
            .correlate(Release)
            .scalar_subquery()
        )
        stmt = (
            select(Release, User.display_name, track_count)
            .join(User, User.id == Release.creator_user_id)
            .where(Release.id == release_id)
        )
        result = await session.execute(stmt)
        row = result.one_or_none()
        if row is None:
            return None
        release, artist_name, tracks = row
        return release, artist_name, int(tracks or 0)
