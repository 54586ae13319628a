from __future__ import annotations

from datetime import datetime, timezone
from uuid import uuid4

from shellff.core.config import get_settings
from shellff.db.database import Database
from shellff.db.models.release_tracks import ReleaseTrack
from shellff.db.models.releases import Release
from shellff.db.models.users import User
from shellff.services.identity import build_session_token
from shellff.unlock.service import UnlockCodeService
from shellff.unlock.types import Identity

UTC = timezone.utc


async def _create_user(
    database: Database,
    *,
    email: str | None = None,
    display_name: str | None = "Listener",
    user_type: str = "LISTENER",
) -> Identity:
    async with database.begin() as session:
        user = User(
            public_id=f"usr_{uuid4().hex[:12]}",
            email=email or f"{uuid4().hex[:10]}@shellff.test",
            display_name=display_name,
            user_type=user_type,
            status="ACTIVE",
        )
        session.add(user)
        await session.flush()
        return Identity(user_id=user.id, public_id=user.public_id, email=user.email)


async def _create_release(
    database: Database,
    *,
    title: str = "Tidal Lines",
    artist_name: str = "Mira Vale",
    track_count: int = 3,
    physical_unlock_enabled: bool = True,
) -> int:
    creator = await _create_user(database, display_name=artist_name, user_type="CREATOR")
    async with database.begin() as session:
        release = Release(
            creator_user_id=creator.user_id,
            title=title,
            release_type="ALBUM",
            physical_unlock_enabled=physical_unlock_enabled,
        )
        session.add(release)
        await session.flush()

        session.add_all(
            ReleaseTrack(release_id=release.id, title=f"Track {position}", position=position)
            for position in range(1, track_count + 1)
        )
        await session.flush()
        return release.id


async def _issue_codes(database: Database, *, release_id: int, quantity: int) -> list[str]:
    batch = await UnlockCodeService(database).issue_batch(
        release_id=release_id,
        quantity=quantity,
        created_by="integration-test",
        now_utc=datetime.now(UTC),
    )
    return batch.codes


def _session_headers(identity: Identity) -> dict[str, str]:
    assert identity.email is not None
    token = build_session_token(email=identity.email, secret=get_settings().session_secret)
    return {"Authorization": f"Bearer {token}"}
