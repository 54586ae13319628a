from __future__ import annotations

import secrets
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.models.unlock_code_batches import UnlockCodeBatch
from shellff.db.models.unlock_codes import UnlockCode
from shellff.db.repo.releases_repo import ReleasesRepo
from shellff.db.repo.unlock_codes_repo import UnlockCodesRepo
from shellff.unlock.codes import generate_batch_codes
from shellff.unlock.constants import DEFAULT_BATCH_MAX
from shellff.unlock.errors import UnlockReleaseNotEnabledError, UnlockReleaseNotFoundError
from shellff.unlock.types import IssuedBatch, ReleaseCodeSummary


def build_batch_key(now_utc: datetime) -> str:
    return f"batch_{now_utc:%Y%m%d%H%M%S}_{secrets.token_hex(4)}"


async def generate_fresh_codes(
    session: AsyncSession,
    *,
    quantity: int,
    max_quantity: int = DEFAULT_BATCH_MAX,
) -> list[str]:
    """Generate ``quantity`` codes, redrawing any that already exist in storage."""
    accepted: list[str] = []
    seen: set[str] = set()
    pending = generate_batch_codes(quantity, max_quantity=max_quantity)

    while pending:
        seen.update(pending)
        stored = await UnlockCodesRepo.list_existing_codes(session, pending)
        accepted.extend(code for code in pending if code not in stored)

        missing = quantity - len(accepted)
        pending = (
            generate_batch_codes(missing, existing_codes=seen, max_quantity=max_quantity)
            if missing > 0
            else []
        )

    return accepted


async def issue_code_batch(
    session: AsyncSession,
    *,
    release_id: int,
    quantity: int,
    created_by: str,
    now_utc: datetime,
    max_quantity: int,
    batch_key: str | None = None,
) -> IssuedBatch:
    if quantity <= 0:
        raise ValueError("quantity must be positive")
    if quantity > max_quantity:
        raise ValueError(f"quantity must not exceed {max_quantity}")

    release = await ReleasesRepo.get_by_id(session, release_id)
    if release is None:
        raise UnlockReleaseNotFoundError
    if not release.physical_unlock_enabled:
        raise UnlockReleaseNotEnabledError

    codes = await generate_fresh_codes(session, quantity=quantity, max_quantity=max_quantity)
    batch = await UnlockCodesRepo.create_batch(
        session,
        batch=UnlockCodeBatch(
            batch_key=batch_key or build_batch_key(now_utc),
            release_id=release_id,
            created_by=created_by,
            total_codes=len(codes),
            created_at=now_utc,
            metadata_={"release_title": release.title},
        ),
    )
    await UnlockCodesRepo.create_codes(
        session,
        codes=[
            UnlockCode(
                code=code,
                release_id=release_id,
                batch_id=batch.id,
                status="UNUSED",
                redeemed_by_user_id=None,
                redeemed_at=None,
                created_at=now_utc,
            )
            for code in codes
        ],
    )
    return IssuedBatch(
        batch_id=batch.id,
        batch_key=batch.batch_key,
        release_id=release_id,
        codes=codes,
        created_at=now_utc,
    )


async def summarize_release_codes(session: AsyncSession, *, release_id: int) -> ReleaseCodeSummary:
    release = await ReleasesRepo.get_by_id(session, release_id)
    if release is None:
        raise UnlockReleaseNotFoundError

    counts = await UnlockCodesRepo.count_by_status_for_release(session, release_id=release_id)
    redeemed = counts.get("REDEEMED", 0)
    unused = counts.get("UNUSED", 0)
    return ReleaseCodeSummary(
        release_id=release_id,
        codes_total=sum(counts.values()),
        codes_redeemed=redeemed,
        codes_unused=unused,
    )
