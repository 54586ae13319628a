from __future__ import annotations

from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.repo.release_access_repo import ReleaseAccessRepo
from shellff.db.repo.unlock_codes_repo import UnlockCodesRepo
from shellff.unlock.errors import (
    UnlockCodeAlreadyOwnedError,
    UnlockCodeAlreadyRedeemedError,
    UnlockCodeNotFoundError,
)
from shellff.unlock.grants import grant_release_access, summarize_access
from shellff.unlock.types import Identity, UnlockRedeemResult
from shellff.unlock.validation import raise_for_invalid, validate_unlock_code


async def redeem_unlock_code(
    session: AsyncSession,
    *,
    raw_code: str,
    identity: Identity,
    now_utc: datetime,
) -> UnlockRedeemResult:
    validation = await validate_unlock_code(session, raw_code=raw_code, identity=identity)
    raise_for_invalid(validation)

    code = validation.code
    release = validation.release
    unlock_code_id = validation.unlock_code_id
    if code is None or release is None or unlock_code_id is None:
        raise UnlockCodeNotFoundError(code=code, unlock_code_id=unlock_code_id)

    if validation.redeemed_by_caller:
        access = await ReleaseAccessRepo.get_by_release_and_user(
            session,
            release_id=release.release_id,
            user_id=identity.user_id,
        )
        if access is None:
            access, _ = await grant_release_access(
                session,
                identity=identity,
                release_id=release.release_id,
                unlock_code_id=unlock_code_id,
                now_utc=now_utc,
            )
        return UnlockRedeemResult(
            code=code,
            release=release,
            access=summarize_access(access),
            idempotent_replay=True,
            unlock_code_id=unlock_code_id,
        )

    if validation.already_owned:
        raise UnlockCodeAlreadyOwnedError(code=code, unlock_code_id=unlock_code_id)

    committed = await UnlockCodesRepo.mark_redeemed(
        session,
        unlock_code_id=unlock_code_id,
        user_id=identity.user_id,
        now_utc=now_utc,
    )
    if not committed:
        raise UnlockCodeAlreadyRedeemedError(code=code, unlock_code_id=unlock_code_id)

    access, inserted = await grant_release_access(
        session,
        identity=identity,
        release_id=release.release_id,
        unlock_code_id=unlock_code_id,
        now_utc=now_utc,
    )
    if not inserted:
        # A parallel redemption of another code for this release won the access row.
        raise UnlockCodeAlreadyOwnedError(code=code, unlock_code_id=unlock_code_id)
    return UnlockRedeemResult(
        code=code,
        release=release,
        access=summarize_access(access),
        idempotent_replay=False,
        unlock_code_id=unlock_code_id,
    )
