from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from shellff.db.repo.release_access_repo import ReleaseAccessRepo
from shellff.db.repo.releases_repo import ReleasesRepo
from shellff.db.repo.unlock_codes_repo import UnlockCodesRepo
from shellff.unlock.codes import normalize_unlock_code, validate_code_format
from shellff.unlock.constants import DEFAULT_COVER_ART, UNKNOWN_ARTIST_NAME
from shellff.unlock.errors import (
    ERRORS_BY_REASON,
    UnlockCodeAlreadyRedeemedError,
    UnlockCodeError,
    UnlockCodeInvalidFormatError,
    UnlockCodeNotFoundError,
)
from shellff.unlock.types import (
    OUTCOME_INVALID,
    OUTCOME_OWNED,
    OUTCOME_REDEEMABLE,
    Identity,
    ReleaseSummary,
    UnlockValidationResult,
)


async def load_release_summary(session: AsyncSession, release_id: int) -> ReleaseSummary | None:
    row = await ReleasesRepo.get_summary_row(session, release_id)
    if row is None:
        return None

    release, artist_name, track_count = row
    return ReleaseSummary(
        release_id=release.id,
        title=release.title,
        artist_name=artist_name or UNKNOWN_ARTIST_NAME,
        cover_art=release.cover_art or DEFAULT_COVER_ART,
        release_type=release.release_type,
        track_count=track_count,
    )


def _invalid(
    error: type[UnlockCodeError],
    *,
    code: str | None = None,
    unlock_code_id: int | None = None,
) -> UnlockValidationResult:
    return UnlockValidationResult(
        outcome=OUTCOME_INVALID,
        code=code,
        unlock_code_id=unlock_code_id,
        error_reason=error.reason,
        error_message=error.message,
    )


def raise_for_invalid(result: UnlockValidationResult) -> None:
    if result.valid:
        return
    error = ERRORS_BY_REASON.get(result.error_reason or "", UnlockCodeError)
    raise error(code=result.code, unlock_code_id=result.unlock_code_id)


async def validate_unlock_code(
    session: AsyncSession,
    *,
    raw_code: str,
    identity: Identity,
) -> UnlockValidationResult:
    """Decide whether ``identity`` may redeem ``raw_code``. Never writes."""
    code = normalize_unlock_code(raw_code)
    if not validate_code_format(code):
        return _invalid(UnlockCodeInvalidFormatError)

    unlock_code = await UnlockCodesRepo.get_by_code(session, code)
    if unlock_code is None:
        return _invalid(UnlockCodeNotFoundError, code=code)

    redeemed_by_caller = False
    if unlock_code.status != "UNUSED" or unlock_code.redeemed_by_user_id is not None:
        if unlock_code.redeemed_by_user_id != identity.user_id:
            return _invalid(
                UnlockCodeAlreadyRedeemedError,
                code=code,
                unlock_code_id=unlock_code.id,
            )
        redeemed_by_caller = True

    release = await load_release_summary(session, unlock_code.release_id)
    if release is None:
        return _invalid(UnlockCodeNotFoundError, code=code, unlock_code_id=unlock_code.id)

    if redeemed_by_caller:
        outcome = OUTCOME_OWNED
    else:
        access = await ReleaseAccessRepo.get_by_release_and_user(
            session,
            release_id=unlock_code.release_id,
            user_id=identity.user_id,
        )
        outcome = OUTCOME_OWNED if access is not None else OUTCOME_REDEEMABLE

    return UnlockValidationResult(
        outcome=outcome,
        code=code,
        release=release,
        unlock_code_id=unlock_code.id,
        redeemed_by_caller=redeemed_by_caller,
    )
