from __future__ import annotations

from datetime import datetime, timezone

import structlog

from shellff.db.database import Database
from shellff.unlock.attempts import record_attempt, record_failed_attempt
from shellff.unlock.batch import issue_code_batch, summarize_release_codes
from shellff.unlock.constants import ATTEMPT_RESULT_ACCEPTED, LOGGED_ATTEMPT_RESULTS
from shellff.unlock.errors import UnlockCodeError
from shellff.unlock.rate_limit import enforce_rate_limit
from shellff.unlock.redemption import redeem_unlock_code
from shellff.unlock.stats import get_user_redemption_stats
from shellff.unlock.types import (
    Identity,
    IssuedBatch,
    RedemptionContext,
    RedemptionStats,
    ReleaseCodeSummary,
    UnlockRedeemResult,
    UnlockValidationResult,
)
from shellff.unlock.validation import validate_unlock_code

logger = structlog.get_logger(__name__)


class UnlockCodeService:
    """Transaction boundary around the unlock-code operations.

    Each public method opens its own session on the injected ``Database``.
    """

    def __init__(self, database: Database, *, batch_max: int = 10_000) -> None:
        self._database = database
        self._batch_max = batch_max

    async def validate(self, *, identity: Identity, raw_code: str) -> UnlockValidationResult:
        async with self._database.session() as session:
            result = await validate_unlock_code(session, raw_code=raw_code, identity=identity)

        if not result.valid:
            logger.info(
                "unlock_code_validation_failed",
                user_id=identity.user_id,
                reason=result.error_reason,
            )
        return result

    async def redeem(
        self,
        *,
        identity: Identity,
        raw_code: str,
        context: RedemptionContext | None = None,
        now_utc: datetime | None = None,
    ) -> UnlockRedeemResult:
        now_utc = now_utc or datetime.now(timezone.utc)
        context = context or RedemptionContext()

        try:
            async with self._database.begin() as session:
                await enforce_rate_limit(
                    session,
                    identity=identity,
                    client_ip=context.client_ip,
                    now_utc=now_utc,
                )
                result = await redeem_unlock_code(
                    session,
                    raw_code=raw_code,
                    identity=identity,
                    now_utc=now_utc,
                )
                await record_attempt(
                    session,
                    identity=identity,
                    raw_code=raw_code,
                    result=ATTEMPT_RESULT_ACCEPTED,
                    context=context,
                    now_utc=now_utc,
                    unlock_code_id=result.unlock_code_id,
                )
        except UnlockCodeError as exc:
            logger.info(
                "unlock_code_redeem_rejected",
                user_id=identity.user_id,
                reason=exc.reason,
                unlock_code_id=exc.unlock_code_id,
            )
            if exc.reason in LOGGED_ATTEMPT_RESULTS:
                await record_failed_attempt(
                    self._database,
                    identity=identity,
                    raw_code=raw_code,
                    result=exc.reason,
                    context=context,
                    now_utc=now_utc,
                    unlock_code_id=exc.unlock_code_id,
                )
            raise

        logger.info(
            "unlock_code_redeemed",
            user_id=identity.user_id,
            unlock_code_id=result.unlock_code_id,
            release_id=result.release.release_id,
            idempotent_replay=result.idempotent_replay,
        )
        return result

    async def get_user_redemption_stats(self, *, identity: Identity) -> RedemptionStats:
        async with self._database.session() as session:
            return await get_user_redemption_stats(session, identity=identity)

    async def issue_batch(
        self,
        *,
        release_id: int,
        quantity: int,
        created_by: str,
        batch_key: str | None = None,
        now_utc: datetime | None = None,
    ) -> IssuedBatch:
        now_utc = now_utc or datetime.now(timezone.utc)
        async with self._database.begin() as session:
            batch = await issue_code_batch(
                session,
                release_id=release_id,
                quantity=quantity,
                created_by=created_by,
                now_utc=now_utc,
                max_quantity=self._batch_max,
                batch_key=batch_key,
            )

        logger.info(
            "unlock_code_batch_issued",
            batch_id=batch.batch_id,
            batch_key=batch.batch_key,
            release_id=release_id,
            quantity=len(batch.codes),
            created_by=created_by,
        )
        return batch

    async def summarize_release(self, *, release_id: int) -> ReleaseCodeSummary:
        async with self._database.session() as session:
            return await summarize_release_codes(session, release_id=release_id)
