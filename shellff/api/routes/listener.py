from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from shellff.api.deps import get_unlock_service, require_identity
from shellff.api.errors import ApiError
from shellff.unlock.service import UnlockCodeService
from shellff.unlock.types import Identity, RedemptionStats

from .unlock_codes_models import RedemptionEntryResponse, RedemptionStatsResponse

router = APIRouter(tags=["listener"])
logger = structlog.get_logger(__name__)


def _stats_as_response(stats: RedemptionStats) -> RedemptionStatsResponse:
    return RedemptionStatsResponse(
        total_redemptions=stats.total_redemptions,
        failed_attempts=stats.failed_attempts,
        active_access_count=stats.active_access_count,
        first_redeemed_at=stats.first_redeemed_at,
        last_redeemed_at=stats.last_redeemed_at,
        redemptions=[
            RedemptionEntryResponse(
                code=entry.code,
                release_id=entry.release_id,
                release_title=entry.release_title,
                artist_name=entry.artist_name,
                redeemed_at=entry.redeemed_at,
            )
            for entry in stats.redemptions
        ],
    )


@router.get(
    "/listener/redemption-stats",
    response_model=RedemptionStatsResponse,
    response_model_by_alias=True,
)
async def get_redemption_stats(
    identity: Identity = Depends(require_identity),
    service: UnlockCodeService = Depends(get_unlock_service),
) -> RedemptionStatsResponse:
    try:
        stats = await service.get_user_redemption_stats(identity=identity)
    except Exception as exc:
        logger.exception("redemption_stats_failed", user_id=identity.user_id)
        raise ApiError(500, "Failed to get redemption statistics") from exc

    return _stats_as_response(stats)
