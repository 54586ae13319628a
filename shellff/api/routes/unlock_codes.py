from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends, Request

from shellff.api.deps import get_unlock_service, require_identity
from shellff.api.errors import ApiError
from shellff.core.config import get_settings
from shellff.services.internal_auth import extract_client_ip
from shellff.unlock.errors import UnlockCodeError, UnlockRateLimitedError
from shellff.unlock.service import UnlockCodeService
from shellff.unlock.types import Identity, RedemptionContext, ReleaseSummary, UnlockRedeemResult

from .unlock_codes_models import (
    ReleaseAccessResponse,
    ReleaseSummaryResponse,
    UnlockCodeRedeemRequest,
    UnlockCodeRedeemResponse,
    UnlockCodeValidateRequest,
    UnlockCodeValidateResponse,
)

router = APIRouter(tags=["unlock-codes"])
logger = structlog.get_logger(__name__)

REDEEM_SUCCESS_MESSAGE = "Code redeemed successfully"


def _require_code(raw_code: str | None) -> str:
    if raw_code is None or not raw_code.strip():
        raise ApiError(400, "Code is required")
    return raw_code


def _release_as_response(release: ReleaseSummary) -> ReleaseSummaryResponse:
    return ReleaseSummaryResponse(
        id=release.release_id,
        title=release.title,
        artist=release.artist_name,
        cover_art=release.cover_art,
        release_type=release.release_type,
        track_count=release.track_count,
    )


def _redeem_as_response(result: UnlockRedeemResult) -> UnlockCodeRedeemResponse:
    return UnlockCodeRedeemResponse(
        message=REDEEM_SUCCESS_MESSAGE,
        idempotent_replay=result.idempotent_replay,
        release=_release_as_response(result.release),
        access=ReleaseAccessResponse(
            release_id=result.access.release_id,
            granted_at=result.access.granted_at,
            source=result.access.source,
        ),
    )


@router.post(
    "/unlock-codes/validate",
    response_model=UnlockCodeValidateResponse,
    response_model_by_alias=True,
)
async def validate_unlock_code(
    payload: UnlockCodeValidateRequest,
    identity: Identity = Depends(require_identity),
    service: UnlockCodeService = Depends(get_unlock_service),
) -> UnlockCodeValidateResponse:
    raw_code = _require_code(payload.code)

    try:
        result = await service.validate(identity=identity, raw_code=raw_code)
    except Exception as exc:
        logger.exception("unlock_code_validation_error", user_id=identity.user_id)
        raise ApiError(500, "Failed to validate code") from exc

    if not result.valid or result.release is None or result.code is None:
        raise ApiError(400, result.error_message or "Invalid unlock code")

    return UnlockCodeValidateResponse(
        valid=True,
        already_owned=result.already_owned,
        album_title=result.release.title,
        artist_name=result.release.artist_name,
        album_cover=result.release.cover_art,
        release_type=result.release.release_type,
        track_count=result.release.track_count,
        code=result.code,
    )


@router.post(
    "/unlock-codes/redeem",
    response_model=UnlockCodeRedeemResponse,
    response_model_by_alias=True,
)
async def redeem_unlock_code(
    payload: UnlockCodeRedeemRequest,
    request: Request,
    identity: Identity = Depends(require_identity),
    service: UnlockCodeService = Depends(get_unlock_service),
) -> UnlockCodeRedeemResponse:
    raw_code = _require_code(payload.code)
    context = RedemptionContext(
        client_ip=extract_client_ip(
            request,
            trusted_proxies=get_settings().internal_api_trusted_proxies,
        ),
        user_agent=request.headers.get("User-Agent"),
        device_fingerprint=payload.device_fingerprint,
    )

    try:
        result = await service.redeem(identity=identity, raw_code=raw_code, context=context)
    except UnlockRateLimitedError as exc:
        raise ApiError(429, exc.message) from exc
    except UnlockCodeError as exc:
        raise ApiError(400, exc.message) from exc
    except Exception as exc:
        logger.exception("unlock_code_redeem_error", user_id=identity.user_id)
        raise ApiError(500, "Failed to redeem code") from exc

    return _redeem_as_response(result)
