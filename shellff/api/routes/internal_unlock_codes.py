from __future__ import annotations

from datetime import datetime

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field

from shellff.api.deps import get_unlock_service
from shellff.core.config import get_settings
from shellff.services.internal_auth import (
    extract_client_ip,
    is_client_ip_allowed,
    is_internal_request_authenticated,
)
from shellff.unlock.errors import UnlockReleaseNotEnabledError, UnlockReleaseNotFoundError
from shellff.unlock.service import UnlockCodeService
from shellff.unlock.types import IssuedBatch

router = APIRouter(tags=["internal", "unlock-codes"])
logger = structlog.get_logger(__name__)


class UnlockCodeBatchRequest(BaseModel):
    release_id: int = Field(gt=0)
    quantity: int = Field(gt=0)
    created_by: str = Field(min_length=1, max_length=64)
    batch_key: str | None = Field(default=None, min_length=1, max_length=64)


class UnlockCodeBatchResponse(BaseModel):
    batch_id: int
    batch_key: str
    release_id: int
    quantity: int = Field(ge=0)
    codes: list[str]
    created_at: datetime


class ReleaseCodeSummaryResponse(BaseModel):
    release_id: int
    codes_total: int = Field(ge=0)
    codes_redeemed: int = Field(ge=0)
    codes_unused: int = Field(ge=0)
    redemption_rate: float = Field(ge=0.0, le=1.0)


def _batch_as_response(batch: IssuedBatch) -> UnlockCodeBatchResponse:
    return UnlockCodeBatchResponse(
        batch_id=batch.batch_id,
        batch_key=batch.batch_key,
        release_id=batch.release_id,
        quantity=len(batch.codes),
        codes=batch.codes,
        created_at=batch.created_at,
    )


def _assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(
        request,
        trusted_proxies=getattr(settings, "internal_api_trusted_proxies", ""),
    )

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_unlock_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_internal_request_authenticated(
        request,
        expected_token=settings.internal_api_token,
    ):
        logger.warning(
            "internal_unlock_auth_failed",
            reason="invalid_credentials",
            client_ip=client_ip,
        )
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


@router.post("/internal/unlock-codes/batches", response_model=UnlockCodeBatchResponse)
async def issue_unlock_code_batch(
    payload: UnlockCodeBatchRequest,
    request: Request,
    service: UnlockCodeService = Depends(get_unlock_service),
) -> UnlockCodeBatchResponse:
    _assert_internal_access(request)

    try:
        batch = await service.issue_batch(
            release_id=payload.release_id,
            quantity=payload.quantity,
            created_by=payload.created_by,
            batch_key=payload.batch_key,
        )
    except UnlockReleaseNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_RELEASE_NOT_FOUND"}) from exc
    except UnlockReleaseNotEnabledError as exc:
        raise HTTPException(
            status_code=409,
            detail={"code": "E_PHYSICAL_UNLOCK_DISABLED"},
        ) from exc
    except ValueError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_INVALID_QUANTITY"}) from exc

    return _batch_as_response(batch)


@router.get(
    "/internal/unlock-codes/releases/{release_id}/summary",
    response_model=ReleaseCodeSummaryResponse,
)
async def get_release_code_summary(
    release_id: int,
    request: Request,
    service: UnlockCodeService = Depends(get_unlock_service),
) -> ReleaseCodeSummaryResponse:
    _assert_internal_access(request)

    try:
        summary = await service.summarize_release(release_id=release_id)
    except UnlockReleaseNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_RELEASE_NOT_FOUND"}) from exc

    return ReleaseCodeSummaryResponse(
        release_id=summary.release_id,
        codes_total=summary.codes_total,
        codes_redeemed=summary.codes_redeemed,
        codes_unused=summary.codes_unused,
        redemption_rate=summary.redemption_rate,
    )
