from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UnlockCodeValidateRequest(CamelModel):
    code: str | None = Field(default=None, max_length=64)


class UnlockCodeValidateResponse(CamelModel):
    valid: bool
    already_owned: bool
    album_title: str
    artist_name: str
    album_cover: str
    release_type: str
    track_count: int = Field(ge=0)
    code: str


class UnlockCodeRedeemRequest(CamelModel):
    code: str | None = Field(default=None, max_length=64)
    device_fingerprint: str | None = Field(default=None, max_length=128)


class ReleaseSummaryResponse(CamelModel):
    id: int
    title: str
    artist: str
    cover_art: str
    release_type: str
    track_count: int = Field(ge=0)


class ReleaseAccessResponse(CamelModel):
    release_id: int
    granted_at: datetime
    source: str


class UnlockCodeRedeemResponse(CamelModel):
    success: bool = True
    message: str
    idempotent_replay: bool
    release: ReleaseSummaryResponse
    access: ReleaseAccessResponse


class RedemptionEntryResponse(CamelModel):
    code: str
    release_id: int
    release_title: str
    artist_name: str
    redeemed_at: datetime


class RedemptionStatsResponse(CamelModel):
    total_redemptions: int = Field(ge=0)
    failed_attempts: int = Field(ge=0)
    active_access_count: int = Field(ge=0)
    first_redeemed_at: datetime | None = None
    last_redeemed_at: datetime | None = None
    redemptions: list[RedemptionEntryResponse]
