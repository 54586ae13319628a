from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

OUTCOME_REDEEMABLE = "REDEEMABLE"
OUTCOME_OWNED = "OWNED"
OUTCOME_INVALID = "INVALID"


@dataclass(frozen=True, slots=True)
class Identity:
    """Resolved caller: internal primary key plus the public user id."""

    user_id: int
    public_id: str
    email: str | None = None


@dataclass(slots=True)
class RedemptionContext:
    client_ip: str | None = None
    user_agent: str | None = None
    device_fingerprint: str | None = None


@dataclass(slots=True)
class ReleaseSummary:
    release_id: int
    title: str
    artist_name: str
    cover_art: str
    release_type: str
    track_count: int


@dataclass(slots=True)
class UnlockValidationResult:
    outcome: str
    code: str | None = None
    release: ReleaseSummary | None = None
    unlock_code_id: int | None = None
    redeemed_by_caller: bool = False
    error_reason: str | None = None
    error_message: str | None = None

    @property
    def valid(self) -> bool:
        return self.outcome != OUTCOME_INVALID

    @property
    def already_owned(self) -> bool:
        return self.outcome == OUTCOME_OWNED


@dataclass(slots=True)
class ReleaseAccessSummary:
    release_id: int
    granted_at: datetime
    source: str


@dataclass(slots=True)
class UnlockRedeemResult:
    code: str
    release: ReleaseSummary
    access: ReleaseAccessSummary
    idempotent_replay: bool
    unlock_code_id: int


@dataclass(slots=True)
class RedemptionEntry:
    code: str
    release_id: int
    release_title: str
    artist_name: str
    redeemed_at: datetime


@dataclass(slots=True)
class RedemptionStats:
    total_redemptions: int
    failed_attempts: int
    active_access_count: int
    first_redeemed_at: datetime | None = None
    last_redeemed_at: datetime | None = None
    redemptions: list[RedemptionEntry] = field(default_factory=list)


@dataclass(slots=True)
class IssuedBatch:
    batch_id: int
    batch_key: str
    release_id: int
    codes: list[str]
    created_at: datetime


@dataclass(slots=True)
class ReleaseCodeSummary:
    release_id: int
    codes_total: int
    codes_redeemed: int
    codes_unused: int

    @property
    def redemption_rate(self) -> float:
        if self.codes_total <= 0:
            return 0.0
        return self.codes_redeemed / self.codes_total
