from __future__ import annotations

import pytest

from shellff.unlock import service as service_module
from shellff.unlock.errors import UnlockCodeNotFoundError, UnlockRateLimitedError
from shellff.unlock.service import UnlockCodeService
from shellff.unlock.types import (
    OUTCOME_INVALID,
    RedemptionContext,
    ReleaseAccessSummary,
    ReleaseSummary,
    UnlockRedeemResult,
    UnlockValidationResult,
)
from tests.unlock.unlock_fixtures import CALLER, NOW_UTC, FakeDatabase

CONTEXT = RedemptionContext(client_ip="203.0.113.9", user_agent="pytest", device_fingerprint="fp-1")


def _redeem_result() -> UnlockRedeemResult:
    return UnlockRedeemResult(
        code="SHF-ABCD-1234",
        release=ReleaseSummary(
            release_id=5,
            title="Tidal Lines",
            artist_name="Mira Vale",
            cover_art="/covers/tidal-lines.png",
            release_type="ALBUM",
            track_count=10,
        ),
        access=ReleaseAccessSummary(release_id=5, granted_at=NOW_UTC, source="UNLOCK_CODE"),
        idempotent_replay=False,
        unlock_code_id=11,
    )


def _patch_attempts(monkeypatch) -> tuple[list[dict[str, object]], list[dict[str, object]]]:
    accepted: list[dict[str, object]] = []
    failed: list[dict[str, object]] = []

    async def _fake_record_attempt(session, **kwargs):
        del session
        accepted.append(kwargs)

    async def _fake_record_failed_attempt(database, **kwargs):
        del database
        failed.append(kwargs)

    monkeypatch.setattr(service_module, "record_attempt", _fake_record_attempt)
    monkeypatch.setattr(service_module, "record_failed_attempt", _fake_record_failed_attempt)
    return accepted, failed


async def _no_rate_limit(session, *, identity, client_ip, now_utc) -> None:
    del session, identity, client_ip, now_utc


@pytest.mark.asyncio
async def test_redeem_records_accepted_attempt_in_same_transaction(monkeypatch) -> None:
    accepted, failed = _patch_attempts(monkeypatch)

    async def _fake_redeem(session, *, raw_code, identity, now_utc):
        del session, raw_code, identity, now_utc
        return _redeem_result()

    monkeypatch.setattr(service_module, "enforce_rate_limit", _no_rate_limit)
    monkeypatch.setattr(service_module, "redeem_unlock_code", _fake_redeem)

    database = FakeDatabase()
    result = await UnlockCodeService(database).redeem(
        identity=CALLER,
        raw_code="SHF-ABCD-1234",
        context=CONTEXT,
        now_utc=NOW_UTC,
    )

    assert result.unlock_code_id == 11
    assert database.transactions_opened == 1
    assert failed == []
    assert len(accepted) == 1
    assert accepted[0]["result"] == "ACCEPTED"
    assert accepted[0]["unlock_code_id"] == 11
    assert accepted[0]["context"] is CONTEXT


@pytest.mark.asyncio
async def test_redeem_records_failed_attempt_and_reraises(monkeypatch) -> None:
    accepted, failed = _patch_attempts(monkeypatch)

    async def _fake_redeem(session, *, raw_code, identity, now_utc):
        del session, raw_code, identity, now_utc
        raise UnlockCodeNotFoundError(code="SHF-ZZZZ-0000")

    monkeypatch.setattr(service_module, "enforce_rate_limit", _no_rate_limit)
    monkeypatch.setattr(service_module, "redeem_unlock_code", _fake_redeem)

    with pytest.raises(UnlockCodeNotFoundError):
        await UnlockCodeService(FakeDatabase()).redeem(
            identity=CALLER,
            raw_code="shf-zzzz-0000",
            context=CONTEXT,
            now_utc=NOW_UTC,
        )

    assert accepted == []
    assert len(failed) == 1
    assert failed[0]["result"] == "NOT_FOUND"
    assert failed[0]["raw_code"] == "shf-zzzz-0000"


@pytest.mark.asyncio
async def test_redeem_stops_before_lookup_when_rate_limited(monkeypatch) -> None:
    _, failed = _patch_attempts(monkeypatch)
    redeem_calls = 0

    async def _limited(session, *, identity, client_ip, now_utc) -> None:
        del session, identity, client_ip, now_utc
        raise UnlockRateLimitedError

    async def _fake_redeem(session, **kwargs):
        nonlocal redeem_calls
        del session, kwargs
        redeem_calls += 1

    monkeypatch.setattr(service_module, "enforce_rate_limit", _limited)
    monkeypatch.setattr(service_module, "redeem_unlock_code", _fake_redeem)

    with pytest.raises(UnlockRateLimitedError):
        await UnlockCodeService(FakeDatabase()).redeem(
            identity=CALLER,
            raw_code="SHF-ABCD-1234",
            context=CONTEXT,
            now_utc=NOW_UTC,
        )

    assert redeem_calls == 0
    assert [attempt["result"] for attempt in failed] == ["RATE_LIMITED"]


@pytest.mark.asyncio
async def test_validate_opens_read_session_and_returns_result(monkeypatch) -> None:
    async def _fake_validate(session, *, raw_code, identity):
        del session, raw_code, identity
        return UnlockValidationResult(
            outcome=OUTCOME_INVALID,
            error_reason="NOT_FOUND",
            error_message="Code not found or invalid",
        )

    monkeypatch.setattr(service_module, "validate_unlock_code", _fake_validate)

    database = FakeDatabase()
    result = await UnlockCodeService(database).validate(identity=CALLER, raw_code="SHF-ABCD-1234")

    assert result.valid is False
    assert database.sessions_opened == 1
    assert database.transactions_opened == 0
