from __future__ import annotations

from collections.abc import Iterator
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from shellff.api.deps import get_unlock_service, require_identity
from shellff.main import app
from shellff.unlock.errors import (
    UnlockCodeAlreadyOwnedError,
    UnlockCodeAlreadyRedeemedError,
    UnlockRateLimitedError,
)
from shellff.unlock.types import (
    OUTCOME_INVALID,
    OUTCOME_OWNED,
    OUTCOME_REDEEMABLE,
    Identity,
    ReleaseAccessSummary,
    ReleaseSummary,
    UnlockRedeemResult,
    UnlockValidationResult,
)

NOW_UTC = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)
CALLER = Identity(user_id=7, public_id="usr_7", email="listener@shellff.test")
RELEASE = ReleaseSummary(
    release_id=5,
    title="Tidal Lines",
    artist_name="Mira Vale",
    cover_art="/covers/tidal-lines.png",
    release_type="ALBUM",
    track_count=10,
)


class _FakeUnlockService:
    def __init__(self) -> None:
        self.validation: UnlockValidationResult | None = None
        self.redeem_error: Exception | None = None
        self.redeem_calls: list[dict[str, object]] = []

    async def validate(self, *, identity, raw_code):
        del identity, raw_code
        if self.validation is None:
            raise RuntimeError("database down")
        return self.validation

    async def redeem(self, *, identity, raw_code, context=None, now_utc=None):
        del identity, now_utc
        self.redeem_calls.append({"raw_code": raw_code, "context": context})
        if self.redeem_error is not None:
            raise self.redeem_error
        return UnlockRedeemResult(
            code="SHF-ABCD-1234",
            release=RELEASE,
            access=ReleaseAccessSummary(release_id=5, granted_at=NOW_UTC, source="UNLOCK_CODE"),
            idempotent_replay=False,
            unlock_code_id=11,
        )


@pytest.fixture
def fake_service() -> Iterator[_FakeUnlockService]:
    service = _FakeUnlockService()
    app.dependency_overrides[require_identity] = lambda: CALLER
    app.dependency_overrides[get_unlock_service] = lambda: service
    yield service
    app.dependency_overrides.clear()


def test_validate_returns_release_preview(fake_service: _FakeUnlockService) -> None:
    fake_service.validation = UnlockValidationResult(
        outcome=OUTCOME_REDEEMABLE,
        code="SHF-ABCD-1234",
        release=RELEASE,
        unlock_code_id=11,
    )

    client = TestClient(app)
    response = client.post("/unlock-codes/validate", json={"code": "shf-abcd-1234"})

    assert response.status_code == 200
    assert response.json() == {
        "valid": True,
        "alreadyOwned": False,
        "albumTitle": "Tidal Lines",
        "artistName": "Mira Vale",
        "albumCover": "/covers/tidal-lines.png",
        "releaseType": "ALBUM",
        "trackCount": 10,
        "code": "SHF-ABCD-1234",
    }


def test_validate_flags_already_owned(fake_service: _FakeUnlockService) -> None:
    fake_service.validation = UnlockValidationResult(
        outcome=OUTCOME_OWNED,
        code="SHF-ABCD-1234",
        release=RELEASE,
        unlock_code_id=11,
    )

    client = TestClient(app)
    response = client.post("/unlock-codes/validate", json={"code": "SHF-ABCD-1234"})

    assert response.status_code == 200
    assert response.json()["valid"] is True
    assert response.json()["alreadyOwned"] is True


def test_validate_returns_400_with_reason_message(fake_service: _FakeUnlockService) -> None:
    fake_service.validation = UnlockValidationResult(
        outcome=OUTCOME_INVALID,
        error_reason="INVALID_FORMAT",
        error_message="Invalid code format. Please use format: SHF-ABCD-1234",
    )

    client = TestClient(app)
    response = client.post("/unlock-codes/validate", json={"code": "SHF-1"})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid code format. Please use format: SHF-ABCD-1234"}


@pytest.mark.parametrize("payload", [{}, {"code": ""}, {"code": "   "}, {"code": None}])
def test_validate_requires_code(fake_service: _FakeUnlockService, payload: dict) -> None:
    client = TestClient(app)
    response = client.post("/unlock-codes/validate", json=payload)

    assert response.status_code == 400
    assert response.json() == {"error": "Code is required"}


def test_validate_rejects_malformed_body(fake_service: _FakeUnlockService) -> None:
    client = TestClient(app)
    response = client.post("/unlock-codes/validate", json={"code": 1234})

    assert response.status_code == 400
    assert response.json() == {"error": "Invalid request body"}


def test_validate_hides_internal_failures(fake_service: _FakeUnlockService) -> None:
    fake_service.validation = None

    client = TestClient(app)
    response = client.post("/unlock-codes/validate", json={"code": "SHF-ABCD-1234"})

    assert response.status_code == 500
    assert response.json() == {"error": "Failed to validate code"}


def test_redeem_returns_access_grant(fake_service: _FakeUnlockService) -> None:
    client = TestClient(app)
    response = client.post(
        "/unlock-codes/redeem",
        json={"code": "SHF-ABCD-1234", "deviceFingerprint": "fp-42"},
        headers={"User-Agent": "shellff-web/1.0"},
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["message"] == "Code redeemed successfully"
    assert payload["idempotentReplay"] is False
    assert payload["release"] == {
        "id": 5,
        "title": "Tidal Lines",
        "artist": "Mira Vale",
        "coverArt": "/covers/tidal-lines.png",
        "releaseType": "ALBUM",
        "trackCount": 10,
    }
    assert payload["access"]["releaseId"] == 5
    assert payload["access"]["source"] == "UNLOCK_CODE"

    context = fake_service.redeem_calls[0]["context"]
    assert context.user_agent == "shellff-web/1.0"
    assert context.device_fingerprint == "fp-42"


@pytest.mark.parametrize(
    ("error", "status_code", "message"),
    [
        (UnlockCodeAlreadyRedeemedError(), 400, "This code has already been redeemed"),
        (UnlockCodeAlreadyOwnedError(), 400, "You already have access to this release."),
        (UnlockRateLimitedError(), 429, "Too many attempts, please try again later"),
        (RuntimeError("boom"), 500, "Failed to redeem code"),
    ],
)
def test_redeem_maps_errors_to_public_responses(
    fake_service: _FakeUnlockService,
    error: Exception,
    status_code: int,
    message: str,
) -> None:
    fake_service.redeem_error = error

    client = TestClient(app)
    response = client.post("/unlock-codes/redeem", json={"code": "SHF-ABCD-1234"})

    assert response.status_code == status_code
    assert response.json() == {"error": message}


def test_unlock_routes_require_session() -> None:
    client = TestClient(app)

    response = client.post("/unlock-codes/validate", json={"code": "SHF-ABCD-1234"})
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}

    response = client.post(
        "/unlock-codes/redeem",
        json={"code": "SHF-ABCD-1234"},
        headers={"Authorization": "Bearer forged.token"},
    )
    assert response.status_code == 401


def test_unlock_routes_reject_non_ascii_session_token() -> None:
    client = TestClient(app)

    response = client.post(
        "/unlock-codes/redeem",
        json={"code": "SHF-ABCD-1234"},
        headers={"Authorization": "Bearer abc.\xe9".encode("latin-1")},
    )

    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}


def test_unexpected_dependency_failure_renders_json_500() -> None:
    def _broken_identity() -> None:
        raise RuntimeError("identity backend exploded")

    app.dependency_overrides[require_identity] = _broken_identity
    try:
        client = TestClient(app, raise_server_exceptions=False)
        response = client.post("/unlock-codes/validate", json={"code": "SHF-ABCD-1234"})
    finally:
        app.dependency_overrides.clear()

    assert response.status_code == 500
    assert response.json() == {"error": "Internal server error"}
