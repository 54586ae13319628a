from __future__ import annotations

from sqlalchemy import CheckConstraint, UniqueConstraint

from shellff.db.models import (  # noqa: F401
    CodeRedemptionLog,
    Release,
    ReleaseAccess,
    ReleaseTrack,
    UnlockCode,
    UnlockCodeBatch,
    User,
)
from shellff.db.models.base import Base


def _check_names(table_name: str) -> set[str | None]:
    table = Base.metadata.tables[table_name]
    return {constraint.name for constraint in table.constraints if isinstance(constraint, CheckConstraint)}


def _index_names(table_name: str) -> set[str | None]:
    return {index.name for index in Base.metadata.tables[table_name].indexes}


def test_all_unlock_tables_registered() -> None:
    expected_tables = {
        "users",
        "releases",
        "release_tracks",
        "unlock_code_batches",
        "unlock_codes",
        "release_access",
        "code_redemption_logs",
    }
    assert expected_tables.issubset(set(Base.metadata.tables))


def test_unlock_code_constraints_present() -> None:
    assert {
        "ck_unlock_codes_status",
        "ck_unlock_codes_code_format",
        "ck_unlock_codes_redeemed_consistency",
    }.issubset(_check_names("unlock_codes"))
    assert {
        "idx_unlock_codes_release_status",
        "idx_unlock_codes_redeemer_time",
        "idx_unlock_codes_batch",
    }.issubset(_index_names("unlock_codes"))
    assert Base.metadata.tables["unlock_codes"].c.code.unique is True


def test_release_access_is_unique_per_release_and_user() -> None:
    release_access = Base.metadata.tables["release_access"]
    unique_names = {
        constraint.name
        for constraint in release_access.constraints
        if isinstance(constraint, UniqueConstraint)
    }
    assert "uq_release_access_release_user" in unique_names
    assert "ck_release_access_source" in _check_names("release_access")
    assert release_access.c.unlock_code_id.unique is True


def test_redemption_log_indexes_support_rate_limit_queries() -> None:
    assert {
        "idx_code_redemption_logs_user_time",
        "idx_code_redemption_logs_ip_time",
    }.issubset(_index_names("code_redemption_logs"))
    assert "ck_code_redemption_logs_result" in _check_names("code_redemption_logs")


def test_release_type_and_physical_unlock_flag() -> None:
    releases = Base.metadata.tables["releases"]
    assert "ck_releases_release_type" in _check_names("releases")
    assert releases.c.physical_unlock_enabled.nullable is False
