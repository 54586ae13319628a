"""u1_unlock_codes_data_model

Revision ID: 3c1e5a7b9d20
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "3c1e5a7b9d20"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("public_id", sa.String(32), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("user_type", sa.String(16), nullable=False, server_default=sa.text("'LISTENER'")),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("user_type IN ('LISTENER','CREATOR','ADMIN')", name="ck_users_user_type"),
        sa.CheckConstraint("status IN ('ACTIVE','BLOCKED','DELETED')", name="ck_users_status"),
        sa.UniqueConstraint("public_id", name="uq_users_public_id"),
        sa.UniqueConstraint("email", name="uq_users_email"),
    )
    op.create_index("idx_users_created_at", "users", ["created_at"])

    op.create_table(
        "releases",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("creator_user_id", sa.BigInteger(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("cover_art", sa.Text(), nullable=True),
        sa.Column("release_type", sa.String(16), nullable=False),
        sa.Column("physical_unlock_enabled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("release_type IN ('ALBUM','EP','SINGLE')", name="ck_releases_release_type"),
        sa.ForeignKeyConstraint(["creator_user_id"], ["users.id"]),
    )
    op.create_index("idx_releases_creator", "releases", ["creator_user_id"])

    op.create_table(
        "release_tracks",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("release_id", sa.BigInteger(), nullable=False),
        sa.Column("title", sa.Text(), nullable=False),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["release_id"], ["releases.id"], ondelete="CASCADE"),
        sa.UniqueConstraint("release_id", "position", name="uq_release_tracks_release_position"),
    )

    op.create_table(
        "unlock_code_batches",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("batch_key", sa.String(64), nullable=False),
        sa.Column("release_id", sa.BigInteger(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=False),
        sa.Column("total_codes", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.ForeignKeyConstraint(["release_id"], ["releases.id"]),
        sa.UniqueConstraint("batch_key", name="uq_unlock_code_batches_batch_key"),
    )

    op.create_table(
        "unlock_codes",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("code", sa.String(16), nullable=False),
        sa.Column("release_id", sa.BigInteger(), nullable=False),
        sa.Column("batch_id", sa.BigInteger(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("redeemed_by_user_id", sa.BigInteger(), nullable=True),
        sa.Column("redeemed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('UNUSED','REDEEMED')", name="ck_unlock_codes_status"),
        sa.CheckConstraint("code ~ '^SHF-[A-Z0-9]{4}-[A-Z0-9]{4}$'", name="ck_unlock_codes_code_format"),
        sa.CheckConstraint(
            "(status = 'REDEEMED') = (redeemed_by_user_id IS NOT NULL AND redeemed_at IS NOT NULL)",
            name="ck_unlock_codes_redeemed_consistency",
        ),
        sa.ForeignKeyConstraint(["release_id"], ["releases.id"]),
        sa.ForeignKeyConstraint(["batch_id"], ["unlock_code_batches.id"]),
        sa.ForeignKeyConstraint(["redeemed_by_user_id"], ["users.id"]),
        sa.UniqueConstraint("code", name="uq_unlock_codes_code"),
    )
    op.create_index("idx_unlock_codes_release_status", "unlock_codes", ["release_id", "status"])
    op.create_index("idx_unlock_codes_redeemer_time", "unlock_codes", ["redeemed_by_user_id", "redeemed_at"])
    op.create_index("idx_unlock_codes_batch", "unlock_codes", ["batch_id"])

    op.create_table(
        "release_access",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("release_id", sa.BigInteger(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("source", sa.String(16), nullable=False),
        sa.Column("unlock_code_id", sa.BigInteger(), nullable=True),
        sa.Column("granted_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("source IN ('UNLOCK_CODE','PURCHASE','GRANT')", name="ck_release_access_source"),
        sa.ForeignKeyConstraint(["release_id"], ["releases.id"]),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["unlock_code_id"], ["unlock_codes.id"]),
        sa.UniqueConstraint("release_id", "user_id", name="uq_release_access_release_user"),
        sa.UniqueConstraint("unlock_code_id", name="uq_release_access_unlock_code"),
    )
    op.create_index("idx_release_access_user", "release_access", ["user_id"])

    op.create_table(
        "code_redemption_logs",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), nullable=False),
        sa.Column("unlock_code_id", sa.BigInteger(), nullable=True),
        sa.Column("attempted_code", sa.String(32), nullable=False),
        sa.Column("result", sa.String(24), nullable=False),
        sa.Column("ip_address", sa.String(64), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        sa.Column("device_fingerprint", sa.String(128), nullable=True),
        sa.Column("attempted_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "result IN ('ACCEPTED','INVALID_FORMAT','NOT_FOUND','ALREADY_REDEEMED','ALREADY_OWNED','RATE_LIMITED')",
            name="ck_code_redemption_logs_result",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"]),
        sa.ForeignKeyConstraint(["unlock_code_id"], ["unlock_codes.id"]),
    )
    op.create_index("idx_code_redemption_logs_user_time", "code_redemption_logs", ["user_id", "attempted_at"])
    op.create_index("idx_code_redemption_logs_ip_time", "code_redemption_logs", ["ip_address", "attempted_at"])
    op.create_index("idx_code_redemption_logs_code", "code_redemption_logs", ["unlock_code_id"])


def downgrade() -> None:
    op.drop_index("idx_code_redemption_logs_code", table_name="code_redemption_logs")
    op.drop_index("idx_code_redemption_logs_ip_time", table_name="code_redemption_logs")
    op.drop_index("idx_code_redemption_logs_user_time", table_name="code_redemption_logs")
    op.drop_table("code_redemption_logs")

    op.drop_index("idx_release_access_user", table_name="release_access")
    op.drop_table("release_access")

    op.drop_index("idx_unlock_codes_batch", table_name="unlock_codes")
    op.drop_index("idx_unlock_codes_redeemer_time", table_name="unlock_codes")
    op.drop_index("idx_unlock_codes_release_status", table_name="unlock_codes")
    op.drop_table("unlock_codes")

    op.drop_table("unlock_code_batches")
    op.drop_table("release_tracks")

    op.drop_index("idx_releases_creator", table_name="releases")
    op.drop_table("releases")

    op.drop_index("idx_users_created_at", table_name="users")
    op.drop_table("users")
