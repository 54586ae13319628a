from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from shellff.db.models.base import Base


class UnlockCode(Base):
    __tablename__ = "unlock_codes"
    __table_args__ = (
        CheckConstraint("status IN ('UNUSED','REDEEMED')", name="ck_unlock_codes_status"),
        CheckConstraint(
            "code ~ '^SHF-[A-Z0-9]{4}-[A-Z0-9]{4}$'",
            name="ck_unlock_codes_code_format",
        ),
        CheckConstraint(
            "(status = 'REDEEMED') = "
            "(redeemed_by_user_id IS NOT NULL AND redeemed_at IS NOT NULL)",
            name="ck_unlock_codes_redeemed_consistency",
        ),
        Index("idx_unlock_codes_release_status", "release_id", "status"),
        Index("idx_unlock_codes_redeemer_time", "redeemed_by_user_id", "redeemed_at"),
        Index("idx_unlock_codes_batch", "batch_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    code: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    release_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("releases.id"), nullable=False)
    batch_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("unlock_code_batches.id"),
        nullable=True,
    )
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    redeemed_by_user_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("users.id"),
        nullable=True,
    )
    redeemed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
