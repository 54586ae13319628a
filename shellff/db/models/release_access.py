from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from shellff.db.models.base import Base


class ReleaseAccess(Base):
    __tablename__ = "release_access"
    __table_args__ = (
        CheckConstraint(
            "source IN ('UNLOCK_CODE','PURCHASE','GRANT')",
            name="ck_release_access_source",
        ),
        UniqueConstraint("release_id", "user_id", name="uq_release_access_release_user"),
        Index("idx_release_access_user", "user_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    release_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("releases.id"), nullable=False)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    source: Mapped[str] = mapped_column(String(16), nullable=False)
    unlock_code_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("unlock_codes.id"),
        unique=True,
        nullable=True,
    )
    granted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
