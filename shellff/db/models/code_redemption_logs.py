from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from shellff.db.models.base import Base


class CodeRedemptionLog(Base):
    __tablename__ = "code_redemption_logs"
    __table_args__ = (
        CheckConstraint(
            "result IN ('ACCEPTED','INVALID_FORMAT','NOT_FOUND','ALREADY_REDEEMED',"
            "'ALREADY_OWNED','RATE_LIMITED')",
            name="ck_code_redemption_logs_result",
        ),
        Index("idx_code_redemption_logs_user_time", "user_id", "attempted_at"),
        Index("idx_code_redemption_logs_ip_time", "ip_address", "attempted_at"),
        Index("idx_code_redemption_logs_code", "unlock_code_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.id"), nullable=False)
    unlock_code_id: Mapped[int | None] = mapped_column(
        BigInteger,
        ForeignKey("unlock_codes.id"),
        nullable=True,
    )
    attempted_code: Mapped[str] = mapped_column(String(32), nullable=False)
    result: Mapped[str] = mapped_column(String(24), nullable=False)
    ip_address: Mapped[str | None] = mapped_column(String(64), nullable=True)
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)
    device_fingerprint: Mapped[str | None] = mapped_column(String(128), nullable=True)
    attempted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
