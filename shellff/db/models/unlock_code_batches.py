from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, Integer, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from shellff.db.models.base import Base


class UnlockCodeBatch(Base):
    __tablename__ = "unlock_code_batches"

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    batch_key: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    release_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("releases.id"), nullable=False)
    created_by: Mapped[str] = mapped_column(String(64), nullable=False)
    total_codes: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    metadata_: Mapped[dict[str, object]] = mapped_column(
        "metadata",
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )
