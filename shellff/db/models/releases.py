from __future__ import annotations

from datetime import datetime

from sqlalchemy import (
    BOOLEAN,
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    String,
    Text,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from shellff.db.models.base import Base


class Release(Base):
    __tablename__ = "releases"
    __table_args__ = (
        CheckConstraint(
            "release_type IN ('ALBUM','EP','SINGLE')",
            name="ck_releases_release_type",
        ),
        Index("idx_releases_creator", "creator_user_id"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    creator_user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    cover_art: Mapped[str | None] = mapped_column(Text, nullable=True)
    release_type: Mapped[str] = mapped_column(String(16), nullable=False)
    physical_unlock_enabled: Mapped[bool] = mapped_column(
        BOOLEAN,
        nullable=False,
        server_default=text("false"),
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
