from __future__ import annotations

from sqlalchemy import BigInteger, ForeignKey, Integer, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from shellff.db.models.base import Base


class ReleaseTrack(Base):
    __tablename__ = "release_tracks"
    __table_args__ = (
        UniqueConstraint("release_id", "position", name="uq_release_tracks_release_position"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True)
    release_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("releases.id", ondelete="CASCADE"),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(Text, nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
