"""leaderboard_entries table model."""

from __future__ import annotations

from sqlalchemy import Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class LeaderboardRow(Base):
    """Per-player totals over the whole history, stored in ranking order."""

    __tablename__ = "leaderboard_entries"
    __table_args__ = (
        UniqueConstraint("name", name="uq_leaderboard_entries_name"),
        Index("idx_leaderboard_entries_rank", "rank"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    rank: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    matches_played: Mapped[int] = mapped_column(Integer, nullable=False)
    wins: Mapped[int] = mapped_column(Integer, nullable=False)
    total_kills: Mapped[int] = mapped_column(Integer, nullable=False)
    total_deaths: Mapped[int] = mapped_column(Integer, nullable=False)
    kd: Mapped[float] = mapped_column(Float, nullable=False)
