"""game_results table model."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import JSON, CheckConstraint, DateTime, Index, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class GameResultRow(Base):
    """One completed match in the persisted history."""

    __tablename__ = "game_results"
    __table_args__ = (
        UniqueConstraint("start_time", "map_name", name="uq_game_results_start_map"),
        CheckConstraint("team1_score >= 0 AND team2_score >= 0", name="ck_game_results_scores"),
        Index("idx_game_results_position", "position"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    start_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    end_time: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    duration: Mapped[str] = mapped_column(String(16), nullable=False)
    map_name: Mapped[str] = mapped_column(String(128), nullable=False)
    team1_score: Mapped[int] = mapped_column(Integer, nullable=False)
    team2_score: Mapped[int] = mapped_column(Integer, nullable=False)
    players_json: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    winner_json: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    loser_json: Mapped[list[str]] = mapped_column(JSON, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
