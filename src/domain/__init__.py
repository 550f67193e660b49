"""Game-session aggregation domain modules."""

from domain.common import (
    CurrentSession,
    GameResult,
    LeaderboardEntry,
    PlayerLine,
    ScorePair,
    SnapshotRecord,
)

__all__ = [
    "CurrentSession",
    "GameResult",
    "LeaderboardEntry",
    "PlayerLine",
    "ScorePair",
    "SnapshotRecord",
]
