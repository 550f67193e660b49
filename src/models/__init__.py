"""ORM models."""

from models.base import Base
from models.game_result import GameResultRow
from models.leaderboard_entry import LeaderboardRow

__all__ = ["Base", "GameResultRow", "LeaderboardRow"]
