"""Database repository helpers."""

from repositories.game_stats_repository import (
    ensure_game_stats_schema,
    load_history,
    load_leaderboard,
    save_history,
    save_leaderboard,
)

__all__ = [
    "ensure_game_stats_schema",
    "load_history",
    "load_leaderboard",
    "save_history",
    "save_leaderboard",
]
