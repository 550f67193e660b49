"""Persistence helpers for game history and leaderboard using SQLAlchemy."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import delete, insert, select
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from domain.common import GameResult, LeaderboardEntry, PlayerLine, ScorePair
from models import Base, GameResultRow, LeaderboardRow


def ensure_game_stats_schema(engine: Engine) -> None:
    """Create the history and leaderboard tables if they do not exist."""
    Base.metadata.create_all(
        bind=engine,
        tables=[GameResultRow.__table__, LeaderboardRow.__table__],
    )


def load_history(session: Session) -> list[GameResult]:
    """Fetch the stored history in its append order."""
    rows = session.execute(
        select(GameResultRow).order_by(GameResultRow.position, GameResultRow.id)
    ).scalars()
    return [_row_to_result(row) for row in rows]


def save_history(session: Session, results: Sequence[GameResult]) -> None:
    """Replace the stored history with `results`. Caller commits."""
    session.execute(delete(GameResultRow))
    if not results:
        return
    payload = [_result_to_row(result, position) for position, result in enumerate(results)]
    session.execute(insert(GameResultRow), payload)


def load_leaderboard(session: Session) -> list[LeaderboardEntry]:
    rows = session.execute(select(LeaderboardRow).order_by(LeaderboardRow.rank)).scalars()
    return [
        LeaderboardEntry(
            name=row.name,
            matches_played=row.matches_played,
            wins=row.wins,
            total_kills=row.total_kills,
            total_deaths=row.total_deaths,
            kd=row.kd,
        )
        for row in rows
    ]


def save_leaderboard(session: Session, entries: Sequence[LeaderboardEntry]) -> None:
    """Replace the stored leaderboard with `entries`. Caller commits."""
    session.execute(delete(LeaderboardRow))
    if not entries:
        return
    payload = [
        {
            "rank": rank,
            "name": entry.name,
            "matches_played": entry.matches_played,
            "wins": entry.wins,
            "total_kills": entry.total_kills,
            "total_deaths": entry.total_deaths,
            "kd": entry.kd,
        }
        for rank, entry in enumerate(entries, start=1)
    ]
    session.execute(insert(LeaderboardRow), payload)


def _result_to_row(result: GameResult, position: int) -> dict[str, Any]:
    return {
        "position": position,
        "start_time": result.start_time,
        "end_time": result.end_time,
        "duration": result.duration,
        "map_name": result.map_name,
        "team1_score": result.final_score.team1,
        "team2_score": result.final_score.team2,
        "players_json": {
            "team1": [player.as_dict() for player in result.team1_players],
            "team2": [player.as_dict() for player in result.team2_players],
        },
        "winner_json": list(result.winner),
        "loser_json": list(result.loser),
    }


def _row_to_result(row: GameResultRow) -> GameResult:
    players = row.players_json or {}
    return GameResult(
        start_time=row.start_time,
        end_time=row.end_time,
        duration=row.duration,
        map_name=row.map_name,
        final_score=ScorePair(team1=row.team1_score, team2=row.team2_score),
        team1_players=_players_from_json(players.get("team1")),
        team2_players=_players_from_json(players.get("team2")),
        winner=tuple(row.winner_json or ()),
        loser=tuple(row.loser_json or ()),
    )


def _players_from_json(raw: Any) -> tuple[PlayerLine, ...]:
    if not raw:
        return ()
    return tuple(
        PlayerLine(
            name=str(item["name"]),
            kills=int(item.get("kills", 0)),
            deaths=int(item.get("deaths", 0)),
        )
        for item in raw
    )


__all__ = [
    "ensure_game_stats_schema",
    "load_history",
    "load_leaderboard",
    "save_history",
    "save_leaderboard",
]
