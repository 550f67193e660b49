"""Reduce a session group into a finalized game result."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from domain.common import TEAM_KEYS, GameResult, PlayerLine, ScorePair, SnapshotRecord, format_duration
from domain.sessions import sort_by_timestamp

UNKNOWN_PLAYER_NAME = "Unknown"
EMPTY_DURATION = "00:00:00"


def sum_score_components(record: SnapshotRecord) -> ScorePair:
    """Add up first-half, second-half and overtime scores present on a snapshot."""
    team1 = 0
    team2 = 0
    for component in record.score_components():
        if component is None:
            continue
        team1 += component.team1
        team2 += component.team2
    return ScorePair(team1=team1, team2=team2)


def extract_players(record: SnapshotRecord, team_key: str) -> tuple[PlayerLine, ...]:
    """Roster of one team on a snapshot, without empty or placeholder names."""
    return tuple(
        PlayerLine(name=line.name, kills=max(line.kills, 0), deaths=max(line.deaths, 0))
        for line in record.roster(team_key).values()
        if line.name and line.name != UNKNOWN_PLAYER_NAME
    )


def session_duration(group: Sequence[SnapshotRecord]) -> str:
    elapsed = group[-1].timestamp - group[0].timestamp
    return format_duration(int(elapsed.total_seconds()))


def resolve_game_result(group: Iterable[SnapshotRecord]) -> GameResult | None:
    """Build the GameResult for one session, or None when it is degenerate.

    Sessions with zero duration or a 0-0 final score are discarded.
    """
    ordered = sort_by_timestamp(group)
    if not ordered:
        return None

    start = ordered[0]
    final_snapshot = ordered[-1]
    duration = session_duration(ordered)
    if duration == EMPTY_DURATION:
        return None

    final_score = sum_score_components(final_snapshot)
    if final_score.team1 == 0 and final_score.team2 == 0:
        return None

    team1_players, team2_players = (extract_players(final_snapshot, key) for key in TEAM_KEYS)

    winner: tuple[str, ...] = ()
    loser: tuple[str, ...] = ()
    if final_score.team1 > final_score.team2:
        winner = tuple(player.name for player in team1_players)
        loser = tuple(player.name for player in team2_players)
    elif final_score.team2 > final_score.team1:
        winner = tuple(player.name for player in team2_players)
        loser = tuple(player.name for player in team1_players)

    return GameResult(
        start_time=start.timestamp,
        end_time=final_snapshot.timestamp,
        duration=duration,
        map_name=final_snapshot.map_name,
        final_score=final_score,
        team1_players=team1_players,
        team2_players=team2_players,
        winner=winner,
        loser=loser,
    )


def resolve_game_results(groups: Iterable[Iterable[SnapshotRecord]]) -> list[GameResult]:
    results: list[GameResult] = []
    for group in groups:
        result = resolve_game_result(group)
        if result is not None:
            results.append(result)
    return results


__all__ = [
    "EMPTY_DURATION",
    "UNKNOWN_PLAYER_NAME",
    "extract_players",
    "resolve_game_result",
    "resolve_game_results",
    "session_duration",
    "sum_score_components",
]
