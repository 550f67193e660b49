"""Detect the match that is still being played, if any."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import UTC, datetime, timedelta

from domain.common import TEAM_KEYS, CurrentSession, SnapshotRecord
from domain.results import extract_players, session_duration, sum_score_components
from domain.sessions import sort_by_timestamp

DEFAULT_LIVE_WINDOW = timedelta(seconds=90)


def detect_current_session(
    groups: Sequence[Sequence[SnapshotRecord]],
    *,
    now: datetime | None = None,
    live_window: timedelta = DEFAULT_LIVE_WINDOW,
) -> CurrentSession | None:
    """Return the latest session when its newest snapshot is inside the live window.

    Zero-duration and 0-0 sessions are reported; they may simply have just started.
    """
    if not groups or not groups[-1]:
        return None

    as_of = now or datetime.now(UTC).replace(tzinfo=None)
    ordered = sort_by_timestamp(groups[-1])
    latest = ordered[-1]
    if as_of - latest.timestamp > live_window:
        return None

    team1_players, team2_players = (extract_players(latest, key) for key in TEAM_KEYS)
    return CurrentSession(
        start_time=ordered[0].timestamp,
        current_snapshot_time=latest.timestamp,
        duration=session_duration(ordered),
        map_name=latest.map_name,
        current_score=sum_score_components(latest),
        current_round=max(record.round for record in ordered),
        team1_names=tuple(player.name for player in team1_players),
        team2_names=tuple(player.name for player in team2_players),
    )


__all__ = ["DEFAULT_LIVE_WINDOW", "detect_current_session"]
