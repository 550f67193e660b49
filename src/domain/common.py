"""Shared types for snapshot aggregation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

TEAM_KEYS = ("team1", "team2")


@dataclass(frozen=True)
class ScorePair:
    team1: int = 0
    team2: int = 0

    def as_dict(self) -> dict[str, int]:
        return {"team1": self.team1, "team2": self.team2}


@dataclass(frozen=True)
class PlayerLine:
    """One roster entry as recorded on a snapshot."""

    name: str
    kills: int = 0
    deaths: int = 0

    def as_dict(self) -> dict[str, Any]:
        return {"name": self.name, "kills": self.kills, "deaths": self.deaths}


@dataclass(frozen=True)
class SnapshotRecord:
    """One normalized snapshot observed in a polling cycle."""

    source_name: str
    timestamp: datetime
    round: int
    map_name: str
    first_half: ScorePair | None = None
    second_half: ScorePair | None = None
    overtime: ScorePair | None = None
    team1_roster: dict[str, PlayerLine] = field(default_factory=dict)
    team2_roster: dict[str, PlayerLine] = field(default_factory=dict)

    def score_components(self) -> tuple[ScorePair | None, ScorePair | None, ScorePair | None]:
        return (self.first_half, self.second_half, self.overtime)

    def roster(self, team_key: str) -> dict[str, PlayerLine]:
        if team_key == "team1":
            return self.team1_roster
        if team_key == "team2":
            return self.team2_roster
        raise ValueError(f"Unknown team key: {team_key!r}")


@dataclass(frozen=True)
class GameResult:
    """Finalized outcome of one completed match.

    Natural key: (start_time, map_name).
    """

    start_time: datetime
    end_time: datetime
    duration: str
    map_name: str
    final_score: ScorePair
    team1_players: tuple[PlayerLine, ...]
    team2_players: tuple[PlayerLine, ...]
    winner: tuple[str, ...] = ()
    loser: tuple[str, ...] = ()

    @property
    def natural_key(self) -> tuple[datetime, str]:
        return (self.start_time, self.map_name)

    def players(self, team_key: str) -> tuple[PlayerLine, ...]:
        if team_key == "team1":
            return self.team1_players
        if team_key == "team2":
            return self.team2_players
        raise ValueError(f"Unknown team key: {team_key!r}")

    def as_dict(self) -> dict[str, Any]:
        return {
            "startTime": format_instant(self.start_time),
            "endTime": format_instant(self.end_time),
            "duration": self.duration,
            "map": self.map_name,
            "finalScore": self.final_score.as_dict(),
            "players": {
                "team1": [player.as_dict() for player in self.team1_players],
                "team2": [player.as_dict() for player in self.team2_players],
            },
            "winner": list(self.winner),
            "loser": list(self.loser),
        }


@dataclass(frozen=True)
class CurrentSession:
    """Partial view of a match that is still being played."""

    start_time: datetime
    current_snapshot_time: datetime
    duration: str
    map_name: str
    current_score: ScorePair
    current_round: int
    team1_names: tuple[str, ...]
    team2_names: tuple[str, ...]

    def as_dict(self) -> dict[str, Any]:
        return {
            "startTime": format_instant(self.start_time),
            "currentSnapshotTime": format_instant(self.current_snapshot_time),
            "duration": self.duration,
            "map": self.map_name,
            "currentScore": self.current_score.as_dict(),
            "currentRound": self.current_round,
            "players": {
                "team1": [{"name": name} for name in self.team1_names],
                "team2": [{"name": name} for name in self.team2_names],
            },
        }


@dataclass(frozen=True)
class LeaderboardEntry:
    name: str
    matches_played: int
    wins: int
    total_kills: int
    total_deaths: int
    kd: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "matchesPlayed": self.matches_played,
            "wins": self.wins,
            "totalKills": self.total_kills,
            "totalDeaths": self.total_deaths,
            "kd": self.kd,
        }


def format_instant(value: datetime) -> str:
    """Render a naive UTC instant as an ISO-8601 string with a Z suffix."""
    return value.isoformat(timespec="milliseconds") + "Z"


def format_duration(seconds: int) -> str:
    """Format whole seconds as HH:MM:SS (hours are not wrapped at 24)."""
    seconds = max(int(seconds), 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
