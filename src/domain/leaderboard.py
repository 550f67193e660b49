"""Roll the game history up into per-player leaderboard entries."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from domain.common import TEAM_KEYS, GameResult, LeaderboardEntry


@dataclass
class _PlayerTotals:
    matches_played: int = 0
    wins: int = 0
    total_kills: int = 0
    total_deaths: int = 0


def calculate_kd(total_kills: int, total_deaths: int) -> float:
    """Kills per death to two decimals; plain kills when the player never died."""
    if total_deaths > 0:
        return round(total_kills / total_deaths, 2)
    return float(total_kills)


class LeaderboardCalculator:
    """Accumulates player totals game by game."""

    def __init__(self) -> None:
        self._totals: dict[str, _PlayerTotals] = {}

    def tracked_player_count(self) -> int:
        return len(self._totals)

    def process_game(self, game: GameResult) -> None:
        for team_key in TEAM_KEYS:
            for player in game.players(team_key):
                totals = self._totals.setdefault(player.name, _PlayerTotals())
                totals.matches_played += 1
                totals.total_kills += player.kills
                totals.total_deaths += player.deaths

        score = game.final_score
        if score.team1 == score.team2:
            return
        winning_team = "team1" if score.team1 > score.team2 else "team2"
        for player in game.players(winning_team):
            self._totals[player.name].wins += 1

    def entries(self) -> list[LeaderboardEntry]:
        """Entries sorted by kd descending, ties broken by name ascending."""
        entries = [
            LeaderboardEntry(
                name=name,
                matches_played=totals.matches_played,
                wins=totals.wins,
                total_kills=totals.total_kills,
                total_deaths=totals.total_deaths,
                kd=calculate_kd(totals.total_kills, totals.total_deaths),
            )
            for name, totals in self._totals.items()
        ]
        entries.sort(key=lambda entry: (-entry.kd, entry.name))
        return entries


def build_leaderboard(history: Iterable[GameResult]) -> list[LeaderboardEntry]:
    calculator = LeaderboardCalculator()
    for game in history:
        calculator.process_game(game)
    return calculator.entries()


__all__ = ["LeaderboardCalculator", "build_leaderboard", "calculate_kd"]
