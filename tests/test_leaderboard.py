"""Tests for the player leaderboard rollup."""

from __future__ import annotations

from datetime import timedelta

import pytest

from domain.common import GameResult, PlayerLine, ScorePair
from domain.leaderboard import LeaderboardCalculator, build_leaderboard, calculate_kd
from factories import BASE_TIME


def _game(
    index: int,
    score: tuple[int, int],
    team1: list[tuple[str, int, int]],
    team2: list[tuple[str, int, int]],
) -> GameResult:
    start = BASE_TIME + timedelta(hours=index)
    return GameResult(
        start_time=start,
        end_time=start + timedelta(minutes=40),
        duration="00:40:00",
        map_name="de_dust2",
        final_score=ScorePair(*score),
        team1_players=tuple(PlayerLine(*player) for player in team1),
        team2_players=tuple(PlayerLine(*player) for player in team2),
    )


def test_kd_is_kills_when_player_never_died() -> None:
    assert calculate_kd(7, 0) == 7
    assert calculate_kd(0, 0) == 0


def test_kd_is_rounded_to_two_decimals() -> None:
    assert calculate_kd(10, 3) == pytest.approx(3.33)
    assert calculate_kd(2, 3) == pytest.approx(0.67)


def test_single_win_example() -> None:
    board = build_leaderboard([_game(0, (2, 1), [("Alice", 1, 0)], [("Bob", 0, 1)])])
    alice = next(entry for entry in board if entry.name == "Alice")
    assert alice.matches_played == 1
    assert alice.wins == 1
    assert alice.total_kills == 1
    assert alice.total_deaths == 0
    assert alice.kd == alice.total_kills


def test_totals_accumulate_across_games_and_teams() -> None:
    history = [
        _game(0, (16, 10), [("Alice", 20, 10)], [("Bob", 12, 18)]),
        _game(1, (8, 16), [("Bob", 15, 15)], [("Alice", 10, 20)]),
        _game(2, (15, 15), [("Alice", 5, 5)], [("Bob", 5, 5)]),
    ]
    board = {entry.name: entry for entry in build_leaderboard(history)}

    assert board["Alice"].matches_played == 3
    assert board["Alice"].wins == 2
    assert board["Alice"].total_kills == 35
    assert board["Alice"].total_deaths == 35
    assert board["Alice"].kd == pytest.approx(1.0)

    assert board["Bob"].matches_played == 3
    assert board["Bob"].wins == 0
    assert board["Bob"].total_kills == 32
    assert board["Bob"].total_deaths == 38


def test_draws_credit_no_wins() -> None:
    board = build_leaderboard([_game(0, (3, 3), [("Alice", 1, 1)], [("Bob", 1, 1)])])
    assert all(entry.wins == 0 for entry in board)


def test_sorted_by_kd_descending_then_name() -> None:
    history = [
        _game(0, (1, 0), [("Zed", 4, 2), ("Amy", 2, 1)], [("Max", 9, 3), ("Low", 1, 4)]),
    ]
    board = build_leaderboard(history)
    assert [entry.name for entry in board] == ["Max", "Amy", "Zed", "Low"]


def test_calculator_tracks_players() -> None:
    calculator = LeaderboardCalculator()
    calculator.process_game(_game(0, (1, 0), [("Alice", 1, 0)], [("Bob", 0, 1), ("Cat", 0, 0)]))
    assert calculator.tracked_player_count() == 3


def test_empty_history_gives_empty_leaderboard() -> None:
    assert build_leaderboard([]) == []


def test_entry_serializes_with_contract_field_names() -> None:
    board = build_leaderboard([_game(0, (2, 1), [("Alice", 3, 2)], [])])
    assert board[0].as_dict() == {
        "name": "Alice",
        "matchesPlayed": 1,
        "wins": 1,
        "totalKills": 3,
        "totalDeaths": 2,
        "kd": 1.5,
    }
