"""Tests for detecting the in-progress session."""

from __future__ import annotations

from datetime import timedelta

from domain.current import detect_current_session
from factories import BASE_TIME, make_record


def _at(seconds: int, **kwargs):
    return make_record(BASE_TIME + timedelta(seconds=seconds), **kwargs)


def test_snapshot_89_seconds_old_is_live() -> None:
    groups = [[_at(0, round=1), _at(60, round=2, first_half=(1, 0))]]
    current = detect_current_session(groups, now=BASE_TIME + timedelta(seconds=60 + 89))
    assert current is not None
    assert current.current_snapshot_time == BASE_TIME + timedelta(seconds=60)


def test_snapshot_91_seconds_old_is_not_live() -> None:
    groups = [[_at(0, round=1), _at(60, round=2, first_half=(1, 0))]]
    assert detect_current_session(groups, now=BASE_TIME + timedelta(seconds=60 + 91)) is None


def test_only_the_latest_session_is_considered() -> None:
    groups = [
        [_at(0, round=1, map_name="de_dust2")],
        [_at(500, round=1, map_name="de_mirage"), _at(560, round=2, map_name="de_mirage")],
    ]
    current = detect_current_session(groups, now=BASE_TIME + timedelta(seconds=570))
    assert current is not None
    assert current.map_name == "de_mirage"
    assert current.start_time == BASE_TIME + timedelta(seconds=500)
    assert current.duration == "00:01:00"


def test_current_round_is_max_over_whole_group() -> None:
    groups = [[_at(0, round=1), _at(60, round=9), _at(120, round=4)]]
    current = detect_current_session(groups, now=BASE_TIME + timedelta(seconds=130))
    assert current is not None
    assert current.current_round == 9


def test_fresh_scoreless_session_is_still_reported() -> None:
    groups = [[_at(0, round=1, team1=[("Alice", 0, 0)], team2=[("Unknown", 0, 0), ("Bob", 0, 0)])]]
    current = detect_current_session(groups, now=BASE_TIME + timedelta(seconds=5))
    assert current is not None
    assert current.duration == "00:00:00"
    assert (current.current_score.team1, current.current_score.team2) == (0, 0)
    assert current.team1_names == ("Alice",)
    assert current.team2_names == ("Bob",)


def test_payload_has_names_without_kill_counts() -> None:
    groups = [[_at(0, round=1), _at(30, round=2, first_half=(1, 1), team1=[("Alice", 3, 1)])]]
    current = detect_current_session(groups, now=BASE_TIME + timedelta(seconds=40))
    assert current is not None
    payload = current.as_dict()
    assert payload["players"]["team1"] == [{"name": "Alice"}]
    assert payload["currentRound"] == 2
    assert payload["currentScore"] == {"team1": 1, "team2": 1}


def test_no_sessions_means_no_current_session() -> None:
    assert detect_current_session([], now=BASE_TIME) is None


def test_custom_live_window() -> None:
    groups = [[_at(0, round=1)]]
    now = BASE_TIME + timedelta(seconds=120)
    assert detect_current_session(groups, now=now) is None
    assert detect_current_session(groups, now=now, live_window=timedelta(minutes=5)) is not None
