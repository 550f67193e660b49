"""Tests for snapshot normalization."""

from __future__ import annotations

from datetime import datetime

import pytest

from domain.config import EngineSettings
from domain.errors import DecodeFailure, IncompleteRecord
from domain.snapshots import normalize_snapshot, normalize_snapshot_batch, parse_int, parse_timestamp

SETTINGS = EngineSettings()


def _tree(**save_fields) -> dict:
    return {"SaveFile": {"timestamp": "2025-02-14 05:54:13", **save_fields}}


def test_normalize_reads_scores_rosters_and_round() -> None:
    record = normalize_snapshot(
        _tree(
            round="3",
            map="de_inferno",
            FirstHalfScore={"team1": "2", "team2": "1"},
            PlayersOnTeam1={"7": {"name": "Alice", "kills": "4", "deaths": "1"}},
            PlayersOnTeam2={"8": {"name": "Bob"}},
        ),
        "backup_round03.txt",
        SETTINGS,
    )

    assert record.source_name == "backup_round03.txt"
    assert record.timestamp == datetime(2025, 2, 14, 5, 54, 13)
    assert record.round == 3
    assert record.map_name == "de_inferno"
    assert record.first_half is not None
    assert (record.first_half.team1, record.first_half.team2) == (2, 1)
    assert record.second_half is None
    assert record.overtime is None
    assert record.team1_roster["7"].name == "Alice"
    assert record.team1_roster["7"].kills == 4
    assert record.team2_roster["8"].kills == 0
    assert record.team2_roster["8"].deaths == 0


def test_missing_round_and_map_use_defaults() -> None:
    record = normalize_snapshot(_tree(), "a.txt", SETTINGS)
    assert record.round == 99
    assert record.map_name == "Unknown"


def test_unparseable_round_is_not_round_one() -> None:
    record = normalize_snapshot(_tree(round="abc"), "a.txt", SETTINGS)
    assert record.round == 99


def test_missing_save_section_is_incomplete() -> None:
    with pytest.raises(IncompleteRecord):
        normalize_snapshot({"Other": {}}, "a.txt", SETTINGS)


def test_missing_timestamp_is_incomplete() -> None:
    with pytest.raises(IncompleteRecord):
        normalize_snapshot({"SaveFile": {"round": "1"}}, "a.txt", SETTINGS)


def test_malformed_timestamp_is_incomplete() -> None:
    with pytest.raises(IncompleteRecord):
        normalize_snapshot({"SaveFile": {"timestamp": "14/02/2025"}}, "a.txt", SETTINGS)


def test_timestamp_is_converted_from_server_zone_to_utc() -> None:
    settings = EngineSettings(timezone="Europe/Copenhagen")
    assert parse_timestamp("2025-02-14 06:54:13", settings) == datetime(2025, 2, 14, 5, 54, 13)


def test_negative_kill_counts_are_clamped() -> None:
    record = normalize_snapshot(
        _tree(PlayersOnTeam1={"1": {"name": "Alice", "kills": "-2", "deaths": "3"}}),
        "a.txt",
        SETTINGS,
    )
    assert record.team1_roster["1"].kills == 0
    assert record.team1_roster["1"].deaths == 3


def test_negative_score_fields_are_clamped() -> None:
    record = normalize_snapshot(
        _tree(
            FirstHalfScore={"team1": "-1", "team2": "3"},
            OvertimeScore={"team1": "2", "team2": "-4"},
        ),
        "a.txt",
        SETTINGS,
    )
    assert (record.first_half.team1, record.first_half.team2) == (0, 3)
    assert (record.overtime.team1, record.overtime.team2) == (2, 0)


@pytest.mark.parametrize(
    ("value", "expected"),
    [("12", 12), ("  7 ", 7), ("3abc", 3), ("", 0), (None, 0), ("x", 0), (5, 5)],
)
def test_parse_int_follows_leading_digits(value, expected) -> None:
    assert parse_int(value) == expected


def test_batch_skips_bad_artifacts_and_keeps_going() -> None:
    def decode(payload: bytes) -> dict:
        if payload == b"broken":
            raise DecodeFailure("unexpected end of input")
        if payload == b"empty":
            return {}
        return _tree(round="1")

    batch = normalize_snapshot_batch(
        [("a.txt", b"ok"), ("b.txt", b"broken"), ("c.txt", b"empty")],
        decode,
        SETTINGS,
    )

    assert [record.source_name for record in batch.records] == ["a.txt"]
    assert [(skip.source_name, skip.reason) for skip in batch.skipped] == [
        ("b.txt", "decode"),
        ("c.txt", "incomplete"),
    ]
    assert batch.total == 3
