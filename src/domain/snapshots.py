"""Normalize decoded snapshot trees into typed records."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from domain.common import PlayerLine, ScorePair, SnapshotRecord
from domain.config import EngineSettings
from domain.errors import DecodeFailure, IncompleteRecord

logger = logging.getLogger(__name__)

SAVE_SECTION = "SaveFile"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_SCORE_SECTIONS = ("FirstHalfScore", "SecondHalfScore", "OvertimeScore")
_ROSTER_SECTIONS = ("PlayersOnTeam1", "PlayersOnTeam2")


@dataclass(frozen=True)
class SkippedArtifact:
    """One artifact left out of a cycle, with the reason why."""

    source_name: str
    reason: str
    detail: str = ""


@dataclass
class SnapshotBatch:
    """Records and skip diagnostics for one polling cycle."""

    records: list[SnapshotRecord] = field(default_factory=list)
    skipped: list[SkippedArtifact] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.records) + len(self.skipped)


def parse_int(value: Any, default: int = 0) -> int:
    """Parse the leading integer of a KeyValues scalar, falling back to default."""
    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        return value
    if value is None:
        return default

    text = str(value).strip()
    digits = ""
    for index, char in enumerate(text):
        if char.isdigit() or (index == 0 and char in "+-"):
            digits += char
            continue
        break
    try:
        return int(digits)
    except ValueError:
        return default


def parse_timestamp(value: Any, settings: EngineSettings) -> datetime:
    """Parse a server-local timestamp into a naive UTC datetime."""
    text = str(value or "").strip()
    if not text:
        raise IncompleteRecord("missing timestamp")
    try:
        local = datetime.strptime(text, TIMESTAMP_FORMAT)
    except ValueError as exc:
        raise IncompleteRecord(f"unparseable timestamp {text!r}") from exc
    return local.replace(tzinfo=settings.tzinfo).astimezone(UTC).replace(tzinfo=None)


def normalize_snapshot(tree: Any, source_name: str, settings: EngineSettings) -> SnapshotRecord:
    """Convert one decoded tree into a SnapshotRecord or raise IncompleteRecord."""
    if not isinstance(tree, dict):
        raise IncompleteRecord("decoded payload is not a key-value tree")
    save = tree.get(SAVE_SECTION)
    if not isinstance(save, dict):
        raise IncompleteRecord(f"missing {SAVE_SECTION} section")

    timestamp = parse_timestamp(save.get("timestamp"), settings)
    map_name = str(save.get("map") or "").strip() or settings.unknown_map
    first_half, second_half, overtime = (_score_pair(save.get(key)) for key in _SCORE_SECTIONS)
    team1_roster, team2_roster = (_roster(save.get(key)) for key in _ROSTER_SECTIONS)

    return SnapshotRecord(
        source_name=source_name,
        timestamp=timestamp,
        round=parse_int(save.get("round"), settings.missing_round),
        map_name=map_name,
        first_half=first_half,
        second_half=second_half,
        overtime=overtime,
        team1_roster=team1_roster,
        team2_roster=team2_roster,
    )


def normalize_snapshot_batch(
    payloads: Iterable[tuple[str, bytes]],
    decode: Callable[[bytes], Any],
    settings: EngineSettings,
) -> SnapshotBatch:
    """Decode and normalize every payload, recording skips instead of raising."""
    batch = SnapshotBatch()
    for source_name, payload in payloads:
        try:
            tree = decode(payload)
        except DecodeFailure as exc:
            logger.warning("skipped artifact=%s reason=decode detail=%s", source_name, exc)
            batch.skipped.append(SkippedArtifact(source_name, "decode", str(exc)))
            continue

        try:
            record = normalize_snapshot(tree, source_name, settings)
        except IncompleteRecord as exc:
            logger.info("skipped artifact=%s reason=incomplete detail=%s", source_name, exc)
            batch.skipped.append(SkippedArtifact(source_name, "incomplete", str(exc)))
            continue

        batch.records.append(record)
    return batch


def _score_pair(raw: Any) -> ScorePair | None:
    if not isinstance(raw, dict):
        return None
    return ScorePair(
        team1=max(parse_int(raw.get("team1")), 0),
        team2=max(parse_int(raw.get("team2")), 0),
    )


def _roster(raw: Any) -> dict[str, PlayerLine]:
    if not isinstance(raw, dict):
        return {}

    roster: dict[str, PlayerLine] = {}
    for player_id, entry in raw.items():
        if not isinstance(entry, dict):
            continue
        roster[str(player_id)] = PlayerLine(
            name=str(entry.get("name") or "").strip(),
            kills=max(parse_int(entry.get("kills")), 0),
            deaths=max(parse_int(entry.get("deaths")), 0),
        )
    return roster


__all__ = [
    "SAVE_SECTION",
    "SkippedArtifact",
    "SnapshotBatch",
    "normalize_snapshot",
    "normalize_snapshot_batch",
    "parse_int",
    "parse_timestamp",
]
