"""Split a polling cycle's snapshots into contiguous game sessions."""

from __future__ import annotations

from collections.abc import Iterable

from domain.common import SnapshotRecord

SessionGroup = list[SnapshotRecord]


def sort_by_timestamp(records: Iterable[SnapshotRecord]) -> list[SnapshotRecord]:
    """Stable ascending sort; ties keep arrival order."""
    return sorted(records, key=lambda record: record.timestamp)


def group_snapshots_into_sessions(records: Iterable[SnapshotRecord]) -> list[SessionGroup]:
    """Group snapshots into chronological sessions.

    A new session starts when a snapshot reports round 1 while a session is
    open, or when its map differs from the first snapshot of the open
    session. The round reset is checked first.
    """
    groups: list[SessionGroup] = []
    current: SessionGroup = []

    for record in sort_by_timestamp(records):
        if current and record.round == 1:
            groups.append(current)
            current = [record]
        elif current and record.map_name != current[0].map_name:
            groups.append(current)
            current = [record]
        else:
            current.append(record)

    if current:
        groups.append(current)
    return groups


__all__ = ["SessionGroup", "group_snapshots_into_sessions", "sort_by_timestamp"]
