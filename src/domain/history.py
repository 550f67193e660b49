"""Merge newly resolved results into the persisted game history."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from domain.common import GameResult


@dataclass(frozen=True)
class ReconcileOutcome:
    history: list[GameResult]
    appended: int
    duplicates: int


def reconcile_history(existing: Sequence[GameResult], new_results: Iterable[GameResult]) -> ReconcileOutcome:
    """Append results whose (start_time, map) key is not yet in history.

    Existing entries are never modified or reordered.
    """
    history = list(existing)
    seen = {result.natural_key for result in history}
    appended = 0
    duplicates = 0

    for result in new_results:
        if result.natural_key in seen:
            duplicates += 1
            continue
        seen.add(result.natural_key)
        history.append(result)
        appended += 1

    return ReconcileOutcome(history=history, appended=appended, duplicates=duplicates)


__all__ = ["ReconcileOutcome", "reconcile_history"]
