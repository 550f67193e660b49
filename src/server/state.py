"""Versioned, swap-on-update container for the served engine state."""

from __future__ import annotations

import threading
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any

from domain.common import GameResult, LeaderboardEntry, SnapshotRecord


@dataclass(frozen=True)
class EngineState:
    """Everything the read endpoints serve, as of one completed cycle."""

    version: int = 0
    history: tuple[GameResult, ...] = ()
    leaderboard: tuple[LeaderboardEntry, ...] = ()
    latest_session: tuple[SnapshotRecord, ...] = ()
    completed_at: datetime | None = None


class StateContainer:
    """Holds one immutable EngineState; writers replace it wholesale.

    Readers call `current()` once and work with that reference, so they see
    either the old or the new state and never a mix.
    """

    def __init__(self, initial: EngineState | None = None) -> None:
        self._state = initial or EngineState()
        self._write_lock = threading.Lock()

    def current(self) -> EngineState:
        return self._state

    def swap(self, **changes: Any) -> EngineState:
        with self._write_lock:
            updated = replace(self._state, version=self._state.version + 1, **changes)
            self._state = updated
            return updated


__all__ = ["EngineState", "StateContainer"]
