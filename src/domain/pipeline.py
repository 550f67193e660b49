"""One aggregation cycle: snapshots in, persisted history and leaderboard out."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from domain.common import CurrentSession, GameResult, LeaderboardEntry, SnapshotRecord
from domain.config import EngineSettings
from domain.current import detect_current_session
from domain.errors import PersistenceFailure
from domain.history import reconcile_history
from domain.leaderboard import build_leaderboard
from domain.results import resolve_game_results
from domain.sessions import group_snapshots_into_sessions
from domain.snapshots import SkippedArtifact, normalize_snapshot_batch
from repositories import load_history, save_history, save_leaderboard

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CycleSummary:
    """Outcome of one update cycle."""

    artifacts: int
    records: int
    skipped: tuple[SkippedArtifact, ...]
    sessions: int
    resolved: int
    appended: int
    duplicates: int
    history: tuple[GameResult, ...]
    leaderboard: tuple[LeaderboardEntry, ...]
    latest_session: tuple[SnapshotRecord, ...]
    current_session: CurrentSession | None
    completed_at: datetime
    dry_run: bool = False


def run_update_cycle(
    *,
    session_factory,
    fetch_payloads: Callable[[], list[tuple[str, bytes]]],
    decode: Callable[[bytes], Any],
    settings: EngineSettings,
    dry_run: bool = False,
    now: datetime | None = None,
    echo: Callable[[str], None] | None = None,
) -> CycleSummary:
    """Fetch, segment, resolve, reconcile and persist.

    Retrieval and persistence failures propagate; per-artifact failures are
    reported in the summary. Nothing is written unless every step succeeds.
    """
    payloads = fetch_payloads()
    batch = normalize_snapshot_batch(payloads, decode, settings)
    groups = group_snapshots_into_sessions(batch.records)
    as_of = now or datetime.now(UTC).replace(tzinfo=None)
    current = detect_current_session(
        groups,
        now=as_of,
        live_window=timedelta(seconds=settings.live_window_sec),
    )
    # A live tail group is still being played; it is resolved once it goes quiet.
    completed = groups[:-1] if current is not None else groups
    new_results = resolve_game_results(completed)

    with session_factory() as session:
        try:
            existing = load_history(session)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Could not load game history: {exc}") from exc

        outcome = reconcile_history(existing, new_results)
        leaderboard = build_leaderboard(outcome.history)

        if dry_run:
            session.rollback()
        else:
            try:
                save_history(session, outcome.history)
                save_leaderboard(session, leaderboard)
                session.commit()
            except SQLAlchemyError as exc:
                session.rollback()
                raise PersistenceFailure(f"Could not save game history: {exc}") from exc

    summary = CycleSummary(
        artifacts=len(payloads),
        records=len(batch.records),
        skipped=tuple(batch.skipped),
        sessions=len(groups),
        resolved=len(new_results),
        appended=outcome.appended,
        duplicates=outcome.duplicates,
        history=tuple(outcome.history),
        leaderboard=tuple(leaderboard),
        latest_session=tuple(groups[-1]) if groups else (),
        current_session=current,
        completed_at=as_of,
        dry_run=dry_run,
    )

    message = (
        f"{'[dry-run] ' if dry_run else ''}completed "
        f"artifacts={summary.artifacts} "
        f"records={summary.records} "
        f"skipped={len(summary.skipped)} "
        f"sessions={summary.sessions} "
        f"resolved={summary.resolved} "
        f"appended={summary.appended} "
        f"duplicates={summary.duplicates} "
        f"history={len(summary.history)} "
        f"players={len(summary.leaderboard)} "
        f"live={'yes' if current is not None else 'no'}"
    )
    logger.info(message)
    if echo is not None:
        echo(message)
    return summary


__all__ = ["CycleSummary", "run_update_cycle"]
