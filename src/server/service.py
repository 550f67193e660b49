"""Owns the update cycle, its scheduling, and the served state."""

from __future__ import annotations

import asyncio
import logging
import threading
from collections.abc import Callable
from datetime import UTC, datetime, timedelta
from functools import partial
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from domain.common import CurrentSession
from domain.config import AppConfig
from domain.current import detect_current_session
from domain.errors import AggregationError, CycleInProgress, PersistenceFailure, RetrievalFailure
from domain.pipeline import CycleSummary, run_update_cycle
from repositories import load_history, load_leaderboard
from server.state import EngineState, StateContainer
from sources import ArtifactSource, create_artifact_source, decode_snapshot, fetch_snapshot_payloads

logger = logging.getLogger(__name__)


class AggregationService:
    """Single-flight update cycles over one persisted history."""

    def __init__(
        self,
        config: AppConfig,
        *,
        session_factory,
        source_factory: Callable[[], ArtifactSource] | None = None,
        decode: Callable[[bytes], Any] = decode_snapshot,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.session_factory = session_factory
        self.source_factory = source_factory or partial(create_artifact_source, config.source)
        self.decode = decode
        self.clock = clock or (lambda: datetime.now(UTC).replace(tzinfo=None))
        self.state = StateContainer()
        self.last_error: str | None = None

        self._cycle_lock = threading.Lock()
        self._running = False
        self._poll_task: asyncio.Task | None = None

    @property
    def busy(self) -> bool:
        return self._cycle_lock.locked()

    def prime(self) -> EngineState:
        """Serve whatever storage already holds until the first cycle completes."""
        try:
            with self.session_factory() as session:
                history = load_history(session)
                leaderboard = load_leaderboard(session)
        except SQLAlchemyError as exc:
            raise PersistenceFailure(f"Could not load stored state: {exc}") from exc
        return self.state.swap(history=tuple(history), leaderboard=tuple(leaderboard))

    def run_cycle(self, *, echo: Callable[[str], None] | None = None, wait: bool = True) -> CycleSummary:
        """Run one full cycle and publish its state.

        Blocks while another cycle runs; with `wait=False` raises
        CycleInProgress instead.
        """
        if not self._cycle_lock.acquire(blocking=wait):
            raise CycleInProgress("an update cycle is already running")
        try:
            try:
                summary = run_update_cycle(
                    session_factory=self.session_factory,
                    fetch_payloads=self._fetch_payloads,
                    decode=self.decode,
                    settings=self.config.engine,
                    now=self.clock(),
                    echo=echo,
                )
            except AggregationError as exc:
                self.last_error = f"{type(exc).__name__}: {exc}"
                logger.error("update cycle failed error=%s", self.last_error)
                raise

            self.last_error = None
            self.state.swap(
                history=summary.history,
                leaderboard=summary.leaderboard,
                latest_session=summary.latest_session,
                completed_at=summary.completed_at,
            )
            return summary
        finally:
            self._cycle_lock.release()

    async def run_cycle_async(self) -> CycleSummary:
        """Run a cycle in a worker thread with a bounded wait; never queues behind another."""
        return await asyncio.wait_for(
            asyncio.to_thread(partial(self.run_cycle, wait=False)),
            timeout=self.config.service.cycle_timeout_sec,
        )

    def current_session(self, now: datetime | None = None) -> CurrentSession | None:
        """Live session from the last completed cycle, judged against `now`."""
        latest = self.state.current().latest_session
        if not latest:
            return None
        return detect_current_session(
            [latest],
            now=now or self.clock(),
            live_window=timedelta(seconds=self.config.engine.live_window_sec),
        )

    async def start(self, *, poll: bool = True) -> None:
        try:
            self.prime()
        except PersistenceFailure as exc:
            self.last_error = f"{type(exc).__name__}: {exc}"
            logger.error("starting with empty state error=%s", self.last_error)
        if not poll:
            return
        self._running = True
        self._poll_task = asyncio.create_task(self._poll_loop())

    async def stop(self) -> None:
        self._running = False
        if self._poll_task:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None

    async def _poll_loop(self) -> None:
        interval = self.config.service.poll_interval_sec
        while self._running:
            if self.busy:
                logger.info("skipping scheduled cycle; previous cycle still running")
            else:
                try:
                    await self.run_cycle_async()
                except asyncio.TimeoutError:
                    self.last_error = "cycle timed out"
                    logger.error("scheduled cycle timed out after %.1fs", self.config.service.cycle_timeout_sec)
                except AggregationError:
                    # Already logged; keep serving the previous state.
                    pass
            await asyncio.sleep(interval)

    def _fetch_payloads(self) -> list[tuple[str, bytes]]:
        try:
            source = self.source_factory()
        except ValueError as exc:
            raise RetrievalFailure(f"Snapshot source is misconfigured: {exc}") from exc
        return fetch_snapshot_payloads(
            source,
            filename_pattern=self.config.source.filename_pattern,
            timeout_sec=self.config.source.timeout_sec,
        )


__all__ = ["AggregationService"]
