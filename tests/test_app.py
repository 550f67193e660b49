"""Tests for the HTTP routes."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from pathlib import Path

import pytest

from db import create_db_engine, create_session_factory
from domain.config import AppConfig, ServiceSettings, SourceSettings
from repositories import ensure_game_stats_schema
from server.app import create_app
from server.service import AggregationService
from sources import DirectoryArtifactSource
from factories import snapshot_vdf

NOW = datetime(2025, 2, 14, 6, 0, 0)


@pytest.fixture
def snapshot_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "snapshots"
    directory.mkdir()
    (directory / "backup_round01.txt").write_text(snapshot_vdf("2025-02-14 05:30:00", round=1))
    (directory / "backup_round02.txt").write_text(
        snapshot_vdf(
            "2025-02-14 05:50:00",
            round=2,
            first_half=(3, 3),
            team1=[("Alice", 3, 1)],
            team2=[("Bob", 1, 3)],
        )
    )
    (directory / "backup_round03.txt").write_text(
        snapshot_vdf("2025-02-14 05:59:30", round=1, map_name="de_vertigo", team1=[("Alice", 0, 0)])
    )
    return directory


@pytest.fixture
def svc(tmp_path: Path, snapshot_dir: Path) -> AggregationService:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'stats.sqlite3'}")
    ensure_game_stats_schema(engine)
    config = replace(
        AppConfig(),
        service=ServiceSettings(poll_interval_sec=3600),
        source=SourceSettings(kind="directory", path=snapshot_dir),
    )
    return AggregationService(config, session_factory=create_session_factory(engine), clock=lambda: NOW)


@pytest.fixture
async def client(aiohttp_client, svc: AggregationService):
    app = create_app(svc.config, svc, schedule=False)
    return await aiohttp_client(app)


async def test_ping(client) -> None:
    resp = await client.get("/ping")
    assert resp.status == 200
    assert await resp.text() == "pong"


async def test_check_files_runs_cycle_and_returns_both_collections(client) -> None:
    resp = await client.get("/check-files")
    assert resp.status == 200
    body = await resp.json()
    assert body["message"] == "Updated game results and leaderboard"
    assert len(body["gameResults"]) == 1
    game = body["gameResults"][0]
    assert game["finalScore"] == {"team1": 3, "team2": 3}
    assert game["winner"] == []
    assert game["loser"] == []
    assert {entry["name"] for entry in body["leaderboard"]} == {"Alice", "Bob"}


async def test_leaderboard_serves_last_completed_cycle(client) -> None:
    await client.get("/check-files")
    resp = await client.get("/leaderboard")
    assert resp.status == 200
    body = await resp.json()
    assert [entry["name"] for entry in body] == ["Alice", "Bob"]
    assert body[0]["kd"] == 3


async def test_gameresults_refresh_forces_cycle(client) -> None:
    resp = await client.get("/gameresults")
    assert resp.status == 200
    before = await resp.json()

    resp = await client.get("/gameresults", params={"refresh": "1"})
    assert resp.status == 200
    after = await resp.json()
    assert len(after) == len(before) + 1


async def test_currentgame_reports_live_session(client) -> None:
    await client.get("/check-files")
    resp = await client.get("/currentgame")
    body = await resp.json()
    assert body["map"] == "de_vertigo"
    assert body["currentRound"] == 1
    assert body["players"]["team1"] == [{"name": "Alice"}]


async def test_currentgame_is_empty_object_without_live_session(aiohttp_client, svc) -> None:
    stale = AggregationService(
        svc.config,
        session_factory=svc.session_factory,
        clock=lambda: datetime(2025, 2, 14, 9, 0, 0),
    )
    client = await aiohttp_client(create_app(stale.config, stale, schedule=False))
    await client.get("/check-files")
    resp = await client.get("/currentgame")
    assert await resp.json() == {}


async def test_failed_trigger_returns_error_and_keeps_state(client, svc, tmp_path: Path) -> None:
    await client.get("/check-files")
    good_state = svc.state.current()

    svc.source_factory = lambda: DirectoryArtifactSource(tmp_path / "missing")

    resp = await client.get("/check-files")
    assert resp.status == 502
    body = await resp.json()
    assert body["error"] == "RetrievalFailure"
    assert svc.state.current() is good_state

    resp = await client.get("/leaderboard")
    assert len(await resp.json()) == 2


async def test_health_reports_state_version(client) -> None:
    await client.get("/check-files")
    resp = await client.get("/health")
    body = await resp.json()
    assert body["stateVersion"] >= 2
    assert body["games"] == 1


async def test_trigger_while_cycle_runs_returns_conflict(client, svc) -> None:
    svc._cycle_lock.acquire()
    try:
        resp = await client.get("/check-files")
        assert resp.status == 409
        body = await resp.json()
        assert body["error"] == "CycleInProgress"

        resp = await client.get("/gameresults", params={"refresh": "1"})
        assert resp.status == 409

        resp = await client.get("/leaderboard")
        assert resp.status == 200
    finally:
        svc._cycle_lock.release()
