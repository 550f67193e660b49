"""HTTP entrypoint exposing leaderboard, history and live-session reads."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any

from aiohttp import web

from db import create_db_engine, create_session_factory
from domain.config import AppConfig
from domain.errors import AggregationError, CycleInProgress, RetrievalFailure
from repositories import ensure_game_stats_schema
from server.service import AggregationService
from server.state import EngineState

logger = logging.getLogger(__name__)

_TRUE_VALUES = ("1", "true", "yes", "on")


def _cors_headers(origin: str | None) -> dict[str, str]:
    if not origin:
        return {}
    return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}


@web.middleware
async def cors_middleware(request: web.Request, handler):
    if request.method == "OPTIONS":
        headers = {
            **_cors_headers(request.headers.get("Origin")),
            "Access-Control-Allow-Methods": "GET,OPTIONS",
            "Access-Control-Allow-Headers": "Content-Type",
            "Access-Control-Max-Age": "86400",
        }
        return web.Response(status=204, headers=headers)

    resp = await handler(request)
    for k, v in _cors_headers(request.headers.get("Origin")).items():
        resp.headers[k] = v
    return resp


def _state_payload(state: EngineState) -> dict[str, Any]:
    return {
        "gameResults": [result.as_dict() for result in state.history],
        "leaderboard": [entry.as_dict() for entry in state.leaderboard],
    }


def _cycle_error_response(exc: BaseException) -> web.Response:
    if isinstance(exc, asyncio.TimeoutError):
        status = 504
        message = "update cycle timed out"
    elif isinstance(exc, CycleInProgress):
        status = 409
        message = str(exc)
    elif isinstance(exc, RetrievalFailure):
        status = 502
        message = str(exc)
    else:
        status = 500
        message = str(exc)
    return web.json_response({"error": type(exc).__name__, "message": message}, status=status)


def create_app(
    config: AppConfig,
    svc: AggregationService | None = None,
    *,
    schedule: bool = True,
) -> web.Application:
    """Build the app; `schedule=False` serves stored state without the polling loop."""
    app = web.Application(middlewares=[cors_middleware])
    if svc is None:
        engine = create_db_engine(config.service.db_url)
        ensure_game_stats_schema(engine)
        svc = AggregationService(config, session_factory=create_session_factory(engine))
    start_time = time.time()

    app["config"] = config
    app["svc"] = svc

    async def on_startup(_: web.Application):
        await svc.start(poll=schedule)

    async def on_cleanup(_: web.Application):
        await svc.stop()

    app.on_startup.append(on_startup)
    app.on_cleanup.append(on_cleanup)

    async def ping(_: web.Request):
        return web.Response(text="pong")

    async def health(_: web.Request):
        state = svc.state.current()
        return web.json_response(
            {
                "ok": svc.last_error is None,
                "uptimeSec": time.time() - start_time,
                "stateVersion": state.version,
                "completedAt": state.completed_at.isoformat() if state.completed_at else None,
                "cycleRunning": svc.busy,
                "lastError": svc.last_error,
                "games": len(state.history),
                "players": len(state.leaderboard),
            }
        )

    async def leaderboard(_: web.Request):
        state = svc.state.current()
        return web.json_response([entry.as_dict() for entry in state.leaderboard])

    async def game_results(request: web.Request):
        if request.query.get("refresh", "").strip().lower() in _TRUE_VALUES:
            try:
                await svc.run_cycle_async()
            except (AggregationError, asyncio.TimeoutError) as exc:
                return _cycle_error_response(exc)
        state = svc.state.current()
        return web.json_response([result.as_dict() for result in state.history])

    async def current_game(_: web.Request):
        current = svc.current_session()
        return web.json_response(current.as_dict() if current is not None else {})

    async def check_files(_: web.Request):
        try:
            await svc.run_cycle_async()
        except (AggregationError, asyncio.TimeoutError) as exc:
            return _cycle_error_response(exc)
        return web.json_response(
            {
                "message": "Updated game results and leaderboard",
                **_state_payload(svc.state.current()),
            }
        )

    app.router.add_get("/ping", ping)
    app.router.add_get("/health", health)
    app.router.add_get("/leaderboard", leaderboard)
    app.router.add_get("/gameresults", game_results)
    app.router.add_get("/currentgame", current_game)
    app.router.add_get("/check-files", check_files)

    return app


def run_server(config: AppConfig) -> None:
    logger.info(
        "starting server host=%s port=%s source=%s poll_interval_sec=%s",
        config.service.host,
        config.service.port,
        config.source.kind,
        config.service.poll_interval_sec,
    )
    web.run_app(create_app(config), host=config.service.host, port=config.service.port)


__all__ = ["create_app", "run_server"]
