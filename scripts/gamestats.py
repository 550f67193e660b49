#!/usr/bin/env python3
"""CLI for running update cycles, inspecting stored stats, and serving the API."""

from __future__ import annotations

import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated

import typer

ROOT_DIR = Path(__file__).resolve().parents[1]
SRC_DIR = ROOT_DIR / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db import create_db_engine, create_session_factory
from domain.config import AppConfig, load_app_config
from domain.errors import AggregationError
from domain.pipeline import run_update_cycle
from repositories import ensure_game_stats_schema, load_history, load_leaderboard
from server.app import run_server
from sources import create_artifact_source, decode_snapshot, fetch_snapshot_payloads

DEFAULT_CONFIG_PATH = ROOT_DIR / "config" / "default.toml"

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Game session aggregation commands.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        help="TOML config file. Defaults to config/default.toml when present.",
    ),
]
DbUrlOption = Annotated[
    str | None,
    typer.Option("--db-url", help="Override the configured database URL."),
]


@app.callback()
def main(
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Python logging level (DEBUG, INFO, WARNING)."),
    ] = "WARNING",
) -> None:
    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config(config_path: Path | None, db_url: str | None) -> AppConfig:
    path = config_path
    if path is None and DEFAULT_CONFIG_PATH.exists():
        path = DEFAULT_CONFIG_PATH
    try:
        config = load_app_config(path)
    except (FileNotFoundError, ValueError) as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc
    if db_url is not None:
        config = replace(config, service=replace(config.service, db_url=db_url))
    return config


@app.command()
def update(
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Compute results without writing history or leaderboard."),
    ] = False,
) -> None:
    """Run one update cycle against the configured snapshot source."""
    config = _load_config(config_path, db_url)
    engine = create_db_engine(config.service.db_url)
    ensure_game_stats_schema(engine)
    session_factory = create_session_factory(engine)

    def fetch_payloads() -> list[tuple[str, bytes]]:
        return fetch_snapshot_payloads(
            create_artifact_source(config.source),
            filename_pattern=config.source.filename_pattern,
            timeout_sec=config.source.timeout_sec,
            echo=typer.echo,
        )

    try:
        summary = run_update_cycle(
            session_factory=session_factory,
            fetch_payloads=fetch_payloads,
            decode=decode_snapshot,
            settings=config.engine,
            dry_run=dry_run,
            echo=typer.echo,
        )
    except AggregationError as exc:
        typer.echo(f"update failed: {type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    for skipped in summary.skipped:
        typer.echo(f"skipped artifact={skipped.source_name} reason={skipped.reason} detail={skipped.detail}")
    if summary.current_session is not None:
        current = summary.current_session
        typer.echo(
            f"live map={current.map_name} round={current.current_round} "
            f"score={current.current_score.team1}-{current.current_score.team2} "
            f"duration={current.duration}"
        )


@app.command()
def show_leaderboard(
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
    top_n: Annotated[int, typer.Option("--top-n", help="Number of players to print.")] = 20,
) -> None:
    """Print the stored leaderboard."""
    if top_n <= 0:
        raise typer.BadParameter("--top-n must be greater than 0")

    config = _load_config(config_path, db_url)
    engine = create_db_engine(config.service.db_url)
    ensure_game_stats_schema(engine)
    with create_session_factory(engine)() as session:
        entries = load_leaderboard(session)

    if not entries:
        typer.echo("leaderboard is empty")
        return

    for index, entry in enumerate(entries[:top_n], start=1):
        typer.echo(
            f"{index:2d}. {entry.name:<24} "
            f"kd={entry.kd:6.2f} wins={entry.wins:3d} played={entry.matches_played:3d} "
            f"kills={entry.total_kills:4d} deaths={entry.total_deaths:4d}"
        )


@app.command()
def show_history(
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
) -> None:
    """Print every stored game result in history order."""
    config = _load_config(config_path, db_url)
    engine = create_db_engine(config.service.db_url)
    ensure_game_stats_schema(engine)
    with create_session_factory(engine)() as session:
        history = load_history(session)

    if not history:
        typer.echo("no games recorded")
        return

    for result in history:
        winners = ", ".join(result.winner) if result.winner else "draw"
        typer.echo(
            f"{result.start_time.isoformat()} map={result.map_name:<16} "
            f"score={result.final_score.team1}-{result.final_score.team2} "
            f"duration={result.duration} winners={winners}"
        )


@app.command()
def serve(
    config_path: ConfigOption = None,
    db_url: DbUrlOption = None,
) -> None:
    """Run the HTTP API with the background update loop."""
    run_server(_load_config(config_path, db_url))


if __name__ == "__main__":
    app()
