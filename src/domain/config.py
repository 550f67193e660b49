"""Load service configuration from TOML files and the environment."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import tomllib

DEFAULT_DB_URL = "sqlite:///gamestats.sqlite3"
DEFAULT_FILENAME_PATTERN = r"^backup_round\d+\.txt$"


@dataclass(frozen=True)
class EngineSettings:
    """Knobs for turning snapshots into sessions."""

    live_window_sec: float = 90.0
    timezone: str = "UTC"
    missing_round: int = 99
    unknown_map: str = "Unknown"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass(frozen=True)
class SourceSettings:
    kind: str = "ftp"
    path: Path | None = None
    host: str = ""
    port: int = 21
    user: str = ""
    password: str = ""
    filename_pattern: str = DEFAULT_FILENAME_PATTERN
    timeout_sec: float = 20.0


@dataclass(frozen=True)
class ServiceSettings:
    host: str = "0.0.0.0"
    port: int = 3000
    poll_interval_sec: float = 60.0
    cycle_timeout_sec: float = 120.0
    db_url: str = DEFAULT_DB_URL


@dataclass(frozen=True)
class AppConfig:
    service: ServiceSettings = field(default_factory=ServiceSettings)
    engine: EngineSettings = field(default_factory=EngineSettings)
    source: SourceSettings = field(default_factory=SourceSettings)
    file_path: Path | None = None


def load_app_config(file_path: Path | None = None, *, environ: dict[str, str] | None = None) -> AppConfig:
    """Load one TOML config (all defaults when absent) and apply env overrides."""
    raw: dict[str, Any] = {}
    if file_path is not None:
        if not file_path.exists():
            raise FileNotFoundError(f"Config file not found: {file_path}")
        with file_path.open("rb") as file:
            raw = tomllib.load(file)

    config = parse_app_config(raw, file_path)
    return apply_env_overrides(config, os.environ if environ is None else environ)


def parse_app_config(raw: dict[str, Any], file_path: Path | None) -> AppConfig:
    label = str(file_path) if file_path is not None else "<defaults>"
    return AppConfig(
        service=_parse_service(raw.get("service", {}), label),
        engine=_parse_engine(raw.get("engine", {}), label),
        source=_parse_source(raw.get("source", {}), label),
        file_path=file_path,
    )


def apply_env_overrides(config: AppConfig, environ: Any) -> AppConfig:
    service = config.service
    if environ.get("GAMESTATS_DB_URL"):
        service = replace(service, db_url=environ["GAMESTATS_DB_URL"])
    if environ.get("GAMESTATS_PORT"):
        service = replace(service, port=int(environ["GAMESTATS_PORT"]))

    source = config.source
    if environ.get("GAMESTATS_FTP_HOST"):
        source = replace(source, host=environ["GAMESTATS_FTP_HOST"])
    if environ.get("GAMESTATS_FTP_USER"):
        source = replace(source, user=environ["GAMESTATS_FTP_USER"])
    if environ.get("GAMESTATS_FTP_PASS"):
        source = replace(source, password=environ["GAMESTATS_FTP_PASS"])
    if environ.get("GAMESTATS_FTP_PORT"):
        source = replace(source, port=int(environ["GAMESTATS_FTP_PORT"]))

    return replace(config, service=service, source=source)


def _parse_service(raw: dict[str, Any], label: str) -> ServiceSettings:
    defaults = ServiceSettings()
    port = int(raw.get("port", defaults.port))
    if not 0 < port < 65536:
        raise ValueError(f"{label}: [service].port must be between 1 and 65535")

    poll_interval_sec = float(raw.get("poll_interval_sec", defaults.poll_interval_sec))
    if poll_interval_sec <= 0:
        raise ValueError(f"{label}: [service].poll_interval_sec must be > 0")

    cycle_timeout_sec = float(raw.get("cycle_timeout_sec", defaults.cycle_timeout_sec))
    if cycle_timeout_sec <= 0:
        raise ValueError(f"{label}: [service].cycle_timeout_sec must be > 0")

    return ServiceSettings(
        host=str(raw.get("host", defaults.host)),
        port=port,
        poll_interval_sec=poll_interval_sec,
        cycle_timeout_sec=cycle_timeout_sec,
        db_url=str(raw.get("db_url", defaults.db_url)),
    )


def _parse_engine(raw: dict[str, Any], label: str) -> EngineSettings:
    defaults = EngineSettings()
    live_window_sec = float(raw.get("live_window_sec", defaults.live_window_sec))
    if live_window_sec < 0:
        raise ValueError(f"{label}: [engine].live_window_sec must be >= 0")

    timezone = str(raw.get("timezone", defaults.timezone))
    try:
        ZoneInfo(timezone)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ValueError(f"{label}: [engine].timezone {timezone!r} is not a known zone") from exc

    unknown_map = str(raw.get("unknown_map", defaults.unknown_map)).strip()
    if not unknown_map:
        raise ValueError(f"{label}: [engine].unknown_map cannot be empty")

    return EngineSettings(
        live_window_sec=live_window_sec,
        timezone=timezone,
        missing_round=int(raw.get("missing_round", defaults.missing_round)),
        unknown_map=unknown_map,
    )


def _parse_source(raw: dict[str, Any], label: str) -> SourceSettings:
    defaults = SourceSettings()
    kind = str(raw.get("kind", defaults.kind)).strip().lower()
    if kind not in ("ftp", "directory"):
        raise ValueError(f"{label}: [source].kind must be 'ftp' or 'directory'")

    path_value = raw.get("path")
    path = None if path_value is None else Path(str(path_value))
    if kind == "directory" and path is None:
        raise ValueError(f"{label}: [source].path is required for kind='directory'")

    filename_pattern = str(raw.get("filename_pattern", defaults.filename_pattern))
    try:
        re.compile(filename_pattern)
    except re.error as exc:
        raise ValueError(f"{label}: [source].filename_pattern is not a valid regex") from exc

    timeout_sec = float(raw.get("timeout_sec", defaults.timeout_sec))
    if timeout_sec <= 0:
        raise ValueError(f"{label}: [source].timeout_sec must be > 0")

    return SourceSettings(
        kind=kind,
        path=path,
        host=str(raw.get("host", defaults.host)),
        port=int(raw.get("port", defaults.port)),
        user=str(raw.get("user", defaults.user)),
        password=str(raw.get("password", defaults.password)),
        filename_pattern=filename_pattern,
        timeout_sec=timeout_sec,
    )


__all__ = [
    "AppConfig",
    "DEFAULT_DB_URL",
    "DEFAULT_FILENAME_PATTERN",
    "EngineSettings",
    "ServiceSettings",
    "SourceSettings",
    "apply_env_overrides",
    "load_app_config",
    "parse_app_config",
]
