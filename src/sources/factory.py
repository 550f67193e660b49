"""Build the configured artifact source."""

from __future__ import annotations

from domain.config import SourceSettings
from sources.base import ArtifactSource
from sources.directory import DirectoryArtifactSource
from sources.ftp import FtpArtifactSource


def create_artifact_source(settings: SourceSettings) -> ArtifactSource:
    if settings.kind == "directory":
        if settings.path is None:
            raise ValueError("directory source requires a path")
        return DirectoryArtifactSource(settings.path)
    if settings.kind == "ftp":
        return FtpArtifactSource(
            host=settings.host,
            user=settings.user,
            password=settings.password,
            port=settings.port,
            timeout_sec=settings.timeout_sec,
        )
    raise ValueError(f"Unsupported source kind: {settings.kind!r}")
