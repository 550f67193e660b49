"""Snapshot artifact retrieval and decoding."""

from sources.base import ArtifactSource, fetch_snapshot_payloads
from sources.decoding import decode_snapshot
from sources.directory import DirectoryArtifactSource
from sources.ftp import FtpArtifactSource
from sources.factory import create_artifact_source

__all__ = [
    "ArtifactSource",
    "DirectoryArtifactSource",
    "FtpArtifactSource",
    "create_artifact_source",
    "decode_snapshot",
    "fetch_snapshot_payloads",
]
