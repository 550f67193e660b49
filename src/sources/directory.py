"""Read snapshot files from a local directory."""

from __future__ import annotations

from pathlib import Path

from domain.errors import RetrievalFailure
from sources.base import ArtifactSource


class DirectoryArtifactSource(ArtifactSource):
    def __init__(self, root: Path) -> None:
        self.root = root

    def list_artifacts(self) -> list[str]:
        if not self.root.is_dir():
            raise RetrievalFailure(f"Snapshot directory not found: {self.root}")
        return [path.name for path in self.root.iterdir() if path.is_file()]

    def fetch_artifact(self, name: str) -> bytes:
        try:
            return (self.root / name).read_bytes()
        except OSError as exc:
            raise RetrievalFailure(f"Could not read {name}: {exc}") from exc
