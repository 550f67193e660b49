"""Fetch snapshot files from the game server's FTP account."""

from __future__ import annotations

import ftplib
import io
import logging

from domain.errors import RetrievalFailure
from sources.base import ArtifactSource

logger = logging.getLogger(__name__)


class FtpArtifactSource(ArtifactSource):
    """Plain FTP source; one connection per context-manager block."""

    def __init__(
        self,
        *,
        host: str,
        user: str,
        password: str,
        port: int = 21,
        timeout_sec: float = 20.0,
        directory: str | None = None,
    ) -> None:
        if not host:
            raise ValueError("FTP host is required")
        self.host = host
        self.user = user
        self.password = password
        self.port = port
        self.timeout_sec = timeout_sec
        self.directory = directory
        self._client: ftplib.FTP | None = None

    def __enter__(self) -> "FtpArtifactSource":
        client = ftplib.FTP(timeout=self.timeout_sec)
        try:
            client.connect(self.host, self.port)
            client.login(self.user, self.password)
            if self.directory:
                client.cwd(self.directory)
        except (OSError, ftplib.Error) as exc:
            client.close()
            raise RetrievalFailure(f"FTP connection to {self.host}:{self.port} failed: {exc}") from exc
        logger.info("connected to ftp host=%s port=%s", self.host, self.port)
        self._client = client
        return self

    def close(self) -> None:
        if self._client is None:
            return
        try:
            self._client.quit()
        except (OSError, ftplib.Error):
            self._client.close()
        self._client = None

    def list_artifacts(self) -> list[str]:
        client = self._require_client()
        try:
            return [name.rsplit("/", 1)[-1] for name in client.nlst()]
        except ftplib.error_perm as exc:
            # Some servers answer 550 for an empty directory listing.
            if str(exc).startswith("550"):
                return []
            raise RetrievalFailure(f"FTP listing failed: {exc}") from exc
        except (OSError, ftplib.Error) as exc:
            raise RetrievalFailure(f"FTP listing failed: {exc}") from exc

    def fetch_artifact(self, name: str) -> bytes:
        client = self._require_client()
        buffer = io.BytesIO()
        try:
            client.retrbinary(f"RETR {name}", buffer.write)
        except (OSError, ftplib.Error) as exc:
            raise RetrievalFailure(f"FTP download of {name} failed: {exc}") from exc
        return buffer.getvalue()

    def _require_client(self) -> ftplib.FTP:
        if self._client is None:
            raise RuntimeError("FtpArtifactSource must be used inside a `with` block")
        return self._client
