"""Common contract for remote snapshot sources."""

from __future__ import annotations

import logging
import re
import time
from collections.abc import Callable

from domain.errors import RetrievalFailure

logger = logging.getLogger(__name__)


class ArtifactSource:
    """A listable, downloadable set of snapshot files.

    Use as a context manager so connection-based sources can open once per cycle.
    """

    def __enter__(self) -> "ArtifactSource":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        return None

    def list_artifacts(self) -> list[str]:
        raise NotImplementedError

    def fetch_artifact(self, name: str) -> bytes:
        raise NotImplementedError


def fetch_snapshot_payloads(
    source: ArtifactSource,
    *,
    filename_pattern: str,
    timeout_sec: float,
    echo: Callable[[str], None] | None = None,
    clock: Callable[[], float] = time.monotonic,
) -> list[tuple[str, bytes]]:
    """Download every matching artifact, or fail the whole batch.

    The deadline covers listing and all downloads together; nothing partial is returned.
    """
    pattern = re.compile(filename_pattern)
    deadline = clock() + timeout_sec

    with source:
        names = sorted(name for name in source.list_artifacts() if pattern.match(name))
        if not names:
            logger.info("no artifacts matched pattern=%s", filename_pattern)
            return []

        payloads: list[tuple[str, bytes]] = []
        for name in names:
            if clock() > deadline:
                raise RetrievalFailure(
                    f"retrieval exceeded {timeout_sec:.1f}s after {len(payloads)}/{len(names)} artifacts"
                )
            logger.debug("downloading artifact=%s", name)
            payloads.append((name, source.fetch_artifact(name)))

    if echo is not None:
        echo(f"downloaded_artifacts={len(payloads)}")
    return payloads


__all__ = ["ArtifactSource", "fetch_snapshot_payloads"]
