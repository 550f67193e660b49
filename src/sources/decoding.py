"""Decode Valve KeyValues snapshot text."""

from __future__ import annotations

from typing import Any

import vdf

from domain.errors import DecodeFailure


def decode_snapshot(payload: bytes) -> dict[str, Any]:
    """Decode one snapshot file into a nested dict, raising DecodeFailure on bad input."""
    try:
        text = payload.decode("utf-8-sig", errors="replace")
        return vdf.loads(text)
    except (SyntaxError, ValueError, TypeError) as exc:
        raise DecodeFailure(str(exc)) from exc
