"""Liveness helpers."""

from __future__ import annotations

from datetime import datetime, UTC

from ssfs import __version__


def liveness_report() -> dict:
    return {
        "status": "ok",
        "version": __version__,
        "ts": datetime.now(UTC).isoformat(),
    }
