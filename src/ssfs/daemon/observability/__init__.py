"""Observability helpers for health and downstream notification."""

from .health import liveness_report
from .notify import DownstreamNotifier

__all__ = [
    "liveness_report",
    "DownstreamNotifier",
]
