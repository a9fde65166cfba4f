"""Control-plane helpers."""

from .intake import IntakeHandler, IntakeOutcome, artifact_key, parse_envelope

__all__ = [
    "IntakeHandler",
    "IntakeOutcome",
    "artifact_key",
    "parse_envelope",
]
