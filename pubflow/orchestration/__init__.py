"""Orchestration layer - workflow transitions for submission versions."""

from pubflow.orchestration.transitions import TransitionOutcome, TransitionService

__all__ = [
    "TransitionOutcome",
    "TransitionService",
]
