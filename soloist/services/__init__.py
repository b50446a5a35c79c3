"""
Service layer for the progression engine.

The ProgressionEngine coordinates the pure progression rules with the
persistence collaborator.
"""

from soloist.services.progression_service import ProgressionEngine, ApplyResult, EngineState

__all__ = [
    "ProgressionEngine",
    "ApplyResult",
    "EngineState",
]
