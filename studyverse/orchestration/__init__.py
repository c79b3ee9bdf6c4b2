"""Orchestrators that turn a study request into a stored artifact."""

from .content import ContentGenerationOrchestrator, accumulate_deltas, generate_to_completion
from .quiz import QuizGenerationOrchestrator

__all__ = [
    "ContentGenerationOrchestrator",
    "QuizGenerationOrchestrator",
    "accumulate_deltas",
    "generate_to_completion",
]
