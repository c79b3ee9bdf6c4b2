"""LangGraph state for the quiz generation workflow."""

from typing import Any, Optional, TypedDict

from studyverse.models.study import QuizItem, QuizQuestion, StudyRequest


class QuizGenerationState(TypedDict, total=False):
    """State passed between the quiz workflow nodes."""

    request: StudyRequest
    questions: list[QuizQuestion]
    errors: list[str]
    validation_issues: list[dict[str, Any]]
    history_item: Optional[QuizItem]


def create_initial_state(request: StudyRequest) -> QuizGenerationState:
    """
    Create the starting state for one quiz generation.

    Args:
        request: Validated study request

    Returns:
        Initial workflow state
    """
    return QuizGenerationState(
        request=request,
        questions=[],
        errors=[],
        validation_issues=[],
        history_item=None,
    )
