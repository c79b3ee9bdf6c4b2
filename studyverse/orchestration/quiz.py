"""Quiz generation orchestrator - one batch call through the quiz workflow."""

from __future__ import annotations

import logging
from typing import Protocol

from studyverse.errors import GenerationFailed, InvalidGenerationResult
from studyverse.graph.state import create_initial_state
from studyverse.graph.workflow import compile_workflow
from studyverse.models.study import ArtifactKind, QuizQuestion, StudyRequest
from studyverse.session.context import SessionContext

logger = logging.getLogger(__name__)


class QuizClient(Protocol):
    def generate(self, request: StudyRequest) -> list[QuizQuestion]: ...


class QuizGenerationOrchestrator:
    """
    Generates a quiz atomically: either every question is valid and the quiz
    is stored and paid for, or nothing changes.
    """

    def __init__(self, client: QuizClient | None = None):
        if client is None:
            from studyverse.agents.quiz_writer import BedrockQuizClient

            client = BedrockQuizClient()
        self.client = client

    def generate(self, session: SessionContext, request: StudyRequest) -> list[QuizQuestion]:
        """
        Generate, validate and record a quiz.

        Args:
            session: Active session context
            request: Study request, including question count and difficulty

        Returns:
            The generated questions; the stored item is ``session.current_history_id``

        Raises:
            QuotaExceeded, InvalidRequest, GenerationInProgress: before any call
            GenerationFailed: the collaborator call failed
            InvalidGenerationResult: a question's answer index is out of range
        """
        session.check_can_generate(request)

        with session.generation_slot():
            workflow = compile_workflow(
                self.client,
                lambda questions: session.record_artifact(ArtifactKind.QUIZ, request, questions),
            )
            final_state = workflow.invoke(create_initial_state(request))

        if final_state.get("errors"):
            raise GenerationFailed()
        if final_state.get("validation_issues"):
            raise InvalidGenerationResult()
        if final_state.get("history_item") is None:
            raise GenerationFailed("Quiz generation finished without a result.")
        return final_state["questions"]
