"""Tests for the quiz generation orchestrator."""

import pytest

from conftest import FakeQuizClient, RefusingGateway
from studyverse.errors import (
    GenerationFailed,
    InvalidGenerationResult,
    InvalidRequest,
    PersistenceWriteError,
    QuotaExceeded,
)
from studyverse.models.study import QuizItem, QuizQuestion, StudyRequest
from studyverse.orchestration.quiz import QuizGenerationOrchestrator


class TestSuccessfulQuiz:
    """Test a quiz that generates cleanly."""

    def test_returns_questions_and_records_once(self, session, quiz_request, sample_questions):
        """Test one history item and one credit per quiz."""
        client = FakeQuizClient(sample_questions)
        questions = QuizGenerationOrchestrator(client).generate(session, quiz_request)

        items = session.history.list_items()
        assert questions == sample_questions
        assert len(items) == 1
        assert isinstance(items[0], QuizItem)
        assert items[0].content == sample_questions
        assert items[0].score is None
        assert session.ledger.credits == 0
        assert session.current_history_id == items[0].id
        assert client.calls == [quiz_request]

    def test_slot_released_after_generation(self, make_session, quiz_request, sample_questions):
        """Test that a second quiz can follow the first."""
        session = make_session(credits=2)
        orchestrator = QuizGenerationOrchestrator(FakeQuizClient(sample_questions))
        orchestrator.generate(session, quiz_request)
        orchestrator.generate(session, quiz_request)

        assert not session.is_generating
        assert len(session.history) == 2
        assert session.ledger.credits == 0


class TestRejectedQuiz:
    """Test checks made before the collaborator is called."""

    def test_no_credits(self, make_session, quiz_request, sample_questions):
        """Test that an empty balance stops the call."""
        session = make_session(credits=0)
        client = FakeQuizClient(sample_questions)

        with pytest.raises(QuotaExceeded):
            QuizGenerationOrchestrator(client).generate(session, quiz_request)

        assert client.calls == []
        assert len(session.history) == 0

    def test_incomplete_request(self, session, sample_questions):
        """Test that missing fields stop the call."""
        client = FakeQuizClient(sample_questions)

        with pytest.raises(InvalidRequest):
            QuizGenerationOrchestrator(client).generate(
                session, StudyRequest(subject="History", grade_class="10th Grade")
            )

        assert client.calls == []
        assert session.ledger.credits == 1


class TestFailedQuiz:
    """Test that failures leave no side effects."""

    def test_collaborator_error(self, session, quiz_request):
        """Test a transport failure."""
        client = FakeQuizClient(error=TimeoutError("model timed out"))

        with pytest.raises(GenerationFailed) as exc_info:
            QuizGenerationOrchestrator(client).generate(session, quiz_request)

        assert not isinstance(exc_info.value, InvalidGenerationResult)
        assert len(session.history) == 0
        assert session.ledger.credits == 1
        assert not session.is_generating

    def test_out_of_range_answer_index(self, session, quiz_request, sample_questions):
        """Test that one malformed question rejects the whole quiz."""
        bad = QuizQuestion(question="Broken?", options=["a", "b", "c"], correct_answer_index=3)
        client = FakeQuizClient(sample_questions + [bad])

        with pytest.raises(InvalidGenerationResult):
            QuizGenerationOrchestrator(client).generate(session, quiz_request)

        assert len(session.history) == 0
        assert session.ledger.credits == 1

    def test_negative_answer_index(self, session, quiz_request):
        """Test that a negative index is malformed too."""
        bad = QuizQuestion(question="Broken?", options=["a", "b"], correct_answer_index=-1)

        with pytest.raises(InvalidGenerationResult):
            QuizGenerationOrchestrator(FakeQuizClient([bad])).generate(session, quiz_request)

        assert session.ledger.credits == 1

    def test_invalid_result_is_a_generation_failure(self, session, quiz_request):
        """Test that callers can handle both failures the same way."""
        bad = QuizQuestion(question="Broken?", options=["a", "b"], correct_answer_index=5)

        with pytest.raises(GenerationFailed):
            QuizGenerationOrchestrator(FakeQuizClient([bad])).generate(session, quiz_request)

    def test_empty_result(self, session, quiz_request):
        """Test that no questions counts as a failed generation."""
        with pytest.raises(GenerationFailed):
            QuizGenerationOrchestrator(FakeQuizClient([])).generate(session, quiz_request)

        assert len(session.history) == 0
        assert session.ledger.credits == 1


class TestQuizPersistenceFailure:
    """Test a quiz that cannot be saved."""

    def test_history_write_failure(self, make_session, quiz_request, sample_questions):
        """Test that the write error reaches the caller and nothing is charged."""
        session = make_session(credits=2, store=RefusingGateway("history"))

        with pytest.raises(PersistenceWriteError):
            QuizGenerationOrchestrator(FakeQuizClient(sample_questions)).generate(
                session, quiz_request
            )

        assert len(session.history) == 0
        assert session.ledger.credits == 2
        assert not session.is_generating
