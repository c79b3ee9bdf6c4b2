"""Shared test fixtures and configuration for pytest."""

from typing import Iterator

import pytest

from studyverse.config.settings import get_settings
from studyverse.models.account import AccountScope, Identity
from studyverse.models.study import (
    ArtifactKind,
    QuizDifficulty,
    QuizQuestion,
    StudyRequest,
    build_history_item,
)
from studyverse.session.context import SessionContext
from studyverse.storage.gateway import InMemoryGateway
from studyverse.storage.history import HistoryStore
from studyverse.storage.ledger import CreditLedger

FIXED_NOW_MS = 1_700_000_000_000


class FakeStreamClient:
    """Streaming collaborator that replays fixed chunks, optionally failing."""

    def __init__(self, chunks: list[str], fail_after: int | None = None):
        self.chunks = chunks
        self.fail_after = fail_after
        self.calls: list[tuple[StudyRequest, ArtifactKind]] = []

    def stream(self, request: StudyRequest, kind: ArtifactKind) -> Iterator[str]:
        self.calls.append((request, kind))
        return self._chunks()

    def _chunks(self) -> Iterator[str]:
        for i, chunk in enumerate(self.chunks):
            if self.fail_after is not None and i == self.fail_after:
                raise ConnectionError("stream dropped")
            yield chunk


class RefusingGateway(InMemoryGateway):
    """In-memory gateway whose writes fail for keys starting with ``prefix``."""

    def __init__(self, prefix: str = "", documents: dict[str, str] | None = None):
        super().__init__(documents)
        self.prefix = prefix

    def _write_raw(self, key: str, text: str) -> None:
        if key.startswith(self.prefix):
            raise OSError("disk full")
        super()._write_raw(key, text)


class FakeQuizClient:
    """Batch collaborator returning fixed questions or raising."""

    def __init__(self, questions: list[QuizQuestion] | None = None, error: Exception | None = None):
        self.questions = questions or []
        self.error = error
        self.calls: list[StudyRequest] = []

    def generate(self, request: StudyRequest) -> list[QuizQuestion]:
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return list(self.questions)


@pytest.fixture
def study_request() -> StudyRequest:
    """The French Revolution request used across scenarios."""
    return StudyRequest(
        subject="History",
        grade_class="10th Grade",
        board="CBSE",
        chapter_name="French Revolution",
        author="NCERT",
    )


@pytest.fixture
def quiz_request(study_request: StudyRequest) -> StudyRequest:
    return study_request.model_copy(
        update={"question_count": 3, "difficulty": QuizDifficulty.EASY}
    )


@pytest.fixture
def sample_questions() -> list[QuizQuestion]:
    """Three valid questions; correct answers are 1, 0 and 2."""
    return [
        QuizQuestion(
            question="In which year did the storming of the Bastille take place?",
            options=["1776", "1789", "1799", "1815"],
            correct_answer_index=1,
            explanation="The Bastille fell on 14 July 1789.",
        ),
        QuizQuestion(
            question="Who wrote 'The Social Contract'?",
            options=["Rousseau", "Voltaire", "Montesquieu", "Locke"],
            correct_answer_index=0,
            explanation="Jean-Jacques Rousseau published it in 1762.",
        ),
        QuizQuestion(
            question="What was the Third Estate?",
            options=["The clergy", "The nobility", "The commoners", "The king's council"],
            correct_answer_index=2,
            explanation="The Third Estate represented the common people of France.",
        ),
    ]


@pytest.fixture
def gateway() -> InMemoryGateway:
    return InMemoryGateway()


@pytest.fixture
def identity() -> Identity:
    return Identity(
        uid="user-123",
        display_name="Asha Rao",
        photo_url="https://example.com/asha.png",
        email="asha@example.com",
    )


@pytest.fixture
def make_session(gateway: InMemoryGateway, identity: Identity):
    """Build a session for ``identity`` with a given starting balance."""

    def _make(credits: int = 1, clock=lambda: FIXED_NOW_MS, store=None) -> SessionContext:
        store = store if store is not None else gateway
        scope = AccountScope.for_identity(identity)
        return SessionContext(
            store,
            identity=identity,
            settings=get_settings(),
            ledger=CreditLedger(store, scope, identity=identity, default_credits=credits),
            history=HistoryStore(store, scope, clock=clock),
        )

    return _make


@pytest.fixture
def session(make_session) -> SessionContext:
    return make_session(credits=1)


@pytest.fixture
def stored_quiz(session: SessionContext, quiz_request: StudyRequest, sample_questions):
    """A quiz item already in the session history, unscored."""
    return session.history.append(
        build_history_item(ArtifactKind.QUIZ, quiz_request, sample_questions)
    )
