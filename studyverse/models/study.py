"""Pydantic models for study requests, quiz questions and history items."""

import time
from datetime import datetime
from enum import Enum
from typing import Annotated, ClassVar, Literal, Union

from pydantic import BaseModel, Field, TypeAdapter, field_validator

UNTITLED_CHAPTER = "Untitled Chapter"


class ArtifactKind(str, Enum):
    """Kinds of generated study artifacts kept in history."""

    SUMMARY = "Summary"
    ESSAY = "Essay"
    QUIZ = "Quiz"
    TUTOR_SESSION = "TutorSession"


class QuizDifficulty(str, Enum):
    """Quiz difficulty levels."""

    EASY = "Easy"
    MEDIUM = "Medium"
    HARD = "Hard"


class StudyRequest(BaseModel):
    """What the learner asked for. Every field is passed through to prompts."""

    subject: str = ""
    grade_class: str = ""
    board: str = ""
    language: str = "English"
    chapter_name: str = ""
    author: str = ""
    question_count: int | None = Field(None, ge=1, le=50)
    difficulty: QuizDifficulty | None = None

    REQUIRED_FIELDS: ClassVar[tuple[str, ...]] = ("subject", "grade_class", "chapter_name")

    @field_validator("subject", "grade_class", "board", "language", "chapter_name", "author")
    @classmethod
    def strip_text(cls, v: str) -> str:
        """Trim surrounding whitespace from free-text fields."""
        return v.strip()

    def missing_fields(self) -> list[str]:
        """Names of the required fields that are empty."""
        return [name for name in self.REQUIRED_FIELDS if not getattr(self, name)]

    @property
    def display_title(self) -> str:
        return self.chapter_name or UNTITLED_CHAPTER

    @property
    def display_subtitle(self) -> str:
        return f"{self.grade_class} • {self.subject}"

    model_config = {
        "json_schema_extra": {
            "example": {
                "subject": "History",
                "grade_class": "10th Grade",
                "board": "CBSE",
                "language": "English",
                "chapter_name": "The French Revolution",
                "author": "NCERT",
                "question_count": 5,
                "difficulty": "Medium",
            }
        }
    }


class QuizQuestion(BaseModel):
    """A single multiple choice question.

    The answer index is deliberately not range-checked here so a malformed
    generation result can be detected and reported by the quiz pipeline.
    """

    question: str = Field(..., min_length=1, description="The question text")
    options: list[str] = Field(
        ...,
        min_length=2,
        description="Answer options in display order",
    )
    correct_answer_index: int = Field(
        ...,
        description="Index into options of the correct answer",
    )
    explanation: str = Field(
        default="",
        description="Why the correct answer is correct",
    )

    @property
    def has_valid_answer(self) -> bool:
        return 0 <= self.correct_answer_index < len(self.options)

    @property
    def correct_option(self) -> str:
        return self.options[self.correct_answer_index]

    model_config = {
        "json_schema_extra": {
            "example": {
                "question": "In which year did the storming of the Bastille take place?",
                "options": ["1776", "1789", "1799", "1815"],
                "correct_answer_index": 1,
                "explanation": "The Bastille fell on 14 July 1789.",
            }
        }
    }


class QuizQuestionList(BaseModel):
    """Structured output returned by the quiz generation model."""

    questions: list[QuizQuestion] = Field(
        ...,
        description="List of generated questions",
    )


class TutorMessage(BaseModel):
    """One turn of a recorded tutor conversation."""

    role: Literal["user", "model"]
    text: str


# History items: one model per artifact kind, discriminated on ``type``


class _HistoryItemBase(BaseModel):
    id: str = ""
    title: str
    subtitle: str
    timestamp: int = Field(default_factory=lambda: int(time.time() * 1000))
    form_data: StudyRequest = Field(default_factory=StudyRequest)

    @property
    def created_at(self) -> datetime:
        return datetime.fromtimestamp(self.timestamp / 1000)


class SummaryItem(_HistoryItemBase):
    type: Literal[ArtifactKind.SUMMARY] = ArtifactKind.SUMMARY
    content: str


class EssayItem(_HistoryItemBase):
    type: Literal[ArtifactKind.ESSAY] = ArtifactKind.ESSAY
    content: str


class QuizItem(_HistoryItemBase):
    type: Literal[ArtifactKind.QUIZ] = ArtifactKind.QUIZ
    content: list[QuizQuestion]
    score: int | None = Field(None, ge=0)


class TutorSessionItem(_HistoryItemBase):
    type: Literal[ArtifactKind.TUTOR_SESSION] = ArtifactKind.TUTOR_SESSION
    content: list[TutorMessage] = Field(default_factory=list)


HistoryItem = Annotated[
    Union[SummaryItem, EssayItem, QuizItem, TutorSessionItem],
    Field(discriminator="type"),
]

history_item_adapter: TypeAdapter[HistoryItem] = TypeAdapter(HistoryItem)

_ITEM_MODELS = {
    ArtifactKind.SUMMARY: SummaryItem,
    ArtifactKind.ESSAY: EssayItem,
    ArtifactKind.QUIZ: QuizItem,
    ArtifactKind.TUTOR_SESSION: TutorSessionItem,
}


def build_history_item(kind: ArtifactKind, request: StudyRequest, content) -> HistoryItem:
    """
    Create an (unsaved) history item for a finished generation.

    Args:
        kind: Artifact kind that was generated
        request: Originating study request, stored as a snapshot
        content: Text for summaries/essays, questions for quizzes

    Returns:
        History item without an id; the history store assigns one on append
    """
    model = _ITEM_MODELS[ArtifactKind(kind)]
    return model(
        title=request.display_title,
        subtitle=request.display_subtitle,
        content=content,
        form_data=request.model_copy(),
    )
