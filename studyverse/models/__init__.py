"""Data models for the study session core."""

from .account import (
    PLAN_CATALOG,
    AccountScope,
    Identity,
    PlanOffer,
    PlanType,
    UserProfile,
)
from .study import (
    ArtifactKind,
    EssayItem,
    HistoryItem,
    QuizDifficulty,
    QuizItem,
    QuizQuestion,
    QuizQuestionList,
    StudyRequest,
    SummaryItem,
    TutorMessage,
    TutorSessionItem,
    build_history_item,
    history_item_adapter,
)

__all__ = [
    "AccountScope",
    "ArtifactKind",
    "EssayItem",
    "HistoryItem",
    "Identity",
    "PLAN_CATALOG",
    "PlanOffer",
    "PlanType",
    "QuizDifficulty",
    "QuizItem",
    "QuizQuestion",
    "QuizQuestionList",
    "StudyRequest",
    "SummaryItem",
    "TutorMessage",
    "TutorSessionItem",
    "UserProfile",
    "build_history_item",
    "history_item_adapter",
]
