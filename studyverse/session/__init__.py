"""Session state: the per-account context and the quiz state machine."""

from .context import SessionContext
from .quiz_session import QuizPhase, QuizSession, result_message

__all__ = ["QuizPhase", "QuizSession", "SessionContext", "result_message"]
