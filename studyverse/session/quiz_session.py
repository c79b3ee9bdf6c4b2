"""Quiz session - step state machine for playing or replaying a quiz."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable, Optional

from studyverse.models.study import QuizItem, QuizQuestion

logger = logging.getLogger(__name__)


class QuizPhase(str, Enum):
    """States of a quiz attempt."""

    ANSWERING = "answering"
    REVEALED = "revealed"
    COMPLETED = "completed"


def result_message(score: int, total: int) -> str:
    """Encouragement shown with a final score."""
    percentage = round(score / total * 100) if total else 0
    if percentage >= 80:
        return "Excellent work!"
    if percentage >= 50:
        return "Keep practicing!"
    return "Good effort!"


class QuizSession:
    """
    One learner's pass through a list of questions.

    Answering -> Revealed -> Answering(next) ... -> Completed(score).
    A session built with an existing score starts Completed in replay mode
    and accepts no selections or advances until reset() starts a fresh
    attempt. Illegal transitions are ignored and return False.
    """

    def __init__(
        self,
        questions: list[QuizQuestion],
        on_complete: Optional[Callable[[int], object]] = None,
        existing_score: Optional[int] = None,
    ):
        if not questions:
            raise ValueError("A quiz needs at least one question")
        if existing_score is not None and not 0 <= existing_score <= len(questions):
            raise ValueError(f"Score {existing_score} out of range for {len(questions)} questions")

        self.questions = list(questions)
        self.on_complete = on_complete
        self.reset()

        if existing_score is not None:
            self.score = existing_score
            self.phase = QuizPhase.COMPLETED
            self.is_replay = True

    @classmethod
    def from_history_item(
        cls,
        item: QuizItem,
        on_complete: Optional[Callable[[int], object]] = None,
    ) -> "QuizSession":
        return cls(item.content, on_complete=on_complete, existing_score=item.score)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def select_option(self, index: int) -> bool:
        """
        Answer the current question.

        Returns:
            True if the answer was accepted; False if the question was
            already answered, the quiz is completed, or this is a replay
        """
        if self.phase is not QuizPhase.ANSWERING:
            logger.debug("select_option(%d) ignored in %s", index, self.phase.value)
            return False

        question = self.current_question
        if not 0 <= index < len(question.options):
            raise ValueError(f"Option {index} out of range for {len(question.options)} options")

        self.selected_option = index
        self.phase = QuizPhase.REVEALED
        if index == question.correct_answer_index:
            self.score += 1
        return True

    def advance(self) -> bool:
        """Move past a revealed question, completing the quiz after the last."""
        if self.phase is not QuizPhase.REVEALED:
            logger.debug("advance() ignored in %s", self.phase.value)
            return False

        if self.current_index == len(self.questions) - 1:
            self.phase = QuizPhase.COMPLETED
            self._report_completion()
        else:
            self.current_index += 1
            self.selected_option = None
            self.phase = QuizPhase.ANSWERING
        return True

    def reset(self) -> None:
        """Discard progress and start a fresh live attempt."""
        self.current_index = 0
        self.selected_option: Optional[int] = None
        self.score = 0
        self.phase = QuizPhase.ANSWERING
        self.is_replay = False
        self._completion_reported = False

    def _report_completion(self) -> None:
        if self._completion_reported:
            return
        self._completion_reported = True
        if self.on_complete is not None:
            self.on_complete(self.score)

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    @property
    def current_question(self) -> QuizQuestion:
        return self.questions[self.current_index]

    @property
    def total(self) -> int:
        return len(self.questions)

    @property
    def revealed(self) -> bool:
        return self.phase is QuizPhase.REVEALED

    @property
    def completed(self) -> bool:
        return self.phase is QuizPhase.COMPLETED

    @property
    def last_answer_correct(self) -> Optional[bool]:
        """Whether the revealed answer was right; None before a reveal."""
        if self.phase is not QuizPhase.REVEALED:
            return None
        return self.selected_option == self.current_question.correct_answer_index

    @property
    def percentage(self) -> int:
        return round(self.score / self.total * 100)

    @property
    def result_message(self) -> str:
        return result_message(self.score, self.total)

    def share_text(self) -> str:
        return f"I scored {self.score}/{self.total} on my StudyVerse Quiz! 🎓"
