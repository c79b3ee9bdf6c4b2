"""Session context - everything one signed-in (or guest) session owns."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Any, Iterator

from studyverse.config.settings import Settings, get_settings
from studyverse.errors import (
    GenerationInProgress,
    InvalidRequest,
    PersistenceWriteError,
    QuotaExceeded,
)
from studyverse.models.account import AccountScope, Identity
from studyverse.models.study import (
    ArtifactKind,
    HistoryItem,
    QuizItem,
    StudyRequest,
    build_history_item,
)
from studyverse.session.quiz_session import QuizSession
from studyverse.storage.gateway import PersistenceGateway
from studyverse.storage.history import HistoryStore
from studyverse.storage.ledger import CreditLedger

logger = logging.getLogger(__name__)


class SessionContext:
    """
    Explicit session state passed to the generation orchestrators.

    Holds the account scope, its credit ledger and history, the id of the
    artifact currently on screen, and a guard that allows one generation at
    a time.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        identity: Identity | None = None,
        settings: Settings | None = None,
        history: HistoryStore | None = None,
        ledger: CreditLedger | None = None,
    ):
        settings = settings or get_settings()
        self.identity = identity
        self.scope = AccountScope.for_identity(identity)
        self.ledger = ledger if ledger is not None else CreditLedger(
            gateway,
            self.scope,
            identity=identity,
            default_credits=settings.default_credits,
            unlimited_plan_credits=settings.unlimited_plan_credits,
        )
        self.history = history if history is not None else HistoryStore(
            gateway,
            self.scope,
            allow_score_overwrite=settings.allow_score_overwrite,
        )
        self.current_history_id: str | None = None
        self._in_flight = threading.Lock()

    @property
    def is_generating(self) -> bool:
        return self._in_flight.locked()

    def check_can_generate(self, request: StudyRequest) -> None:
        """
        Reject a paid generation before any external call is made.

        Raises:
            QuotaExceeded: No credits left
            InvalidRequest: Subject, class or chapter is empty
            GenerationInProgress: Another generation is running
        """
        if not self.ledger.can_afford():
            raise QuotaExceeded()

        missing = request.missing_fields()
        if missing:
            raise InvalidRequest(missing)

        if self.is_generating:
            raise GenerationInProgress()

    @contextmanager
    def generation_slot(self) -> Iterator[None]:
        """
        Hold the session's single in-flight generation slot.

        The balance is checked again once the slot is held, so a generation
        started before another one spent the last credit is refused here.

        Raises:
            GenerationInProgress: The slot is already held
            QuotaExceeded: No credits left when the slot was acquired
        """
        if not self._in_flight.acquire(blocking=False):
            raise GenerationInProgress()
        try:
            if not self.ledger.can_afford():
                raise QuotaExceeded()
            yield
        finally:
            self._in_flight.release()

    def record_artifact(
        self, kind: ArtifactKind, request: StudyRequest, content: Any
    ) -> HistoryItem:
        """
        Commit a finished generation: append to history, then deduct a credit.

        Either both happen or neither does: an item that cannot be charged is
        discarded again.

        Returns:
            The stored history item

        Raises:
            QuotaExceeded: The balance reached zero during the generation
            PersistenceWriteError: The item or the new balance could not be saved
        """
        item = self.history.append(build_history_item(kind, request, content))

        try:
            result = self.ledger.try_deduct()
        except PersistenceWriteError:
            logger.warning("Credit for %s not saved, discarding the artifact", item.id)
            self.history.discard(item.id)
            raise
        if not result.ok:
            logger.warning("No credit left for %s, discarding the artifact", item.id)
            self.history.discard(item.id)
            raise QuotaExceeded()

        self.current_history_id = item.id
        return item

    def open_history_item(self, item_id: str) -> HistoryItem:
        """Make a stored artifact the current one."""
        item = self.history.get(item_id)
        self.current_history_id = item.id
        return item

    def attach_quiz_score(self, score: int) -> bool:
        """Store a completed quiz score on the current artifact, if any."""
        if self.current_history_id is None:
            logger.debug("Quiz finished with no current history item; score not stored")
            return False
        return self.history.attach_score(self.current_history_id, score)

    def start_quiz(self, item: QuizItem) -> QuizSession:
        """
        Build the quiz state machine for a stored quiz.

        The quiz becomes the current artifact. A quiz that already carries a
        score opens in replay mode. Completing an attempt stores its score on
        the current artifact through attach_quiz_score.
        """
        self.current_history_id = item.id
        return QuizSession.from_history_item(item, on_complete=self.attach_quiz_score)
