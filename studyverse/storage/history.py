"""History store - newest-first log of generated artifacts per account."""

from __future__ import annotations

import logging
import time
from collections import Counter
from typing import Callable

from pydantic import ValidationError

from studyverse.errors import HistoryNotFound
from studyverse.models.account import AccountScope
from studyverse.models.study import ArtifactKind, HistoryItem, QuizItem, history_item_adapter
from studyverse.storage.gateway import PersistenceGateway

logger = logging.getLogger(__name__)

HISTORY_PREFIX = "history"


def _now_ms() -> int:
    return int(time.time() * 1000)


class HistoryStore:
    """
    Newest-first log of history items for one account scope.

    Items are kept newest first. After append, an item only changes when a
    score is attached to a quiz, or is discarded when its generation could
    not be charged. Every change is written through to the gateway as the
    whole list before the in-memory log is replaced.
    """

    def __init__(
        self,
        gateway: PersistenceGateway,
        scope: AccountScope,
        clock: Callable[[], int] = _now_ms,
        allow_score_overwrite: bool = True,
    ):
        self.gateway = gateway
        self.scope = scope
        self.clock = clock
        self.allow_score_overwrite = allow_score_overwrite
        self._items: list[HistoryItem] | None = None

    @property
    def key(self) -> str:
        return self.scope.storage_key(HISTORY_PREFIX)

    @property
    def items(self) -> list[HistoryItem]:
        if self._items is None:
            self._items = self._load()
        return self._items

    def _load(self) -> list[HistoryItem]:
        stored = self.gateway.read(self.key, expected=list)
        if stored is None:
            return []

        items: list[HistoryItem] = []
        for raw in stored:
            try:
                items.append(history_item_adapter.validate_python(raw))
            except ValidationError as e:
                logger.warning("Skipping unreadable history record in %s: %s", self.key, e)
        return items

    def _commit(self, items: list[HistoryItem]) -> None:
        """Write ``items`` through, then make them the in-memory log."""
        self.gateway.write(
            self.key,
            [history_item_adapter.dump_python(item, mode="json") for item in items],
        )
        self._items = items

    def _next_id(self) -> str:
        """Clock-derived id, bumped past the newest existing id on collision."""
        previous = [int(item.id) for item in self.items if item.id.isdigit()]
        candidate = self.clock()
        if previous:
            candidate = max(candidate, max(previous) + 1)
        return str(candidate)

    def append(self, item: HistoryItem) -> HistoryItem:
        """
        Add a new item at the front of the history.

        Args:
            item: Item to store; any id it carries is replaced

        Returns:
            The stored item with its assigned id

        Raises:
            PersistenceWriteError: Nothing was stored; the log is unchanged
        """
        new_id = self._next_id()
        stored = item.model_copy(update={"id": new_id, "timestamp": int(new_id)})
        self._commit([stored, *self.items])
        logger.info("History item %s (%s) added to %s", new_id, stored.type.value, self.key)
        return stored

    def get(self, item_id: str) -> HistoryItem:
        for item in self.items:
            if item.id == item_id:
                return item
        raise HistoryNotFound(item_id)

    def attach_score(self, item_id: str, score: int) -> bool:
        """
        Record the score of a completed quiz attempt.

        Unknown ids and non-quiz items are logged and ignored. Re-attaching
        the same score is a no-op; a different score replaces the old one
        only when ``allow_score_overwrite`` is set.

        Returns:
            True if the stored score changed
        """
        for index, item in enumerate(self.items):
            if item.id == item_id:
                break
        else:
            logger.warning("Cannot attach score: history item %s not found", item_id)
            return False

        if not isinstance(item, QuizItem):
            logger.warning("Cannot attach score to %s item %s", item.type.value, item_id)
            return False
        if not 0 <= score <= len(item.content):
            raise ValueError(f"Score {score} out of range for {len(item.content)} questions")
        if item.score == score:
            return False
        if item.score is not None and not self.allow_score_overwrite:
            logger.info("Keeping score %d on %s, retake scored %d", item.score, item_id, score)
            return False

        items = list(self.items)
        items[index] = item.model_copy(update={"score": score})
        self._commit(items)
        logger.info("Score %d attached to %s", score, item_id)
        return True

    def discard(self, item_id: str) -> None:
        """Remove an item whose generation could not be charged."""
        remaining = [item for item in self.items if item.id != item_id]
        if len(remaining) != len(self.items):
            self._commit(remaining)
            logger.info("History item %s removed from %s", item_id, self.key)

    def list_items(self) -> list[HistoryItem]:
        """All items, newest first."""
        return list(self.items)

    def filter_by_type(self, kind: ArtifactKind) -> list[HistoryItem]:
        kind = ArtifactKind(kind)
        return [item for item in self.items if item.type == kind]

    def stats(self) -> dict[ArtifactKind, int]:
        """Number of stored items per artifact kind."""
        counts = Counter(item.type for item in self.items)
        return {kind: counts.get(kind, 0) for kind in ArtifactKind}

    def __len__(self) -> int:
        return len(self.items)
