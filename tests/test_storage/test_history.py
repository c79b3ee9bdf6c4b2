"""Tests for the history store."""

import itertools

import pytest

from conftest import RefusingGateway
from studyverse.errors import HistoryNotFound, PersistenceWriteError
from studyverse.models.account import AccountScope
from studyverse.models.study import ArtifactKind, QuizItem, build_history_item
from studyverse.storage.gateway import InMemoryGateway
from studyverse.storage.history import HistoryStore

SCOPE = AccountScope(account_id="user-123")


def make_store(gateway, clock=lambda: 1_000, **kwargs) -> HistoryStore:
    return HistoryStore(gateway, SCOPE, clock=clock, **kwargs)


@pytest.fixture
def summary_item(study_request):
    return build_history_item(ArtifactKind.SUMMARY, study_request, "Summary text")


@pytest.fixture
def quiz_item(quiz_request, sample_questions):
    return build_history_item(ArtifactKind.QUIZ, quiz_request, sample_questions)


class TestAppend:
    """Test appending and ordering."""

    def test_list_is_newest_first(self, gateway, study_request):
        """Test that A, B, C appended in order list as C, B, A."""
        ticks = itertools.count(1_000, 10)
        store = make_store(gateway, clock=lambda: next(ticks))
        for text in ("A", "B", "C"):
            store.append(build_history_item(ArtifactKind.SUMMARY, study_request, text))

        assert [item.content for item in store.list_items()] == ["C", "B", "A"]

    def test_assigns_clock_derived_id(self, gateway, summary_item):
        """Test that the id comes from the clock."""
        stored = make_store(gateway, clock=lambda: 1_234).append(summary_item)

        assert stored.id == "1234"
        assert stored.timestamp == 1234

    def test_same_millisecond_ids_stay_unique(self, gateway, summary_item):
        """Test that a frozen clock still yields increasing unique ids."""
        store = make_store(gateway, clock=lambda: 5_000)
        ids = [store.append(summary_item).id for _ in range(3)]

        assert ids == ["5000", "5001", "5002"]

    def test_clock_going_backwards_keeps_ids_increasing(self, gateway, summary_item):
        """Test that ids never repeat after a clock adjustment."""
        ticks = iter([9_000, 3_000])
        store = make_store(gateway, clock=lambda: next(ticks))

        first = store.append(summary_item)
        second = store.append(summary_item)

        assert int(second.id) > int(first.id)

    def test_append_is_persisted(self, gateway, summary_item):
        """Test that history survives a reload."""
        make_store(gateway).append(summary_item)
        reloaded = make_store(gateway)

        assert len(reloaded) == 1
        assert reloaded.list_items()[0].content == "Summary text"

    def test_guest_history_key(self, summary_item):
        """Test that guest history uses the reserved key."""
        gateway = InMemoryGateway()
        HistoryStore(gateway, AccountScope.guest()).append(summary_item)

        assert len(gateway.read("history_guest", expected=list)) == 1

    def test_list_returns_a_copy(self, gateway, summary_item):
        """Test that callers cannot reorder the stored log."""
        store = make_store(gateway)
        store.append(summary_item)
        store.list_items().clear()

        assert len(store) == 1


class TestLoading:
    """Test reading stored history."""

    def test_malformed_document_is_empty(self):
        """Test that unparsable history falls back to empty."""
        store = make_store(InMemoryGateway({"history_user-123": "]]"}))

        assert store.list_items() == []

    def test_non_array_document_is_empty(self):
        """Test that an object instead of a list falls back to empty."""
        store = make_store(InMemoryGateway({"history_user-123": '{"a": 1}'}))

        assert store.list_items() == []

    def test_unreadable_records_are_skipped(self, gateway, summary_item):
        """Test that one bad record does not lose the rest."""
        good = make_store(gateway).append(summary_item)
        raw = gateway.read("history_user-123", expected=list)
        raw.append({"type": "Summary", "title": "missing content"})
        gateway.write("history_user-123", raw)

        items = make_store(gateway).list_items()

        assert [item.id for item in items] == [good.id]


class TestAttachScore:
    """Test the one permitted mutation."""

    def test_attaches_score_to_quiz(self, gateway, quiz_item):
        """Test attaching a score and persisting it."""
        store = make_store(gateway)
        stored = store.append(quiz_item)

        assert store.attach_score(stored.id, 2)
        assert make_store(gateway).get(stored.id).score == 2

    def test_same_score_is_a_no_op(self, gateway, quiz_item):
        """Test idempotent re-attachment."""
        store = make_store(gateway)
        stored = store.append(quiz_item)
        store.attach_score(stored.id, 2)

        assert not store.attach_score(stored.id, 2)
        assert store.get(stored.id).score == 2

    def test_different_score_overwrites_by_default(self, gateway, quiz_item):
        """Test that a retake replaces the score."""
        store = make_store(gateway)
        stored = store.append(quiz_item)
        store.attach_score(stored.id, 1)

        assert store.attach_score(stored.id, 3)
        assert store.get(stored.id).score == 3

    def test_overwrite_can_be_disabled(self, gateway, quiz_item):
        """Test keeping the first score when overwrites are off."""
        store = make_store(gateway, allow_score_overwrite=False)
        stored = store.append(quiz_item)
        store.attach_score(stored.id, 1)

        assert not store.attach_score(stored.id, 3)
        assert store.get(stored.id).score == 1

    def test_unknown_id_is_ignored(self, gateway, quiz_item):
        """Test that attaching to a missing id changes nothing."""
        store = make_store(gateway)
        store.append(quiz_item)

        assert not store.attach_score("does-not-exist", 1)
        assert store.list_items()[0].score is None

    def test_non_quiz_item_is_ignored(self, gateway, summary_item):
        """Test that only quiz items carry scores."""
        store = make_store(gateway)
        stored = store.append(summary_item)

        assert not store.attach_score(stored.id, 1)

    def test_score_above_question_count_rejected(self, gateway, quiz_item):
        """Test that a score cannot exceed the number of questions."""
        store = make_store(gateway)
        stored = store.append(quiz_item)

        with pytest.raises(ValueError):
            store.attach_score(stored.id, 4)

    def test_other_items_untouched(self, gateway, quiz_item, summary_item):
        """Test that attaching a score leaves the rest of the log intact."""
        ticks = itertools.count(1_000)
        store = make_store(gateway, clock=lambda: next(ticks))
        quiz = store.append(quiz_item)
        summary = store.append(summary_item)

        store.attach_score(quiz.id, 1)

        assert store.get(summary.id) == summary
        assert [item.id for item in store.list_items()] == [summary.id, quiz.id]


class TestQueries:
    """Test lookup, filtering and stats."""

    def test_get_unknown_raises(self, gateway):
        """Test lookup of a missing id."""
        with pytest.raises(HistoryNotFound):
            make_store(gateway).get("nope")

    def test_filter_by_type(self, gateway, summary_item, quiz_item):
        """Test filtering keeps order and only the requested kind."""
        ticks = itertools.count(1_000)
        store = make_store(gateway, clock=lambda: next(ticks))
        store.append(summary_item)
        store.append(quiz_item)
        store.append(summary_item)

        summaries = store.filter_by_type(ArtifactKind.SUMMARY)

        assert len(summaries) == 2
        assert all(item.type == ArtifactKind.SUMMARY for item in summaries)
        assert int(summaries[0].id) > int(summaries[1].id)
        assert all(isinstance(item, QuizItem) for item in store.filter_by_type("Quiz"))

    def test_stats_count_every_kind(self, gateway, summary_item, quiz_item):
        """Test the per-kind dashboard counts."""
        store = make_store(gateway)
        store.append(summary_item)
        store.append(quiz_item)

        assert store.stats() == {
            ArtifactKind.SUMMARY: 1,
            ArtifactKind.ESSAY: 0,
            ArtifactKind.QUIZ: 1,
            ArtifactKind.TUTOR_SESSION: 0,
        }


class TestWriteFailures:
    """Test that the in-memory log only changes once a write succeeds."""

    def test_failed_append_leaves_log_unchanged(self, summary_item):
        """Test that an item that was not saved is not listed."""
        store = make_store(RefusingGateway("history"))

        with pytest.raises(PersistenceWriteError):
            store.append(summary_item)

        assert len(store) == 0

    def test_failed_score_attach_keeps_old_score(self, gateway, quiz_item):
        """Test that a score that was not saved is not shown."""
        stored = make_store(gateway).append(quiz_item)
        store = make_store(RefusingGateway("history", documents=gateway.documents))

        with pytest.raises(PersistenceWriteError):
            store.attach_score(stored.id, 2)

        assert store.get(stored.id).score is None


class TestDiscard:
    """Test removing an uncharged item."""

    def test_discard_removes_and_persists(self, gateway, summary_item, quiz_item):
        """Test that the item is gone after a reload."""
        ticks = itertools.count(1_000)
        store = make_store(gateway, clock=lambda: next(ticks))
        kept = store.append(summary_item)
        dropped = store.append(quiz_item)

        store.discard(dropped.id)

        assert [item.id for item in make_store(gateway).list_items()] == [kept.id]

    def test_discard_unknown_id_writes_nothing(self, summary_item):
        """Test that discarding a missing id leaves the store alone."""
        gateway = InMemoryGateway()
        store = make_store(gateway)
        store.append(summary_item)
        before = dict(gateway.documents)

        store.discard("missing")

        assert gateway.documents == before
        assert len(store) == 1
