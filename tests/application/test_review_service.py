"""Tests for the review and queue services."""

import threading
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest

from mneme.application.review_service import ItemLocks, QueueService, ReviewService
from mneme.domain.errors import ItemNotFoundError
from mneme.domain.srs.models import ActivityOutcome, ActivityType
from mneme.infrastructure.adapters.memory_store import InMemoryStore

NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


def correct(at: datetime, activity=ActivityType.RECOGNITION) -> ActivityOutcome:
    return ActivityOutcome(activity_type=activity, was_correct=True, attempted_at=at)


def test_record_outcome_persists_schedule_and_counters(make_item):
    store = InMemoryStore(items=[make_item("v1")])
    service = ReviewService(store)

    item, update = service.record_outcome("v1", correct(NOW))

    stored = store.get_item("v1")
    assert stored == item
    assert stored.schedule == update.schedule
    assert stored.schedule.streak == 1
    assert stored.schedule.due_at == NOW + timedelta(hours=24)
    assert stored.performance.recognition.correct_count == 1
    assert stored.term == "hola"


def test_consecutive_reviews_graduate(make_item):
    store = InMemoryStore(items=[make_item("v1")])
    service = ReviewService(store)

    service.record_outcome("v1", correct(NOW))
    item, _ = service.record_outcome("v1", correct(NOW + timedelta(days=1), ActivityType.PRODUCTION))

    assert item.schedule.streak == 2
    assert item.schedule.interval_hours == 144
    assert item.performance.recognition.correct_count == 1
    assert item.performance.production.correct_count == 1


def test_configured_minimum_interval(make_item):
    store = InMemoryStore(items=[make_item("v1")])
    item, _ = ReviewService(store, min_interval_hours=48).record_outcome("v1", correct(NOW))
    assert item.schedule.interval_hours == 48


def test_unknown_item_raises(make_item):
    service = ReviewService(InMemoryStore())
    with pytest.raises(ItemNotFoundError):
        service.record_outcome("missing", correct(NOW))


def test_failed_lookup_does_not_save():
    repo = MagicMock()
    repo.get_item.side_effect = ItemNotFoundError("nope")

    with pytest.raises(ItemNotFoundError):
        ReviewService(repo).record_outcome("nope", correct(NOW))
    repo.save_item.assert_not_called()


def test_concurrent_reviews_of_one_item_are_serialized(make_item):
    store = InMemoryStore(items=[make_item("v1")])
    service = ReviewService(store)

    threads = [
        threading.Thread(target=service.record_outcome, args=("v1", correct(NOW)))
        for _ in range(20)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.get_item("v1").performance.recognition.correct_count == 20
    assert store.get_item("v1").schedule.streak == 20


class SlowStore(InMemoryStore):
    """Widens the read-modify-write window so overlapping reviews would lose updates."""

    def get_item(self, item_id):
        item = super().get_item(item_id)
        time.sleep(0.02)
        return item


def test_services_sharing_locks_serialize_reviews(make_item):
    store = SlowStore(items=[make_item("v1")])
    locks = ItemLocks()

    def review_once():
        ReviewService(store, locks=locks).record_outcome("v1", correct(NOW))

    threads = [threading.Thread(target=review_once) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert store.get_item("v1").performance.recognition.correct_count == 8


def test_item_locks_are_released_after_use(make_item):
    locks = ItemLocks()
    service = ReviewService(InMemoryStore(items=[make_item("a"), make_item("b")]), locks=locks)

    service.record_outcome("a", correct(NOW))
    service.record_outcome("b", correct(NOW))
    with pytest.raises(ItemNotFoundError):
        service.record_outcome("missing", correct(NOW))

    assert len(locks) == 0


def test_item_locks_keep_entry_while_held():
    locks = ItemLocks()
    with locks.hold("a"):
        assert len(locks) == 1
        with locks.hold("b"):
            assert len(locks) == 2
    assert len(locks) == 0


def test_queue_service_uses_default_limit(make_item):
    store = InMemoryStore(items=[make_item(f"v{i}") for i in range(5)])
    service = QueueService(store, default_limit=3)

    assert len(service.get_queue(NOW).queue) == 3
    assert len(service.get_queue(NOW, limit=1).queue) == 1
    assert service.get_queue(NOW).new_count == 5
