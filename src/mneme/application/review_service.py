"""
Review and queue services, the callers of the pure scheduling core.

They fetch items from the repository, hand them to the core, and
persist whatever the core returns.
"""

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime

from mneme.application.outcome_classifier import OutcomeUpdate, apply_outcome
from mneme.application.queue_builder import QueueBuildResult, build_queue
from mneme.domain.constants import DEFAULT_MIN_INTERVAL_HOURS, DEFAULT_UPCOMING_WINDOW_HOURS
from mneme.domain.srs.models import ActivityOutcome, VocabItem
from mneme.domain.srs.ports import ItemRepository

logger = logging.getLogger(__name__)


class ItemLocks:
    """
    Per-item locks shared by every ReviewService bound to the same store.

    An entry exists only while some caller holds or waits on it, so the
    registry stays as small as the number of items under review.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._entries: dict[str, list] = {}  # item_id -> [lock, users]

    @contextmanager
    def hold(self, item_id: str) -> Iterator[None]:
        with self._guard:
            entry = self._entries.setdefault(item_id, [threading.Lock(), 0])
            entry[1] += 1
        try:
            with entry[0]:
                yield
        finally:
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    del self._entries[item_id]

    def __len__(self) -> int:
        with self._guard:
            return len(self._entries)


class ReviewService:
    """
    Applies learner outcomes to stored items.

    Read-modify-write of one item is serialized per item id; different
    items proceed in parallel. Services created per request must share
    one ItemLocks for the serialization to hold across requests.
    """

    def __init__(
        self,
        item_repo: ItemRepository,
        min_interval_hours: float = DEFAULT_MIN_INTERVAL_HOURS,
        locks: ItemLocks | None = None,
    ):
        self._repo = item_repo
        self._min_interval = min_interval_hours
        self._locks = locks if locks is not None else ItemLocks()

    def record_outcome(
        self, item_id: str, outcome: ActivityOutcome
    ) -> tuple[VocabItem, OutcomeUpdate]:
        """
        Grade the outcome, replace the item's schedule and counters, and save it.

        Raises:
            ItemNotFoundError: If the repository has no such item.
        """
        with self._locks.hold(item_id):
            item = self._repo.get_item(item_id)
            update = apply_outcome(item, outcome, min_interval_hours=self._min_interval)
            updated = replace(item, schedule=update.schedule, performance=update.performance)
            self._repo.save_item(updated)

        logger.info(
            f"Reviewed {item_id} ({outcome.activity_type.value}): quality {update.quality}, "
            f"streak {update.schedule.streak}, next due {update.schedule.due_at.isoformat()}"
        )
        return updated, update


class QueueService:
    """Builds practice queues from the stored item collection."""

    def __init__(
        self,
        item_repo: ItemRepository,
        upcoming_window_hours: float = DEFAULT_UPCOMING_WINDOW_HOURS,
        default_limit: int | None = None,
    ):
        self._repo = item_repo
        self._window = upcoming_window_hours
        self._default_limit = default_limit

    def get_queue(self, now: datetime, limit: int | None = None) -> QueueBuildResult:
        items = self._repo.list_items()
        return build_queue(
            items,
            now,
            limit=limit if limit is not None else self._default_limit,
            upcoming_window_hours=self._window,
        )
