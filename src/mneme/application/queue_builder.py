"""
Queue builder for practice sessions.

Builds ordered practice queues by:
1. Partitioning items into due / upcoming / new / later buckets
2. Sorting each bucket (by due date, or creation time for new items)
3. Concatenating in priority order and truncating to the session size
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from mneme.domain.constants import DEFAULT_UPCOMING_WINDOW_HOURS, SECONDS_PER_HOUR
from mneme.domain.errors import InvalidInputError
from mneme.domain.srs.models import VocabItem

logger = logging.getLogger(__name__)


@dataclass
class QueueBuildResult:
    """Result of queue building operation."""

    queue: list[VocabItem]  # due ++ upcoming ++ new ++ later, truncated
    due_count: int  # Full bucket sizes, before truncation
    upcoming_count: int
    new_count: int


def build_queue(
    items: list[VocabItem],
    now: datetime,
    limit: int | None = None,
    upcoming_window_hours: float = DEFAULT_UPCOMING_WINDOW_HOURS,
) -> QueueBuildResult:
    """
    Build a practice queue prioritising due items, then upcoming, then new.

    Args:
        items: Candidate vocabulary items. Not mutated.
        now: Reference moment for due comparisons.
        limit: Maximum queue length (default: all items).
        upcoming_window_hours: Items due within this many hours count as upcoming.

    Returns:
        QueueBuildResult with the ordered queue and pre-truncation counts.
    """
    if limit is None:
        limit = len(items)

    due: list[VocabItem] = []
    upcoming: list[VocabItem] = []
    new_items: list[VocabItem] = []
    later: list[VocabItem] = []

    for item in items:
        if item.schedule is None:
            new_items.append(item)
            continue

        hours = hours_until_due(item, now)
        if hours <= 0:
            due.append(item)
        elif hours <= upcoming_window_hours:
            upcoming.append(item)
        else:
            later.append(item)

    # sorted() is stable, so ties keep input order
    due = sorted(due, key=_by_due)
    upcoming = sorted(upcoming, key=_by_due)
    new_items = sorted(new_items, key=lambda item: item.created_at)
    later = sorted(later, key=_by_due)

    queue = (due + upcoming + new_items + later)[: max(0, limit)]

    logger.debug(
        f"Queue: {len(due)} due, {len(upcoming)} upcoming, {len(new_items)} new, "
        f"{len(later)} later; returning {len(queue)}"
    )

    return QueueBuildResult(
        queue=queue,
        due_count=len(due),
        upcoming_count=len(upcoming),
        new_count=len(new_items),
    )


def hours_until_due(item: VocabItem, now: datetime) -> int:
    """
    Whole hours until the item is due, truncated toward zero.

    An item due in less than an hour therefore counts as due now.

    Raises:
        InvalidInputError: If the item has never been scheduled.
    """
    if item.schedule is None:
        raise InvalidInputError(f"Item {item.id} has no schedule")
    return int((item.schedule.due_at - now).total_seconds() / SECONDS_PER_HOUR)


def _by_due(item: VocabItem) -> datetime:
    return item.schedule.due_at  # only called on scheduled buckets
