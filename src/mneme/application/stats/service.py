"""
Progress Service: application layer orchestrator.

Coordinates fetching items and sessions from the repositories and
aggregating them into dashboard statistics.
"""

import logging
from datetime import datetime

from mneme.domain.constants import DEFAULT_LEARNED_STREAK_THRESHOLD
from mneme.domain.srs.models import ProgressStats
from mneme.domain.srs.ports import ItemRepository, SessionRepository

from .progress_calculator import ProgressCalculator

logger = logging.getLogger(__name__)


class ProgressService:
    """
    Application service for learner progress.

    Follows Dependency Inversion: depends on the repository abstractions,
    not concrete adapter implementations.
    """

    def __init__(
        self,
        item_repo: ItemRepository,
        session_repo: SessionRepository,
        calculator: ProgressCalculator | None = None,
        learned_streak_threshold: int = DEFAULT_LEARNED_STREAK_THRESHOLD,
    ):
        """
        Args:
            item_repo: The repository (port) for vocabulary items.
            session_repo: The repository (port) for drill session history.
            calculator: Optional custom calculator; uses default if not provided.
            learned_streak_threshold: Streak at which an item counts as learned.
        """
        self._items = item_repo
        self._sessions = session_repo
        self._calc = calculator or ProgressCalculator()
        self._threshold = learned_streak_threshold

    def get_progress(self, now: datetime, user_id: str | None = None) -> ProgressStats:
        items = self._items.list_items()
        sessions = self._sessions.list_sessions()

        stats = self._calc.aggregate(
            items,
            sessions,
            now,
            learned_streak_threshold=self._threshold,
            user_id=user_id,
        )
        logger.debug(
            f"Progress: {stats.learned_vocab_count}/{stats.total_vocab_count} learned, "
            f"{stats.review_due_count} due, streak {stats.streak_days}d"
        )
        return stats
