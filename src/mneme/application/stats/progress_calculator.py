"""
Progress calculator for deriving dashboard statistics.

This is a pure computation module with no I/O.
"""

from datetime import date, datetime, timedelta

from mneme.domain.constants import DEFAULT_LEARNED_STREAK_THRESHOLD
from mneme.domain.srs.models import DrillSession, ProgressStats, VocabItem


class ProgressCalculator:
    """
    Computes learner-level statistics from items and session history.

    Stateless and side-effect free.
    """

    def aggregate(
        self,
        items: list[VocabItem],
        sessions: list[DrillSession],
        now: datetime,
        learned_streak_threshold: int = DEFAULT_LEARNED_STREAK_THRESHOLD,
        user_id: str | None = None,
    ) -> ProgressStats:
        """
        Aggregate progress statistics.

        "Learned" here is the coarse streak-only notion used for dashboard
        totals; it ignores the accuracy threshold applied by is_mastered.
        """
        learned = 0
        due = 0

        for item in items:
            if item.schedule is None:
                continue
            if item.schedule.streak >= learned_streak_threshold:
                learned += 1
            if item.schedule.due_at <= now:
                due += 1

        end_times = [session.ended_at for session in sessions]

        return ProgressStats(
            total_vocab_count=len(items),
            learned_vocab_count=learned,
            review_due_count=due,
            streak_days=self._compute_streak_days(end_times, now),
            last_session_at=max(end_times) if end_times else None,
            user_id=user_id,
        )

    def _compute_streak_days(self, end_times: list[datetime], now: datetime) -> int:
        """
        Count consecutive calendar days with a session, walking back from today.

        No session today means a streak of 0, regardless of earlier days.
        """
        if not end_times:
            return 0

        active_days = {self._local_date(ended_at, now) for ended_at in end_times}

        streak = 0
        cursor = now.date()
        while cursor in active_days:
            streak += 1
            cursor -= timedelta(days=1)
        return streak

    def _local_date(self, moment: datetime, now: datetime) -> date:
        """
        Calendar date of ``moment`` as seen from ``now``'s timezone.
        """
        if moment.tzinfo is not None and now.tzinfo is not None:
            moment = moment.astimezone(now.tzinfo)
        return moment.date()


def aggregate(
    items: list[VocabItem],
    sessions: list[DrillSession],
    now: datetime,
    learned_streak_threshold: int = DEFAULT_LEARNED_STREAK_THRESHOLD,
) -> ProgressStats:
    """Module-level shortcut for ProgressCalculator().aggregate."""
    return ProgressCalculator().aggregate(
        items, sessions, now, learned_streak_threshold=learned_streak_threshold
    )
