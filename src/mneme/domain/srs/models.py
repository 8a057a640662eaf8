"""
Domain models for spaced-repetition scheduling.

These are pure data structures with no I/O or external dependencies.
Every model is frozen: the scheduling core replaces values, it never
mutates them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from mneme.domain.constants import ALGORITHM_ID


class ActivityType(str, Enum):
    """Skill axis exercised by a learner action."""

    RECOGNITION = "recognition"  # passive: see the term, judge correctness
    PRODUCTION = "production"  # active: generate the term (e.g. translation)


@dataclass(frozen=True)
class ScheduleState:
    """
    Spaced-repetition bookkeeping for one vocabulary item.

    Attributes:
        streak: Consecutive successful reviews (0 after any failure).
        interval_hours: Hours between last_reviewed_at and due_at.
        ease_factor: Multiplier controlling interval growth (>= 1.3).
        due_at: When the item should next be reviewed.
        last_reviewed_at: Most recent review, or None if never reviewed.
        algorithm: Identifier of the scheduling method that produced this state.
    """

    streak: int
    interval_hours: float
    ease_factor: float
    due_at: datetime
    last_reviewed_at: datetime | None = None
    algorithm: str = ALGORITHM_ID


@dataclass(frozen=True)
class ReviewResult:
    """Result of one interval engine run."""

    schedule: ScheduleState
    was_successful: bool


@dataclass(frozen=True)
class SkillCounter:
    """Attempt counters for a single skill axis."""

    correct_count: int = 0
    incorrect_count: int = 0
    last_attempt_at: datetime | None = None

    @property
    def total(self) -> int:
        return self.correct_count + self.incorrect_count

    @property
    def accuracy(self) -> float | None:
        if self.total == 0:
            return None
        return self.correct_count / self.total


@dataclass(frozen=True)
class PerformanceCounters:
    """Independent recognition and production buckets for one item."""

    recognition: SkillCounter = field(default_factory=SkillCounter)
    production: SkillCounter = field(default_factory=SkillCounter)

    def bucket(self, activity_type: ActivityType) -> SkillCounter:
        if activity_type is ActivityType.RECOGNITION:
            return self.recognition
        return self.production


@dataclass(frozen=True)
class ActivityOutcome:
    """
    One learner action, consumed immediately by the outcome classifier.

    ``score`` is a continuous accuracy in [0, 1] and only carries meaning
    for production drills.
    """

    activity_type: ActivityType
    was_correct: bool
    attempted_at: datetime
    score: float | None = None


@dataclass(frozen=True)
class VocabItem:
    """
    A vocabulary item as supplied by the item store.

    The scheduling core reads and replaces only ``schedule`` and
    ``performance``; every other field belongs to the caller.
    """

    id: str
    term: str
    created_at: datetime
    meaning: str = ""
    schedule: ScheduleState | None = None
    performance: PerformanceCounters | None = None


@dataclass(frozen=True)
class DrillSession:
    """A completed practice session, produced outside the core."""

    started_at: datetime
    ended_at: datetime
    correct_count: int = 0
    incorrect_count: int = 0
    score: float = 0.0
    id: str | None = None


@dataclass(frozen=True)
class ProgressStats:
    """Dashboard statistics, recomputed from scratch on every call."""

    total_vocab_count: int
    learned_vocab_count: int
    review_due_count: int
    streak_days: int
    last_session_at: datetime | None
    user_id: str | None = None
