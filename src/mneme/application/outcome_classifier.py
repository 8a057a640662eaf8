"""
Outcome classifier: turns heterogeneous activity outcomes into one graded signal.

Recognition drills (flashcards) give a binary correct/incorrect signal.
Production drills (translation, writing) may also carry a continuous
score, which is quantized into an SM-2 quality grade. The graded quality
drives the interval engine; the raw outcome feeds per-skill counters.

Also hosts the read-only mastery queries derived from those counters.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Callable

from mneme.application.interval_engine import next_schedule
from mneme.domain.constants import (
    DEFAULT_MIN_INTERVAL_HOURS,
    HOURS_PER_DAY,
    MASTERY_STREAK,
    MASTERY_THRESHOLD,
    MAX_QUALITY,
    MIN_QUALITY,
    PRODUCTION_SCORE_GRADES,
    PRODUCTION_WEIGHT,
    QUALITY_CORRECT,
    QUALITY_INCORRECT,
    RECOGNITION_WEIGHT,
    SECONDS_PER_HOUR,
    SUCCESS_QUALITY,
)
from mneme.domain.srs.models import (
    ActivityOutcome,
    ActivityType,
    PerformanceCounters,
    ScheduleState,
    SkillCounter,
    VocabItem,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutcomeUpdate:
    """Replacement values the caller must persist onto the item."""

    schedule: ScheduleState
    performance: PerformanceCounters
    quality: int
    was_successful: bool


def apply_outcome(
    item: VocabItem,
    outcome: ActivityOutcome,
    min_interval_hours: float = DEFAULT_MIN_INTERVAL_HOURS,
) -> OutcomeUpdate:
    """
    Grade an activity outcome and compute the item's new schedule and counters.

    Never raises for a well-formed outcome: the derived quality is always
    clamped into [0, 5] before it reaches the interval engine.
    """
    quality = quality_for_outcome(outcome)
    review = next_schedule(
        quality,
        outcome.attempted_at,
        previous=item.schedule,
        min_interval_hours=min_interval_hours,
    )
    performance = record_attempt(item.performance, outcome)

    logger.debug(
        f"{item.id}: {outcome.activity_type.value} correct={outcome.was_correct} "
        f"score={outcome.score} -> quality {quality}"
    )
    return OutcomeUpdate(
        schedule=review.schedule,
        performance=performance,
        quality=quality,
        was_successful=review.was_successful,
    )


def quality_for_outcome(outcome: ActivityOutcome) -> int:
    """
    Map an activity outcome to an SM-2 quality grade.

    Recognition:
        correct -> 4, incorrect -> 2

    Production with a score (see PRODUCTION_SCORE_GRADES):
        >= 0.9 -> 5, >= 0.7 -> 4, >= 0.5 -> 3, >= 0.3 -> 2, else 1
        then ``was_correct`` wins at the pass/fail boundary: a correct
        attempt never grades below 3, an incorrect one never above 2.

    Production without a score falls back to the recognition mapping.
    """
    if outcome.activity_type is ActivityType.RECOGNITION:
        quality = _binary_quality(outcome.was_correct)
    elif outcome.activity_type is ActivityType.PRODUCTION:
        if outcome.score is None:
            quality = _binary_quality(outcome.was_correct)
        else:
            quality = _score_quality(outcome.score, outcome.was_correct)
    else:
        raise TypeError(f"Unsupported activity type: {outcome.activity_type!r}")

    return min(MAX_QUALITY, max(MIN_QUALITY, quality))


def _binary_quality(was_correct: bool) -> int:
    return QUALITY_CORRECT if was_correct else QUALITY_INCORRECT


def _score_quality(score: float, was_correct: bool) -> int:
    score = min(1.0, max(0.0, score))
    quality = next(grade for floor, grade in PRODUCTION_SCORE_GRADES if score >= floor)

    if was_correct:
        return max(quality, SUCCESS_QUALITY)
    return min(quality, SUCCESS_QUALITY - 1)


def record_attempt(
    previous: PerformanceCounters | None, outcome: ActivityOutcome
) -> PerformanceCounters:
    """Increment the bucket matching the outcome's activity type; leave the other as is."""
    base = previous or PerformanceCounters()
    bucket = base.bucket(outcome.activity_type)

    updated = SkillCounter(
        correct_count=bucket.correct_count + (1 if outcome.was_correct else 0),
        incorrect_count=bucket.incorrect_count + (0 if outcome.was_correct else 1),
        last_attempt_at=outcome.attempted_at,
    )

    if outcome.activity_type is ActivityType.RECOGNITION:
        return replace(base, recognition=updated)
    return replace(base, production=updated)


# ---------- Mastery ----------

# (recognition attempted, production attempted) -> blend of the two accuracies
_MASTERY_POLICY: dict[tuple[bool, bool], Callable[[float, float], float | None]] = {
    (False, False): lambda rec, prod: None,
    (True, False): lambda rec, prod: rec,
    (False, True): lambda rec, prod: prod,
    (True, True): lambda rec, prod: rec * RECOGNITION_WEIGHT + prod * PRODUCTION_WEIGHT,
}


def mastery_level(item: VocabItem) -> float | None:
    """
    Blended accuracy across both skill axes, or None if nothing was attempted.

    Production (active recall) weighs 0.6, recognition 0.4. When only one
    axis has attempts, its accuracy is used alone.
    """
    perf = item.performance or PerformanceCounters()
    rec, prod = perf.recognition, perf.production

    policy = _MASTERY_POLICY[(rec.total > 0, prod.total > 0)]
    return policy(rec.accuracy or 0.0, prod.accuracy or 0.0)


def is_mastered(item: VocabItem) -> bool:
    """
    True only with both accuracy (mastery >= 0.8) and durability (streak >= 3).
    """
    mastery = mastery_level(item)
    if mastery is None or mastery < MASTERY_THRESHOLD:
        return False

    streak = item.schedule.streak if item.schedule else 0
    return streak >= MASTERY_STREAK


def days_until_due(item: VocabItem, now: datetime) -> float | None:
    """Signed days until the item is due; negative when overdue."""
    if item.schedule is None:
        return None
    seconds = (item.schedule.due_at - now).total_seconds()
    return seconds / (SECONDS_PER_HOUR * HOURS_PER_DAY)


def is_due(item: VocabItem, now: datetime) -> bool:
    if item.schedule is None:
        return False
    return item.schedule.due_at <= now


def performance_summary(item: VocabItem, now: datetime) -> dict[str, Any]:
    """
    Human-readable breakdown of an item's performance for detail screens.
    """
    perf = item.performance or PerformanceCounters()
    days = days_until_due(item, now)

    return {
        "recognition": _bucket_summary(perf.recognition),
        "production": _bucket_summary(perf.production),
        "overall": {
            "mastery": mastery_level(item),
            "is_mastered": is_mastered(item),
            "streak": item.schedule.streak if item.schedule else 0,
            "days_until_due": round(days, 1) if days is not None else None,
            "is_due": is_due(item, now),
        },
    }


def _bucket_summary(bucket: SkillCounter) -> dict[str, Any]:
    return {
        "correct": bucket.correct_count,
        "incorrect": bucket.incorrect_count,
        "total": bucket.total,
        "accuracy": bucket.accuracy,
    }
