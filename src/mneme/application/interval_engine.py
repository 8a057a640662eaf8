"""
Interval engine: quality-graded SM-2 scheduling.

Pure computation module with no I/O. Given the previous schedule of an
item, a graded recall quality (0-5) and the review time, it produces the
replacement schedule.
"""

import logging
import math
from datetime import datetime, timedelta

from mneme.domain.constants import (
    ALGORITHM_ID,
    DEFAULT_MIN_INTERVAL_HOURS,
    EASE_DECIMALS,
    GRADUATION_MULTIPLIER,
    INITIAL_EASE_FACTOR,
    MAX_QUALITY,
    MIN_EASE_FACTOR,
    MIN_QUALITY,
    SUCCESS_QUALITY,
)
from mneme.domain.errors import InvalidInputError
from mneme.domain.srs.models import ReviewResult, ScheduleState

logger = logging.getLogger(__name__)


def next_schedule(
    quality: int,
    reviewed_at: datetime,
    previous: ScheduleState | None = None,
    min_interval_hours: float = DEFAULT_MIN_INTERVAL_HOURS,
) -> ReviewResult:
    """
    Compute the schedule that replaces ``previous`` after one review.

    Args:
        quality: Recall quality, 0 (total failure) to 5 (perfect).
        reviewed_at: When the review happened.
        previous: The item's current schedule, or None before its first review.
        min_interval_hours: Floor for the interval. Values below the
            built-in 24h default are raised to it.

    Returns:
        ReviewResult with the new ScheduleState and the success flag.

    Raises:
        InvalidInputError: If quality is not an integer in [0, 5].
    """
    _validate_quality(quality)

    minimum = max(DEFAULT_MIN_INTERVAL_HOURS, min_interval_hours)

    previous_ease = previous.ease_factor if previous else INITIAL_EASE_FACTOR
    previous_streak = previous.streak if previous else 0
    previous_interval = previous.interval_hours if previous else 0
    algorithm = previous.algorithm if previous else ALGORITHM_ID

    ease_factor = max(MIN_EASE_FACTOR, previous_ease + ease_delta(quality))
    was_successful = quality >= SUCCESS_QUALITY

    if not was_successful:
        streak = 0
        interval_hours = minimum
    elif previous_streak == 0:
        streak = 1
        interval_hours = minimum
    elif previous_streak == 1:
        streak = 2
        interval_hours = GRADUATION_MULTIPLIER * minimum
    else:
        streak = previous_streak + 1
        interval_hours = max(minimum, _round_half_up(previous_interval * ease_factor))

    schedule = ScheduleState(
        streak=streak,
        interval_hours=interval_hours,
        ease_factor=round(ease_factor, EASE_DECIMALS),
        due_at=reviewed_at + timedelta(hours=interval_hours),
        last_reviewed_at=reviewed_at,
        algorithm=algorithm,
    )

    logger.debug(
        f"quality={quality} streak {previous_streak}->{streak} "
        f"interval={interval_hours}h ease={schedule.ease_factor}"
    )
    return ReviewResult(schedule=schedule, was_successful=was_successful)


def ease_delta(quality: int) -> float:
    """
    SM-2 ease adjustment for a quality grade.

    Exactly 0 at quality 4, positive at 5, negative at 3 and below.
    """
    offset = MAX_QUALITY - quality
    return 0.1 - offset * (0.08 + offset * 0.02)


def _validate_quality(quality: int) -> None:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInputError(f"quality must be an integer, got {quality!r}")
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidInputError(
            f"quality must be between {MIN_QUALITY} and {MAX_QUALITY} inclusive, got {quality}"
        )


def _round_half_up(value: float) -> int:
    # round() would use banker's rounding
    return math.floor(value + 0.5)
