"""Tests for outcome grading, counter updates and mastery queries."""

from datetime import datetime, timedelta, timezone

import pytest

from mneme.application.outcome_classifier import (
    apply_outcome,
    days_until_due,
    is_due,
    is_mastered,
    mastery_level,
    performance_summary,
    quality_for_outcome,
    record_attempt,
)
from mneme.domain.srs.models import (
    ActivityOutcome,
    ActivityType,
    PerformanceCounters,
    ScheduleState,
    SkillCounter,
)

UTC = timezone.utc
T0 = datetime(2025, 1, 1, tzinfo=UTC)
NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)

REC = ActivityType.RECOGNITION
PROD = ActivityType.PRODUCTION


def outcome(activity=REC, correct=True, score=None, at=T0):
    return ActivityOutcome(activity_type=activity, was_correct=correct, attempted_at=at, score=score)


def counters(rec=(0, 0), prod=(0, 0)):
    return PerformanceCounters(
        recognition=SkillCounter(correct_count=rec[0], incorrect_count=rec[1]),
        production=SkillCounter(correct_count=prod[0], incorrect_count=prod[1]),
    )


def schedule(streak=1, due_at=NOW):
    return ScheduleState(
        streak=streak, interval_hours=24, ease_factor=2.5, due_at=due_at, last_reviewed_at=T0
    )


class TestApplyOutcome:
    def test_recognition_correct(self, make_item):
        update = apply_outcome(make_item(), outcome(REC, True))

        assert update.performance.recognition.correct_count == 1
        assert update.performance.recognition.incorrect_count == 0
        assert update.performance.recognition.last_attempt_at == T0
        assert update.performance.production.correct_count == 0
        assert update.schedule.streak == 1
        assert update.schedule.interval_hours == 24

    def test_recognition_incorrect(self, make_item):
        update = apply_outcome(make_item(), outcome(REC, False))

        assert update.performance.recognition.correct_count == 0
        assert update.performance.recognition.incorrect_count == 1
        assert update.schedule.streak == 0
        assert update.was_successful is False

    def test_production_high_score_uses_top_grade(self, make_item):
        update = apply_outcome(make_item(), outcome(PROD, True, score=0.95))

        assert update.quality == 5
        assert update.performance.production.correct_count == 1
        assert update.performance.recognition.correct_count == 0
        assert update.schedule.streak == 1
        assert update.schedule.ease_factor > 2.5

    def test_partial_translation_success_beats_failure(self, make_item):
        partial = apply_outcome(make_item(), outcome(PROD, True, score=0.6))
        failed = apply_outcome(make_item("vocab-2"), outcome(PROD, False, score=0.4))

        assert partial.schedule.ease_factor > failed.schedule.ease_factor
        assert partial.was_successful is True
        assert failed.was_successful is False

    def test_accumulates_existing_counters(self, make_item):
        item = make_item(performance=counters(rec=(2, 1)))
        update = apply_outcome(item, outcome(REC, True, at=T0 + timedelta(days=1)))

        assert update.performance.recognition.correct_count == 3
        assert update.performance.recognition.incorrect_count == 1

    def test_other_bucket_untouched(self, make_item):
        production = SkillCounter(correct_count=4, incorrect_count=2, last_attempt_at=T0)
        item = make_item(performance=PerformanceCounters(production=production))

        update = apply_outcome(item, outcome(REC, False, at=NOW))

        assert update.performance.production == production
        assert update.performance.recognition.last_attempt_at == NOW

    def test_uses_existing_schedule(self, make_item):
        item = make_item(schedule=schedule(streak=1))
        update = apply_outcome(item, outcome(REC, True, at=NOW))

        assert update.schedule.streak == 2
        assert update.schedule.interval_hours == 144

    def test_item_not_mutated(self, make_item):
        item = make_item(performance=counters(rec=(1, 1)))
        apply_outcome(item, outcome(REC, True))
        assert item.performance == counters(rec=(1, 1))
        assert item.schedule is None


class TestQualityMapping:
    def test_recognition_is_binary(self):
        assert quality_for_outcome(outcome(REC, True)) == 4
        assert quality_for_outcome(outcome(REC, False)) == 2

    def test_recognition_ignores_score(self):
        assert quality_for_outcome(outcome(REC, True, score=0.1)) == 4

    def test_production_without_score_falls_back_to_binary(self):
        assert quality_for_outcome(outcome(PROD, True)) == 4
        assert quality_for_outcome(outcome(PROD, False)) == 2

    @pytest.mark.parametrize(
        "score,correct,expected",
        [
            (1.0, True, 5),
            (0.9, True, 5),
            (0.75, True, 4),
            (0.5, True, 3),
            (0.2, True, 3),  # correct never grades below the pass mark
            (0.45, False, 2),
            (0.3, False, 2),
            (0.1, False, 1),
            (0.0, False, 1),
            (0.95, False, 2),  # incorrect never grades above the fail mark
            (0.7, False, 2),
        ],
    )
    def test_production_score_grades(self, score, correct, expected):
        assert quality_for_outcome(outcome(PROD, correct, score=score)) == expected

    def test_out_of_range_score_is_clamped(self):
        assert quality_for_outcome(outcome(PROD, True, score=1.7)) == 5
        assert quality_for_outcome(outcome(PROD, False, score=-0.5)) == 1

    def test_higher_score_never_lower_grade(self):
        for correct in (True, False):
            grades = [
                quality_for_outcome(outcome(PROD, correct, score=s / 20)) for s in range(21)
            ]
            assert grades == sorted(grades)


class TestRecordAttempt:
    def test_starts_from_empty_counters(self):
        perf = record_attempt(None, outcome(PROD, False, at=NOW))
        assert perf.production == SkillCounter(0, 1, NOW)
        assert perf.recognition == SkillCounter()


class TestMasteryLevel:
    def test_none_without_performance(self, make_item):
        assert mastery_level(make_item()) is None

    def test_none_with_empty_buckets(self, make_item):
        assert mastery_level(make_item(performance=counters())) is None

    def test_weighted_blend(self, make_item):
        item = make_item(performance=counters(rec=(8, 2), prod=(7, 3)))
        # 0.8 * 0.4 + 0.7 * 0.6
        assert mastery_level(item) == pytest.approx(0.74)

    def test_recognition_only(self, make_item):
        item = make_item(performance=counters(rec=(9, 1)))
        assert mastery_level(item) == pytest.approx(0.9)

    def test_production_only(self, make_item):
        item = make_item(performance=counters(prod=(4, 1)))
        assert mastery_level(item) == pytest.approx(0.8)

    def test_all_wrong_is_zero_not_none(self, make_item):
        item = make_item(performance=counters(rec=(0, 3)))
        assert mastery_level(item) == 0.0


class TestIsMastered:
    def test_below_accuracy_threshold(self, make_item):
        item = make_item(performance=counters(rec=(3, 2), prod=(2, 3)), schedule=schedule(streak=5))
        assert is_mastered(item) is False

    def test_accuracy_and_durability(self, make_item):
        item = make_item(performance=counters(rec=(4, 1), prod=(3, 0)), schedule=schedule(streak=3))
        assert is_mastered(item) is True

    def test_streak_too_short(self, make_item):
        item = make_item(performance=counters(rec=(4, 1), prod=(3, 0)), schedule=schedule(streak=2))
        assert is_mastered(item) is False

    def test_single_lucky_answer(self, make_item):
        update = apply_outcome(make_item(), outcome(PROD, True, score=1.0))
        item = make_item(schedule=update.schedule, performance=update.performance)
        assert mastery_level(item) == 1.0
        assert is_mastered(item) is False

    def test_no_schedule(self, make_item):
        item = make_item(performance=counters(rec=(10, 0)))
        assert is_mastered(item) is False


class TestDueQueries:
    def test_days_until_due_without_schedule(self, make_item):
        assert days_until_due(make_item(), NOW) is None

    def test_days_until_due_future(self, make_item):
        item = make_item(schedule=schedule(due_at=NOW + timedelta(days=2)))
        assert days_until_due(item, NOW) == pytest.approx(2.0)

    def test_days_until_due_overdue(self, make_item):
        item = make_item(schedule=schedule(due_at=NOW - timedelta(hours=36)))
        assert days_until_due(item, NOW) == pytest.approx(-1.5)

    def test_is_due(self, make_item):
        assert is_due(make_item(), NOW) is False
        assert is_due(make_item(schedule=schedule(due_at=NOW - timedelta(days=1))), NOW) is True
        assert is_due(make_item(schedule=schedule(due_at=NOW)), NOW) is True
        assert is_due(make_item(schedule=schedule(due_at=NOW + timedelta(days=1))), NOW) is False


class TestPerformanceSummary:
    def test_summary_fields(self, make_item):
        item = make_item(
            performance=counters(rec=(8, 2), prod=(0, 0)),
            schedule=schedule(streak=3, due_at=NOW + timedelta(hours=30)),
        )
        summary = performance_summary(item, NOW)

        assert summary["recognition"] == {
            "correct": 8,
            "incorrect": 2,
            "total": 10,
            "accuracy": pytest.approx(0.8),
        }
        assert summary["production"]["accuracy"] is None
        assert summary["overall"]["mastery"] == pytest.approx(0.8)
        assert summary["overall"]["is_mastered"] is True
        assert summary["overall"]["streak"] == 3
        assert summary["overall"]["days_until_due"] == 1.2
        assert summary["overall"]["is_due"] is False

    def test_summary_for_fresh_item(self, make_item):
        summary = performance_summary(make_item(), NOW)
        assert summary["overall"]["mastery"] is None
        assert summary["overall"]["days_until_due"] is None
        assert summary["recognition"]["total"] == 0
