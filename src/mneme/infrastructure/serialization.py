"""
Conversion between domain models and plain dicts for storage and transport.

Timestamps are ISO-8601 strings; absent optional fields are omitted.
Timestamps without an offset are read as UTC.
"""

from datetime import datetime, timezone
from typing import Any

from mneme.domain.constants import ALGORITHM_ID
from mneme.domain.errors import StoreError
from mneme.domain.srs.models import (
    DrillSession,
    PerformanceCounters,
    ScheduleState,
    SkillCounter,
    VocabItem,
)


def ensure_timezone(value: datetime) -> datetime:
    """Attach UTC to a naive datetime; aware values pass through unchanged."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _ts(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_ts(value: Any) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        # PyYAML already turns unquoted timestamps into datetimes
        return ensure_timezone(value)
    try:
        return ensure_timezone(datetime.fromisoformat(str(value)))
    except ValueError as e:
        raise StoreError(f"Invalid timestamp: {value!r}") from e


def _require_ts(value: Any, name: str) -> datetime:
    parsed = _parse_ts(value)
    if parsed is None:
        raise StoreError(f"Missing required timestamp '{name}'")
    return parsed


# ---------- ScheduleState ----------


def schedule_to_dict(schedule: ScheduleState) -> dict[str, Any]:
    return {
        "algorithm": schedule.algorithm,
        "streak": schedule.streak,
        "interval_hours": schedule.interval_hours,
        "ease_factor": schedule.ease_factor,
        "due_at": _ts(schedule.due_at),
        "last_reviewed_at": _ts(schedule.last_reviewed_at),
    }


def schedule_from_dict(data: dict[str, Any]) -> ScheduleState:
    try:
        return ScheduleState(
            streak=int(data["streak"]),
            interval_hours=data["interval_hours"],
            ease_factor=float(data["ease_factor"]),
            due_at=_require_ts(data.get("due_at"), "due_at"),
            last_reviewed_at=_parse_ts(data.get("last_reviewed_at")),
            algorithm=data.get("algorithm") or ALGORITHM_ID,
        )
    except (KeyError, TypeError, ValueError) as e:
        raise StoreError(f"Malformed schedule: {e}") from e


# ---------- PerformanceCounters ----------


def _counter_to_dict(counter: SkillCounter) -> dict[str, Any]:
    return {
        "correct_count": counter.correct_count,
        "incorrect_count": counter.incorrect_count,
        "last_attempt_at": _ts(counter.last_attempt_at),
    }


def _counter_from_dict(data: dict[str, Any] | None) -> SkillCounter:
    if not data:
        return SkillCounter()
    return SkillCounter(
        correct_count=int(data.get("correct_count", 0)),
        incorrect_count=int(data.get("incorrect_count", 0)),
        last_attempt_at=_parse_ts(data.get("last_attempt_at")),
    )


def performance_to_dict(performance: PerformanceCounters) -> dict[str, Any]:
    return {
        "recognition": _counter_to_dict(performance.recognition),
        "production": _counter_to_dict(performance.production),
    }


def performance_from_dict(data: dict[str, Any]) -> PerformanceCounters:
    try:
        return PerformanceCounters(
            recognition=_counter_from_dict(data.get("recognition")),
            production=_counter_from_dict(data.get("production")),
        )
    except (TypeError, ValueError) as e:
        raise StoreError(f"Malformed performance counters: {e}") from e


# ---------- VocabItem ----------


def item_to_dict(item: VocabItem) -> dict[str, Any]:
    data: dict[str, Any] = {
        "id": item.id,
        "term": item.term,
        "meaning": item.meaning,
        "created_at": _ts(item.created_at),
    }
    if item.schedule is not None:
        data["schedule"] = schedule_to_dict(item.schedule)
    if item.performance is not None:
        data["performance"] = performance_to_dict(item.performance)
    return data


def item_from_dict(data: dict[str, Any]) -> VocabItem:
    if not isinstance(data, dict) or "id" not in data:
        raise StoreError(f"Malformed item entry: {data!r}")

    schedule = data.get("schedule")
    performance = data.get("performance")
    return VocabItem(
        id=str(data["id"]),
        term=str(data.get("term", "")),
        meaning=str(data.get("meaning") or ""),
        created_at=_require_ts(data.get("created_at"), "created_at"),
        schedule=schedule_from_dict(schedule) if schedule else None,
        performance=performance_from_dict(performance) if performance else None,
    )


# ---------- DrillSession ----------


def session_to_dict(session: DrillSession) -> dict[str, Any]:
    data: dict[str, Any] = {
        "started_at": _ts(session.started_at),
        "ended_at": _ts(session.ended_at),
        "correct_count": session.correct_count,
        "incorrect_count": session.incorrect_count,
        "score": session.score,
    }
    if session.id is not None:
        data["id"] = session.id
    return data


def session_from_dict(data: dict[str, Any]) -> DrillSession:
    if not isinstance(data, dict):
        raise StoreError(f"Malformed session entry: {data!r}")
    try:
        return DrillSession(
            started_at=_require_ts(data.get("started_at"), "started_at"),
            ended_at=_require_ts(data.get("ended_at"), "ended_at"),
            correct_count=int(data.get("correct_count", 0)),
            incorrect_count=int(data.get("incorrect_count", 0)),
            score=float(data.get("score", 0.0)),
            id=data.get("id"),
        )
    except (TypeError, ValueError) as e:
        raise StoreError(f"Malformed session: {e}") from e
