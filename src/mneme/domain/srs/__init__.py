# Domain SRS Package
from .models import (
    ActivityOutcome,
    ActivityType,
    DrillSession,
    PerformanceCounters,
    ProgressStats,
    ReviewResult,
    ScheduleState,
    SkillCounter,
    VocabItem,
)
from .ports import ItemRepository, SessionRepository

__all__ = [
    "ActivityOutcome",
    "ActivityType",
    "DrillSession",
    "PerformanceCounters",
    "ProgressStats",
    "ReviewResult",
    "ScheduleState",
    "SkillCounter",
    "VocabItem",
    "ItemRepository",
    "SessionRepository",
]
