"""Centralized constants for the Mneme scheduling core.

All magic numbers and scheduling defaults live here so every layer
imports from a single source of truth.
"""

# ---------- Interval Engine ----------
ALGORITHM_ID = "sm2"
MIN_QUALITY = 0
MAX_QUALITY = 5
SUCCESS_QUALITY = 3
INITIAL_EASE_FACTOR = 2.5
MIN_EASE_FACTOR = 1.3
DEFAULT_MIN_INTERVAL_HOURS = 24
GRADUATION_MULTIPLIER = 6
EASE_DECIMALS = 4

# ---------- Outcome Classifier ----------
QUALITY_CORRECT = 4
QUALITY_INCORRECT = 2

# (lower bound of score, quality), checked top-down
PRODUCTION_SCORE_GRADES = (
    (0.9, 5),
    (0.7, 4),
    (0.5, 3),
    (0.3, 2),
    (0.0, 1),
)

# ---------- Mastery ----------
RECOGNITION_WEIGHT = 0.4
PRODUCTION_WEIGHT = 0.6
MASTERY_THRESHOLD = 0.8
MASTERY_STREAK = 3

# ---------- Queue Builder ----------
DEFAULT_UPCOMING_WINDOW_HOURS = 12

# ---------- Progress ----------
DEFAULT_LEARNED_STREAK_THRESHOLD = 3

HOURS_PER_DAY = 24
SECONDS_PER_HOUR = 3600
