"""
Configuration constants for the 12/8/8 progression scheme.

All adjustable parameters are centralized here for easy tuning.
"""

from typing import Final

# =============================================================================
# ROUTINE SHAPE
# =============================================================================

SETS_PER_SLOT: Final[int] = 3  # Every slot is trained for exactly three sets

# =============================================================================
# REP TARGETS
# =============================================================================

DEFAULT_TARGET_REPS: Final[int] = 8  # First time at a weight
FOLLOWUP_TARGET_REPS: Final[int] = 8  # Sets 2 and 3 are never adaptive
MAX_REPS_INPUT: Final[int] = 13  # The "12+" button logs 13

# =============================================================================
# PROGRESSION MILESTONE (12/8/8)
# =============================================================================

MILESTONE_MIN_REPS: Final[tuple[int, int, int]] = (12, 8, 8)

# =============================================================================
# REST TIMER
# =============================================================================

TIMER_TICK_SECONDS: Final[float] = 1.0  # Countdown refresh interval
LAST_SET_LABEL: Final[str] = "Last Set!"
REST_OVER_TITLE: Final[str] = "Rest time is over!"

# =============================================================================
# STORAGE
# =============================================================================

DATA_DIR_NAME: Final[str] = ".aesthetic-progression"
ACTIVE_WORKOUT_FILENAME: Final[str] = "active_workout.json"
DEFAULT_USER_ID: Final[str] = "local"
