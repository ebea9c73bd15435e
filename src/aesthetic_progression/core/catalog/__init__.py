"""
Exercise catalog for aesthetic-progression.

Exercises and routine templates are static configuration loaded from YAML
and shared read-only by every workout.
"""

from .base import Catalog, ExerciseDefinition, RoutineExerciseSlot, WorkoutTemplate
from .registry import get_catalog

__all__ = [
    "Catalog",
    "ExerciseDefinition",
    "RoutineExerciseSlot",
    "WorkoutTemplate",
    "get_catalog",
]
