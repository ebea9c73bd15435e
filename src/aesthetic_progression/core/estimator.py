"""
Target-rep estimator for the 12/8/8 scheme.

Only the first set of a slot is performance-adaptive; sets 2 and 3 always
aim for a fixed 8 reps. The first-set target ratchets: each time the lifter
matches or beats their best at a weight, the next target is one rep higher.

Two lookups feed the first-set target:

  Historic max: every logged set, from any template, whose slot maps to an
    exercise with the same *name* and whose weight equals the entered weight.
    Matching by name lets left/right variants share one record.

  Last time: the most recent session of the *same template*, restricted to
    the *same slot id* at the same weight.

All functions are pure.
"""

from typing import Sequence

from .catalog.base import Catalog, ExerciseDefinition
from .config import DEFAULT_TARGET_REPS, FOLLOWUP_TARGET_REPS
from .models import SetLog, WorkoutSession


def sessions_newest_first(history: Sequence[WorkoutSession]) -> list[WorkoutSession]:
    """Return sessions sorted by completion timestamp, newest first."""
    return sorted(history, key=lambda s: s.completed_at, reverse=True)


def latest_session_for_template(
    history: Sequence[WorkoutSession],
    template_id: str,
    exclude_session_id: str | None = None,
) -> WorkoutSession | None:
    """
    Most recent session recorded for a template.

    Args:
        history: Completed sessions in any order
        template_id: Template to match
        exclude_session_id: Session to ignore (e.g. the one being summarised)

    Returns:
        Latest matching session or None
    """
    candidates = [
        s for s in history
        if s.template_id == template_id and s.id != exclude_session_id
    ]
    if not candidates:
        return None
    return max(candidates, key=lambda s: s.completed_at)


def logs_for_exercise_at_weight(
    history: Sequence[WorkoutSession],
    catalog: Catalog,
    exercise_name: str,
    weight_kg: float,
) -> list[SetLog]:
    """Every historic set of the named exercise performed at exactly weight_kg."""
    matches: list[SetLog] = []
    for session in history:
        for slot_id, slot_logs in session.logs.items():
            if catalog.exercise_name_for_slot_id(slot_id) != exercise_name:
                continue
            matches.extend(log for log in slot_logs if log.weight_kg == weight_kg)
    return matches


def suggested_weight(
    history: Sequence[WorkoutSession],
    template_id: str,
    slot_id: str,
) -> float | None:
    """
    Weight proposed when a slot begins.

    The set-1 weight from the most recent session of the same template for
    the same slot, or None if that slot has never been logged there.
    """
    last = latest_session_for_template(history, template_id)
    if last is None:
        return None
    first = last.first_set(slot_id)
    return first.weight_kg if first is not None else None


def estimate_target_reps(
    exercise: ExerciseDefinition,
    weight_kg: float | None,
    history: Sequence[WorkoutSession],
    set_index: int,
    *,
    catalog: Catalog,
    template_id: str,
    slot_id: str,
) -> int:
    """
    Rep goal for the set about to be performed.

    Args:
        exercise: Exercise of the current slot
        weight_kg: Weight entered for the current slot
        history: All completed sessions
        set_index: 0-based set within the slot
        catalog: Catalog used to resolve historic slot ids to exercise names
        template_id: Template of the active workout
        slot_id: Current slot id

    Returns:
        Positive rep target

    Raises:
        ValueError: If weight_kg is None (callers must collect a weight first)
    """
    if weight_kg is None:
        raise ValueError("A weight must be chosen before estimating the rep target")

    if set_index > 0:
        return FOLLOWUP_TARGET_REPS

    at_weight = logs_for_exercise_at_weight(history, catalog, exercise.name, weight_kg)
    if not at_weight:
        return DEFAULT_TARGET_REPS  # first time at this weight

    max_historic = max(log.repetitions for log in at_weight)

    last_s1_reps: int | None = None
    last = latest_session_for_template(history, template_id)
    if last is not None:
        last_at_weight = [
            log for log in last.logs.get(slot_id, []) if log.weight_kg == weight_kg
        ]
        if last_at_weight:
            last_s1_reps = last_at_weight[0].repetitions

    if last_s1_reps is not None and last_s1_reps >= max_historic:
        return last_s1_reps + 1
    return max_historic + 1


def is_progression_unlocked(slot_logs: Sequence[SetLog], minimums: Sequence[int]) -> bool:
    """
    True when the first len(minimums) sets each reach their minimum reps.

    Only minimums are checked: 12/8/9 unlocks just like 12/8/8.
    """
    if len(slot_logs) < len(minimums):
        return False
    return all(log.repetitions >= m for log, m in zip(slot_logs, minimums))
