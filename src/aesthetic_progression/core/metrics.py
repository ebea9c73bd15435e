"""
History metrics for the dashboard, history and summary views.

All functions are pure and typed for testability.
"""

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Literal, Sequence

from .catalog.base import Catalog
from .estimator import latest_session_for_template, sessions_newest_first
from .models import WorkoutSession

Trend = Literal["up", "down", "same", "new"]


@dataclass(frozen=True)
class SlotComparison:
    """Set-1 reps of one slot against the previous session of the template."""

    slot_id: str
    exercise_name: str
    weight_kg: float
    repetitions: list[int]
    first_set_reps: int
    previous_first_set_reps: int | None
    trend: Trend


def last_workout_dates(history: Sequence[WorkoutSession]) -> dict[str, str]:
    """
    Latest completion timestamp per template id.

    Args:
        history: Completed sessions in any order

    Returns:
        {template_id: ISO timestamp}
    """
    latest: dict[str, WorkoutSession] = {}
    for session in history:
        current = latest.get(session.template_id)
        if current is None or session.completed_at > current.completed_at:
            latest[session.template_id] = session
    return {template_id: s.date for template_id, s in latest.items()}


def week_start(day: date) -> date:
    """Monday of the week containing day."""
    return day - timedelta(days=day.weekday())


def group_by_week(history: Sequence[WorkoutSession]) -> list[tuple[date, list[WorkoutSession]]]:
    """
    Group sessions into Monday-based weeks, newest week and session first.

    Weeks are computed from the UTC completion timestamp.
    """
    weeks: dict[date, list[WorkoutSession]] = {}
    for session in sessions_newest_first(history):
        key = week_start(session.completed_at.date())
        weeks.setdefault(key, []).append(session)
    return sorted(weeks.items(), key=lambda item: item[0], reverse=True)


def _trend(current: int, previous: int | None) -> Trend:
    if previous is None:
        return "new"
    if current > previous:
        return "up"
    if current < previous:
        return "down"
    return "same"


def compare_first_sets(
    session: WorkoutSession,
    history: Sequence[WorkoutSession],
    catalog: Catalog,
) -> list[SlotComparison]:
    """
    Compare each slot's set-1 reps with the previous session of the same template.

    The session itself is excluded from the lookup, so this works both right
    after finishing and for a record already stored in history.
    """
    previous = latest_session_for_template(
        [s for s in history if s.completed_at <= session.completed_at],
        session.template_id,
        exclude_session_id=session.id,
    )

    rows: list[SlotComparison] = []
    for slot_id, slot_logs in session.logs.items():
        if not slot_logs:
            continue
        first = slot_logs[0]
        prev_first = previous.first_set(slot_id) if previous is not None else None
        prev_reps = prev_first.repetitions if prev_first is not None else None
        rows.append(
            SlotComparison(
                slot_id=slot_id,
                exercise_name=catalog.exercise_name_for_slot_id(slot_id) or slot_id,
                weight_kg=first.weight_kg,
                repetitions=[log.repetitions for log in slot_logs],
                first_set_reps=first.repetitions,
                previous_first_set_reps=prev_reps,
                trend=_trend(first.repetitions, prev_reps),
            )
        )
    return rows


def session_total_reps(session: WorkoutSession) -> int:
    """Sum of reps over every logged set."""
    return sum(log.repetitions for logs in session.logs.values() for log in logs)


def session_volume_kg(session: WorkoutSession) -> float:
    """Sum of weight × reps over every logged set."""
    return sum(log.weight_kg * log.repetitions for logs in session.logs.values() for log in logs)
