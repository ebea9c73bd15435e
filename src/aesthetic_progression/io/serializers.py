"""
JSON serialization for workout data models.

Handles conversion between dataclasses and JSON-compatible dicts. Field
names on disk are camelCase so records stay readable by the web client
that shares the same data (``weight_kg`` is the one snake_case field it
has always used).
"""

import json
from typing import Any

from ..core.catalog.base import RoutineExerciseSlot, WorkoutTemplate
from ..core.models import ActiveWorkoutState, SetLog, SlotLogs, WorkoutSession


class ValidationError(ValueError):
    """Raised when data validation fails."""

    pass


def _require(data: Any, key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(f"{where} must be an object, got {type(data).__name__}")
    if key not in data:
        raise ValidationError(f"{where} is missing '{key}'")
    return data[key]


def set_log_to_dict(log: SetLog) -> dict[str, Any]:
    """
    Convert SetLog to JSON-compatible dict.

    Args:
        log: SetLog to convert

    Returns:
        Dict representation
    """
    return {
        "setNumber": log.set_number,
        "weight_kg": log.weight_kg,
        "repetitions": log.repetitions,
    }


def dict_to_set_log(data: dict[str, Any]) -> SetLog:
    """
    Convert dict to SetLog.

    Raises:
        ValidationError: If data is invalid
    """
    try:
        return SetLog(
            set_number=int(_require(data, "setNumber", "set log")),
            weight_kg=float(_require(data, "weight_kg", "set log")),
            repetitions=int(_require(data, "repetitions", "set log")),
        )
    except (TypeError, ValueError) as e:
        if isinstance(e, ValidationError):
            raise
        raise ValidationError(f"Invalid set log {data!r}: {e}") from e


def logs_to_dict(logs: SlotLogs) -> dict[str, list[dict[str, Any]]]:
    return {slot_id: [set_log_to_dict(log) for log in slot_logs] for slot_id, slot_logs in logs.items()}


def dict_to_logs(data: Any) -> SlotLogs:
    """Convert {slot_id: [set log dicts]} to SlotLogs."""
    if not isinstance(data, dict):
        raise ValidationError(f"logs must be an object, got {type(data).__name__}")
    result: SlotLogs = {}
    for slot_id, raw_logs in data.items():
        if not isinstance(raw_logs, list):
            raise ValidationError(f"logs for slot {slot_id!r} must be a list")
        result[str(slot_id)] = [dict_to_set_log(raw) for raw in raw_logs]
    return result


def workout_session_to_dict(session: WorkoutSession) -> dict[str, Any]:
    """
    Convert WorkoutSession to JSON-compatible dict.

    Args:
        session: WorkoutSession to convert

    Returns:
        Dict representation
    """
    return {
        "id": session.id,
        "templateId": session.template_id,
        "date": session.date,
        "logs": logs_to_dict(session.logs),
    }


def dict_to_workout_session(data: dict[str, Any]) -> WorkoutSession:
    """
    Convert dict to WorkoutSession.

    Raises:
        ValidationError: If data is invalid
    """
    session_id = _require(data, "id", "session")
    template_id = _require(data, "templateId", "session")
    date = _require(data, "date", "session")
    logs = dict_to_logs(data.get("logs", {}))
    try:
        return WorkoutSession(
            id=str(session_id),
            template_id=str(template_id),
            date=str(date),
            logs=logs,
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def session_to_json_line(session: WorkoutSession) -> str:
    """Serialize a session as one compact JSONL line."""
    return json.dumps(workout_session_to_dict(session), ensure_ascii=False, separators=(",", ":"))


def template_to_dict(template: WorkoutTemplate) -> dict[str, Any]:
    return {
        "id": template.id,
        "name": template.name,
        "exercises": [
            {
                "id": slot.id,
                "exerciseDefinitionId": slot.exercise_definition_id,
                "order": slot.order,
            }
            for slot in template.slots
        ],
    }


def dict_to_template(data: dict[str, Any]) -> WorkoutTemplate:
    """
    Convert dict to WorkoutTemplate.

    Raises:
        ValidationError: If data is invalid
    """
    raw_slots = _require(data, "exercises", "template")
    if not isinstance(raw_slots, list):
        raise ValidationError("template exercises must be a list")
    try:
        slots = tuple(
            RoutineExerciseSlot(
                id=str(_require(raw, "id", "template slot")),
                exercise_definition_id=str(_require(raw, "exerciseDefinitionId", "template slot")),
                order=int(_require(raw, "order", "template slot")),
            )
            for raw in raw_slots
        )
        return WorkoutTemplate(
            id=str(_require(data, "id", "template")),
            name=str(_require(data, "name", "template")),
            slots=slots,
        )
    except (TypeError, ValueError) as e:
        if isinstance(e, ValidationError):
            raise
        raise ValidationError(f"Invalid template: {e}") from e


def active_state_to_dict(state: ActiveWorkoutState) -> dict[str, Any]:
    """
    Convert ActiveWorkoutState to JSON-compatible dict.

    The template is embedded so a resumed workout keeps its routine even if
    the catalog changed in between.
    """
    return {
        "template": template_to_dict(state.template),
        "sessionLogs": logs_to_dict(state.session_logs),
        "currentExerciseIndex": state.current_exercise_index,
        "currentSetIndex": state.current_set_index,
        "startTime": state.start_time,
        "timerEndTime": state.timer_end_time,
    }


def dict_to_active_state(data: dict[str, Any]) -> ActiveWorkoutState:
    """
    Convert dict to ActiveWorkoutState.

    Raises:
        ValidationError: If data is invalid
    """
    template = dict_to_template(_require(data, "template", "active workout"))
    logs = dict_to_logs(data.get("sessionLogs", {}))
    timer_end_time = data.get("timerEndTime")
    try:
        return ActiveWorkoutState(
            template=template,
            session_logs=logs,
            current_exercise_index=int(_require(data, "currentExerciseIndex", "active workout")),
            current_set_index=int(_require(data, "currentSetIndex", "active workout")),
            start_time=str(data.get("startTime") or ""),
            timer_end_time=int(timer_end_time) if timer_end_time is not None else None,
        )
    except (TypeError, ValueError) as e:
        if isinstance(e, ValidationError):
            raise
        raise ValidationError(f"Invalid active workout: {e}") from e
