"""
YAML → Catalog loader.

Loads exercise definitions from ``exercises.yaml`` and routines from
``templates.yaml`` in the bundled ``src/aesthetic_progression/data/``
directory.

User overrides: place files with the same names in
``~/.aesthetic-progression/``. A user file is deep-merged over the bundled
one, so only changed keys need to be listed. Ids that do not exist in the
bundled files are added as new exercises / templates.

Usage (internal — called by registry.py):
    from .loader import load_catalog_from_yaml
    catalog = load_catalog_from_yaml()   # Catalog or None on failure
"""

from __future__ import annotations

import logging
import os
import warnings
from pathlib import Path

import yaml

from ..config import DATA_DIR_NAME
from .base import Catalog, ExerciseDefinition, RoutineExerciseSlot, WorkoutTemplate

logger = logging.getLogger(__name__)

EXERCISES_FILENAME = "exercises.yaml"
TEMPLATES_FILENAME = "templates.yaml"

_REQUIRED_EXERCISE_FIELDS: frozenset[str] = frozenset(
    {"name", "muscle_group", "default_rest_seconds"}
)

_REQUIRED_TEMPLATE_FIELDS: frozenset[str] = frozenset({"name", "slots"})


def exercise_from_dict(exercise_id: str, d: dict) -> ExerciseDefinition:
    """Convert a raw dict (from YAML) to an ExerciseDefinition.

    Raises ValueError if any required field is absent.
    """
    missing = _REQUIRED_EXERCISE_FIELDS - set(d)
    if missing:
        raise ValueError(f"ExerciseDefinition missing fields: {sorted(missing)}")
    return ExerciseDefinition(
        id=str(exercise_id),
        name=str(d["name"]),
        muscle_group=str(d["muscle_group"]),
        default_rest_seconds=int(d["default_rest_seconds"]),
    )


def template_from_dict(template_id: str, d: dict) -> WorkoutTemplate:
    """Convert a raw dict (from YAML) to a WorkoutTemplate.

    Slots without an explicit ``order`` take their 1-based list position.
    Slots are sorted by order so the template is always in training sequence.
    """
    missing = _REQUIRED_TEMPLATE_FIELDS - set(d)
    if missing:
        raise ValueError(f"WorkoutTemplate missing fields: {sorted(missing)}")

    slots: list[RoutineExerciseSlot] = []
    for position, raw in enumerate(d["slots"] or [], 1):
        if not isinstance(raw, dict) or "id" not in raw or "exercise" not in raw:
            raise ValueError(f"slot #{position} needs 'id' and 'exercise' keys")
        slots.append(
            RoutineExerciseSlot(
                id=str(raw["id"]),
                exercise_definition_id=str(raw["exercise"]),
                order=int(raw.get("order", position)),
            )
        )
    slots.sort(key=lambda s: s.order)

    return WorkoutTemplate(id=str(template_id), name=str(d["name"]), slots=tuple(slots))


def _load_yaml_file(path: Path) -> dict:
    """Load a YAML mapping; return {} on any read or parse error."""
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
            return data if isinstance(data, dict) else {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Could not read catalog file %s: %s", path, exc)
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (non-destructive to base)."""
    result = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(result.get(k), dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def get_bundled_catalog_dir() -> Path | None:
    """Return path to the bundled data/ directory, or None if not found."""
    # loader.py lives at src/aesthetic_progression/core/catalog/loader.py
    # three levels up → src/aesthetic_progression/
    candidate = Path(__file__).parent.parent.parent / "data"
    return candidate if candidate.is_dir() else None


def get_user_catalog_dir() -> Path | None:
    """Return ~/.aesthetic-progression/ if it exists, else None."""
    home = Path(os.environ.get("HOME", "~")).expanduser()
    p = home / DATA_DIR_NAME
    return p if p.is_dir() else None


def _merged_section(filename: str, dirs: list[Path]) -> dict:
    merged: dict = {}
    for directory in dirs:
        path = directory / filename
        if path.exists():
            merged = _deep_merge(merged, _load_yaml_file(path))
    return merged


def load_catalog_from_yaml(
    bundled_dir: Path | None = None,
    user_dir: Path | None = None,
) -> Catalog | None:
    """Return a Catalog built from the bundled and user YAML files.

    Exercises or templates that fail validation are skipped with a warning;
    a template that references a skipped or unknown exercise is skipped too.

    Returns None (rather than raising) when nothing could be loaded so the
    registry can report a single clear error.
    """
    if bundled_dir is None:
        bundled_dir = get_bundled_catalog_dir()
    if user_dir is None:
        user_dir = get_user_catalog_dir()

    dirs = [d for d in (bundled_dir, user_dir) if d is not None]
    if not dirs:
        return None

    exercises: dict[str, ExerciseDefinition] = {}
    for exercise_id, raw in _merged_section(EXERCISES_FILENAME, dirs).items():
        try:
            if not isinstance(raw, dict):
                raise ValueError("entry must be a mapping")
            exercises[str(exercise_id)] = exercise_from_dict(str(exercise_id), raw)
        except ValueError as exc:
            warnings.warn(
                f"aesthetic-progression: skipping exercise '{exercise_id}' — {exc}",
                stacklevel=2,
            )

    templates: list[WorkoutTemplate] = []
    for template_id, raw in _merged_section(TEMPLATES_FILENAME, dirs).items():
        try:
            if not isinstance(raw, dict):
                raise ValueError("entry must be a mapping")
            template = template_from_dict(str(template_id), raw)
            unknown = [
                s.exercise_definition_id
                for s in template.slots
                if s.exercise_definition_id not in exercises
            ]
            if unknown:
                raise ValueError(f"unknown exercises {unknown}")
            templates.append(template)
        except ValueError as exc:
            warnings.warn(
                f"aesthetic-progression: skipping template '{template_id}' — {exc}",
                stacklevel=2,
            )

    if not exercises or not templates:
        return None

    return Catalog(exercises=exercises, templates=tuple(templates))
