"""
Base types for the exercise catalog.

ExerciseDefinition describes one movement; WorkoutTemplate is a fixed,
ordered sequence of RoutineExerciseSlot entries that reference those
definitions. Catalog bundles both and precomputes the slot → exercise
lookup the target estimator relies on.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ExerciseDefinition:
    """Static metadata for one exercise."""

    id: str                  # e.g. "press_pecho_plano_maquina"
    name: str                # display name, also the progression key
    muscle_group: str        # e.g. "Pecho"
    default_rest_seconds: int

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("ExerciseDefinition.id must be non-empty")
        if not self.name:
            raise ValueError(f"Exercise {self.id!r} must have a name")
        if self.default_rest_seconds < 0:
            raise ValueError(
                f"Exercise {self.id!r}: default_rest_seconds must be non-negative"
            )


@dataclass(frozen=True)
class RoutineExerciseSlot:
    """
    One exercise position within a template.

    The slot id (not the exercise id) keys every log, so a template can use
    the same exercise twice (left/right arm) without mixing the records.
    """

    id: str
    exercise_definition_id: str
    order: int


@dataclass(frozen=True)
class WorkoutTemplate:
    """A named, ordered routine."""

    id: str
    name: str
    slots: tuple[RoutineExerciseSlot, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for slot in self.slots:
            if slot.id in seen:
                raise ValueError(f"Template {self.id!r}: duplicate slot id {slot.id!r}")
            seen.add(slot.id)

    def slot_at(self, index: int) -> RoutineExerciseSlot | None:
        """Return the slot at a 0-based position, or None past the end."""
        if 0 <= index < len(self.slots):
            return self.slots[index]
        return None


@dataclass(frozen=True)
class Catalog:
    """
    Read-only exercise and template configuration.

    ``slot_exercises`` maps every slot id across all templates to its
    ExerciseDefinition; it is built once in ``__post_init__``.
    """

    exercises: dict[str, ExerciseDefinition]
    templates: tuple[WorkoutTemplate, ...]
    slot_exercises: dict[str, ExerciseDefinition] = field(
        default_factory=dict, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        lookup: dict[str, ExerciseDefinition] = {}
        for template in self.templates:
            for slot in template.slots:
                exercise = self.exercises.get(slot.exercise_definition_id)
                if exercise is None:
                    raise ValueError(
                        f"Template {template.id!r}, slot {slot.id!r}: "
                        f"unknown exercise {slot.exercise_definition_id!r}"
                    )
                # First template wins when a slot id is reused across templates
                lookup.setdefault(slot.id, exercise)
        # Frozen dataclass: bypass __setattr__ for the derived field
        object.__setattr__(self, "slot_exercises", lookup)

    def get_template(self, template_id: str) -> WorkoutTemplate:
        """
        Return the template with the given id.

        Raises:
            ValueError: If template_id is not in the catalog
        """
        for template in self.templates:
            if template.id == template_id:
                return template
        valid = ", ".join(t.id for t in self.templates)
        raise ValueError(f"Unknown template '{template_id}'. Valid IDs: {valid}")

    def exercise_for_slot(self, slot: RoutineExerciseSlot) -> ExerciseDefinition:
        return self.exercises[slot.exercise_definition_id]

    def exercise_for_slot_id(self, slot_id: str) -> ExerciseDefinition | None:
        """Look up a slot id from any template; None for unknown ids."""
        return self.slot_exercises.get(slot_id)

    def exercise_name_for_slot_id(self, slot_id: str) -> str | None:
        exercise = self.slot_exercises.get(slot_id)
        return exercise.name if exercise is not None else None
