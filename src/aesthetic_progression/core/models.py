"""
Data models for aesthetic-progression.

Set logs, finished sessions and the single in-progress workout. Catalog
types (exercises, slots, templates) live in ``core.catalog.base``.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone

from .catalog.base import WorkoutTemplate
from .config import MAX_REPS_INPUT, SETS_PER_SLOT

SlotLogs = dict[str, list["SetLog"]]


def parse_timestamp(value: str) -> datetime:
    """
    Parse an ISO-8601 timestamp into an aware datetime.

    Naive timestamps are taken to be UTC so that sessions written by older
    versions still sort against new ones.

    Raises:
        ValueError: If the string is not ISO-8601
    """
    dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_timestamp(epoch_seconds: float) -> str:
    """Epoch seconds → ISO-8601 UTC string with millisecond precision."""
    return datetime.fromtimestamp(epoch_seconds, tz=timezone.utc).isoformat(
        timespec="milliseconds"
    )


@dataclass(frozen=True)
class SetLog:
    """
    One logged set.

    Created exactly once when the set is logged; history edits build a new
    instance rather than mutating this one.
    """

    set_number: int  # 1-based within its slot
    weight_kg: float
    repetitions: int  # 13 means "12+"

    def __post_init__(self) -> None:
        """Validate set data."""
        if not 1 <= self.set_number <= SETS_PER_SLOT:
            raise ValueError(
                f"set_number must be between 1 and {SETS_PER_SLOT}, got {self.set_number}"
            )
        if self.weight_kg < 0:
            raise ValueError("weight_kg must be non-negative")
        if not 1 <= self.repetitions <= MAX_REPS_INPUT:
            raise ValueError(
                f"repetitions must be between 1 and {MAX_REPS_INPUT}, got {self.repetitions}"
            )


def _validate_slot_logs(logs: SlotLogs) -> None:
    for slot_id, slot_logs in logs.items():
        numbers = [log.set_number for log in slot_logs]
        if numbers != sorted(set(numbers)):
            raise ValueError(
                f"Logs for slot {slot_id!r} must have unique, increasing set numbers: {numbers}"
            )


@dataclass
class WorkoutSession:
    """
    Durable record of one completed workout.

    ``logs`` is keyed by routine slot id, not by exercise id, so left/right
    variants of the same exercise keep separate lists.
    """

    id: str
    template_id: str
    date: str  # ISO-8601 completion timestamp
    logs: SlotLogs = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate session data."""
        if not self.id:
            raise ValueError("session id must be non-empty")
        try:
            parse_timestamp(self.date)
        except ValueError as e:
            raise ValueError(f"Invalid session date: {self.date!r}") from e
        _validate_slot_logs(self.logs)

    @property
    def completed_at(self) -> datetime:
        return parse_timestamp(self.date)

    def first_set(self, slot_id: str) -> SetLog | None:
        """Return the first logged set for a slot, or None if the slot is absent."""
        slot_logs = self.logs.get(slot_id)
        return slot_logs[0] if slot_logs else None

    def with_repetitions(self, slot_id: str, set_index: int, repetitions: int) -> "WorkoutSession":
        """Return a copy with one set's reps replaced (0-based set_index)."""
        if slot_id not in self.logs:
            raise KeyError(f"Session {self.id} has no logs for slot {slot_id!r}")
        slot_logs = list(self.logs[slot_id])
        if not 0 <= set_index < len(slot_logs):
            raise IndexError(
                f"Set index {set_index} out of range (0–{len(slot_logs) - 1})"
            )
        slot_logs[set_index] = replace(slot_logs[set_index], repetitions=repetitions)
        return replace(self, logs={**self.logs, slot_id: slot_logs})

    def with_weight(self, slot_id: str, weight_kg: float) -> "WorkoutSession":
        """Return a copy with every set of one slot moved to a new weight."""
        if slot_id not in self.logs:
            raise KeyError(f"Session {self.id} has no logs for slot {slot_id!r}")
        slot_logs = [replace(log, weight_kg=weight_kg) for log in self.logs[slot_id]]
        return replace(self, logs={**self.logs, slot_id: slot_logs})


@dataclass
class ActiveWorkoutState:
    """
    The single in-progress workout.

    ``timer_end_time`` is an absolute epoch timestamp in milliseconds; the
    remaining rest is always derived from it, never from a tick counter.
    """

    template: WorkoutTemplate
    session_logs: SlotLogs = field(default_factory=dict)
    current_exercise_index: int = 0
    current_set_index: int = 0
    start_time: str = ""  # ISO-8601
    timer_end_time: int | None = None

    def __post_init__(self) -> None:
        """Validate position data."""
        if self.current_exercise_index < 0:
            raise ValueError("current_exercise_index must be non-negative")
        if not 0 <= self.current_set_index < SETS_PER_SLOT:
            raise ValueError(
                f"current_set_index must be between 0 and {SETS_PER_SLOT - 1}"
            )
        if self.start_time:
            parse_timestamp(self.start_time)
        _validate_slot_logs(self.session_logs)

    @property
    def is_exhausted(self) -> bool:
        """True once every slot of the template has been worked."""
        return self.current_exercise_index >= len(self.template.slots)

    @property
    def progress(self) -> float:
        """Fraction of slots finished (0.0–1.0)."""
        total = len(self.template.slots)
        if total == 0:
            return 1.0
        return min(self.current_exercise_index, total) / total

    def logs_for(self, slot_id: str) -> list[SetLog]:
        return self.session_logs.get(slot_id, [])
