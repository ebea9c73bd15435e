"""
Progression session controller.

Walks the user through a template slot by slot, three sets per slot:

    AWAITING_WEIGHT ──set_weight──▶ READY_TO_LOG ──log_set──▶ RESTING
          ▲                                                     │
          └──────────── rest over / skipped (next slot) ◀───────┘
                                                                │
                         final set of final slot ──▶ COMPLETE ◀─┘

The controller owns the one ActiveWorkoutState. Every mutation is written
through the persistence collaborator immediately, so an interrupted workout
can be resumed from disk. Finished sessions are handed to the history store
and the in-progress record is cleared.

Events (milestones, rest start/end, completion) go to an optional sink; the
rest notification goes to the notifier as a fire-and-forget message.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, Sequence, Union

from .catalog.base import Catalog, ExerciseDefinition, RoutineExerciseSlot, WorkoutTemplate
from .config import LAST_SET_LABEL, MILESTONE_MIN_REPS, SETS_PER_SLOT
from .estimator import estimate_target_reps, is_progression_unlocked, suggested_weight
from .models import ActiveWorkoutState, SetLog, WorkoutSession, format_timestamp, parse_timestamp
from .rest_timer import (
    Clock,
    NullNotifier,
    RestMessage,
    RestNotifier,
    RestTimer,
    ScheduledRest,
    now_ms,
)

logger = logging.getLogger(__name__)


class WorkoutState(str, Enum):
    IDLE = "idle"
    AWAITING_WEIGHT = "awaiting_weight"
    READY_TO_LOG = "ready_to_log"
    RESTING = "resting"
    COMPLETE = "complete"


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ProgressionUnlocked:
    """The 12/8/8 minimums were reached: add weight next time."""

    slot_id: str
    exercise_name: str
    repetitions: tuple[int, ...]


@dataclass(frozen=True)
class RestStarted:
    duration: int
    next_up: str
    timer_end_time: int


@dataclass(frozen=True)
class RestFinished:
    skipped: bool


@dataclass(frozen=True)
class TargetUpdated:
    """History changed while a weight was entered; the target was recomputed."""

    target_reps: int


@dataclass(frozen=True)
class WorkoutCompleted:
    session: WorkoutSession


WorkoutEvent = Union[ProgressionUnlocked, RestStarted, RestFinished, TargetUpdated, WorkoutCompleted]
EventSink = Callable[[WorkoutEvent], None]


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class HistorySource(Protocol):
    def list_sessions(self) -> list[WorkoutSession]:
        ...

    def subscribe(self, listener: Callable[[list[WorkoutSession]], None]) -> Callable[[], None]:
        ...

    def add(self, session: WorkoutSession) -> None:
        ...


class ActiveWorkoutPersistence(Protocol):
    def save(self, state: ActiveWorkoutState | None) -> None:
        ...

    def load(self) -> ActiveWorkoutState | None:
        ...


class WorkoutController:
    """State machine for one in-progress workout at a time."""

    def __init__(
        self,
        catalog: Catalog,
        history_store: HistorySource,
        active_store: ActiveWorkoutPersistence,
        notifier: RestNotifier | None = None,
        clock: Clock = time.time,
        on_event: EventSink | None = None,
    ):
        self.catalog = catalog
        self.history_store = history_store
        self.active_store = active_store
        self.notifier = notifier if notifier is not None else NullNotifier()
        self.clock = clock
        self.on_event = on_event

        self._timer = RestTimer(clock)
        self._rest: ScheduledRest | None = None
        self._active: ActiveWorkoutState | None = None
        self._weight: float | None = None
        self._last_completed: WorkoutSession | None = None
        self._history: list[WorkoutSession] = []
        self._unsubscribe = history_store.subscribe(self._on_history)

    # ── Read access ────────────────────────────────────────────────────────

    @property
    def active(self) -> ActiveWorkoutState | None:
        return self._active

    @property
    def weight(self) -> float | None:
        """Weight entered for the current slot (None until chosen)."""
        return self._weight

    @property
    def history(self) -> list[WorkoutSession]:
        return list(self._history)

    @property
    def last_completed(self) -> WorkoutSession | None:
        return self._last_completed

    @property
    def state(self) -> WorkoutState:
        if self._active is None:
            return WorkoutState.COMPLETE if self._last_completed is not None else WorkoutState.IDLE
        if self._timer.is_running:
            return WorkoutState.RESTING
        if self._weight is None:
            return WorkoutState.AWAITING_WEIGHT
        return WorkoutState.READY_TO_LOG

    def current_slot(self) -> RoutineExerciseSlot | None:
        if self._active is None:
            return None
        return self._active.template.slot_at(self._active.current_exercise_index)

    def current_exercise(self) -> ExerciseDefinition | None:
        slot = self.current_slot()
        return self.catalog.exercise_for_slot(slot) if slot is not None else None

    def suggested_weight(self) -> float | None:
        """Set-1 weight from the last session of this template for this slot."""
        slot = self.current_slot()
        if slot is None or self._active is None:
            return None
        return suggested_weight(self._history, self._active.template.id, slot.id)

    def target_reps(self) -> int | None:
        """Rep target for the next set, or None while no weight is chosen."""
        slot = self.current_slot()
        if slot is None or self._active is None or self._weight is None:
            return None
        return estimate_target_reps(
            self.catalog.exercise_for_slot(slot),
            self._weight,
            self._history,
            self._active.current_set_index,
            catalog=self.catalog,
            template_id=self._active.template.id,
            slot_id=slot.id,
        )

    def remaining_rest(self) -> int | None:
        return self._timer.remaining()

    def next_up(self) -> str:
        """What follows the rest period currently shown."""
        if self._active is None:
            return LAST_SET_LABEL
        slot = self.current_slot()
        if slot is None:
            return LAST_SET_LABEL
        if self._active.current_set_index > 0:
            return f"Set {self._active.current_set_index + 1}"
        return self.catalog.exercise_for_slot(slot).name

    def elapsed_seconds(self) -> int:
        """Seconds since the active workout started."""
        if self._active is None or not self._active.start_time:
            return 0
        started = parse_timestamp(self._active.start_time).timestamp()
        return max(0, int(self.clock() - started))

    # ── Lifecycle ──────────────────────────────────────────────────────────

    def start(self, template: WorkoutTemplate | str) -> ActiveWorkoutState:
        """
        Begin a new workout, replacing any workout already in progress.

        Args:
            template: Template or template id

        Returns:
            The new ActiveWorkoutState
        """
        if isinstance(template, str):
            template = self.catalog.get_template(template)
        if self._active is not None:
            logger.info("Replacing in-progress workout for template %s", self._active.template.id)

        self._timer.cancel()
        self._weight = None
        self._last_completed = None
        self._active = ActiveWorkoutState(
            template=template,
            start_time=format_timestamp(self.clock()),
        )
        self._persist()
        logger.info("Started workout %s (%d slots)", template.id, len(template.slots))
        return self._active

    def resume(self) -> ActiveWorkoutState | None:
        """
        Load the persisted workout, if any, and rebuild controller state.

        The rest timer is re-armed from the stored absolute expiry; a rest
        that ran out while the process was down is cleared immediately.
        """
        state = self.active_store.load()
        if state is None:
            return None
        if state.is_exhausted:
            logger.warning("Discarding persisted workout that has no slots left")
            self.active_store.save(None)
            return None
        missing = sorted(
            {
                slot.exercise_definition_id
                for slot in state.template.slots
                if slot.exercise_definition_id not in self.catalog.exercises
            }
        )
        if missing:
            logger.warning(
                "Discarding persisted workout %s: exercises no longer in the catalog: %s",
                state.template.id,
                ", ".join(missing),
            )
            self.active_store.save(None)
            return None

        self._timer.cancel()
        self._last_completed = None
        self._active = state
        self._weight = self._weight_in_progress(state)
        if state.timer_end_time is not None:
            self._rest = self._timer.arm(state.timer_end_time)
            self.tick()
        logger.info(
            "Resumed workout %s at slot %d set %d",
            state.template.id,
            state.current_exercise_index + 1,
            state.current_set_index + 1,
        )
        return self._active

    def discard(self) -> None:
        """Throw away the in-progress workout, in memory and on disk."""
        self._timer.cancel()
        self._active = None
        self._weight = None
        self.active_store.save(None)
        logger.info("Discarded in-progress workout")

    def close(self) -> None:
        """Stop listening for history updates and drop any pending rest."""
        self._timer.cancel()
        self._unsubscribe()

    # ── Transitions ────────────────────────────────────────────────────────

    def set_weight(self, weight_kg: float) -> None:
        """
        Choose the weight for the current slot.

        Raises:
            RuntimeError: If no workout is active
            ValueError: If the weight is negative or the slot is already underway
        """
        if self._active is None:
            raise RuntimeError("No active workout")
        if weight_kg < 0:
            raise ValueError("Weight must be non-negative")
        if self._active.current_set_index > 0 and self._weight is not None:
            raise ValueError("Weight is fixed once the first set of a slot is logged")
        self._weight = float(weight_kg)

    def accept_suggested_weight(self) -> float | None:
        """Use the previous session's weight ("same weight"); None if there is none."""
        suggestion = self.suggested_weight()
        if suggestion is not None:
            self.set_weight(suggestion)
        return suggestion

    def log_set(self, repetitions: int) -> WorkoutSession | None:
        """
        Record the current set and advance.

        Ignored (no state change) while no weight is chosen. Logging during
        rest ends the rest early.

        Args:
            repetitions: Reps performed (13 for "12+")

        Returns:
            The finished WorkoutSession if this was the final set, else None

        Raises:
            RuntimeError: If no workout is active
            ValueError: If repetitions is out of range
        """
        active = self._active
        if active is None:
            raise RuntimeError("No active workout")
        if self._weight is None:
            logger.debug("log_set ignored: no weight chosen")
            return None

        slot = active.template.slots[active.current_exercise_index]
        exercise = self.catalog.exercise_for_slot(slot)
        set_index = active.current_set_index

        new_log = SetLog(set_number=set_index + 1, weight_kg=self._weight, repetitions=repetitions)
        if self._timer.is_running:
            self._timer.cancel()
            self._emit(RestFinished(skipped=True))

        slot_logs = [*active.logs_for(slot.id), new_log]
        active.session_logs = {**active.session_logs, slot.id: slot_logs}

        if set_index == SETS_PER_SLOT - 1 and is_progression_unlocked(slot_logs, MILESTONE_MIN_REPS):
            logger.info("Progression unlocked for %s", exercise.name)
            self._emit(
                ProgressionUnlocked(
                    slot_id=slot.id,
                    exercise_name=exercise.name,
                    repetitions=tuple(log.repetitions for log in slot_logs),
                )
            )

        duration = exercise.default_rest_seconds
        timer_end_time = now_ms(self.clock) + duration * 1000
        next_up = self._next_up_after(active, set_index)
        self._post_rest(RestMessage(duration=duration, next_up=next_up))

        if set_index + 1 >= SETS_PER_SLOT:
            active.current_set_index = 0
            active.current_exercise_index += 1
            self._weight = None
        else:
            active.current_set_index = set_index + 1

        if active.is_exhausted:
            return self._finish(active)

        active.timer_end_time = timer_end_time
        self._persist()
        self._rest = self._timer.arm(timer_end_time)
        self._emit(RestStarted(duration=duration, next_up=next_up, timer_end_time=timer_end_time))
        return None

    def tick(self) -> int | None:
        """
        Recompute the remaining rest; called once per second while resting.

        Returns:
            Remaining seconds, 0 when the rest just ended, None if not resting
        """
        if self._active is None or self._rest is None:
            return None
        left = self._timer.poll(self._rest)
        if left == 0:
            self._end_rest(skipped=False)
        return left

    def wait_rest(
        self,
        on_tick: Callable[[int], None],
        sleep: Callable[[float], None] = time.sleep,
    ) -> bool:
        """
        Block until the current rest ends, calling on_tick with the seconds left.

        Returns:
            True if the rest ran out, False if nothing was armed or it was
            cancelled meanwhile
        """
        if self._active is None or self._rest is None:
            return False
        token = self._rest
        finished = self._timer.countdown(on_tick, sleep=sleep)
        if finished and token is self._rest:
            self._end_rest(skipped=False)
        return finished

    def skip_rest(self) -> None:
        """End the rest immediately; same effect as natural expiry."""
        if self._active is None or self._active.timer_end_time is None:
            return
        self._timer.cancel()
        self._end_rest(skipped=True)

    # ── Internals ──────────────────────────────────────────────────────────

    def _end_rest(self, skipped: bool) -> None:
        assert self._active is not None
        self._active.timer_end_time = None
        self._persist()
        self._emit(RestFinished(skipped=skipped))

    def _finish(self, active: ActiveWorkoutState) -> WorkoutSession:
        completed_at = format_timestamp(self.clock())
        session = WorkoutSession(
            id=f"session_{completed_at}",
            template_id=active.template.id,
            date=completed_at,
            logs={slot_id: list(logs) for slot_id, logs in active.session_logs.items()},
        )
        self._timer.cancel()
        self._active = None
        self._weight = None
        self._last_completed = session
        self.active_store.save(None)

        # Optimistic: the local snapshot includes the session before the store confirms it
        self._history = [session, *self._history]
        try:
            self.history_store.add(session)
        except (OSError, ValueError):
            logger.exception("Could not store finished session %s", session.id)

        logger.info("Workout %s complete: %d slots logged", active.template.id, len(session.logs))
        self._emit(WorkoutCompleted(session=session))
        return session

    def _next_up_after(self, active: ActiveWorkoutState, set_index: int) -> str:
        if set_index < SETS_PER_SLOT - 1:
            return f"Set {set_index + 2}"
        following = active.template.slot_at(active.current_exercise_index + 1)
        if following is None:
            return LAST_SET_LABEL
        return self.catalog.exercise_for_slot(following).name

    def _post_rest(self, message: RestMessage) -> None:
        try:
            self.notifier.post(message)
        except OSError:
            logger.warning("Rest notification could not be delivered", exc_info=True)

    def _persist(self) -> None:
        self.active_store.save(self._active)

    def _emit(self, event: WorkoutEvent) -> None:
        if self.on_event is not None:
            self.on_event(event)

    def _weight_in_progress(self, state: ActiveWorkoutState) -> float | None:
        """Mid-slot the weight is the one already logged for set 1."""
        if state.current_set_index == 0:
            return None
        slot = state.template.slot_at(state.current_exercise_index)
        if slot is None:
            return None
        logs = state.logs_for(slot.id)
        return logs[0].weight_kg if logs else None

    def _on_history(self, sessions: Sequence[WorkoutSession]) -> None:
        self._history = list(sessions)
        if self._weight is not None and self._active is not None:
            target = self.target_reps()
            if target is not None:
                self._emit(TargetUpdated(target_reps=target))
