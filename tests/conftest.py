"""Shared fixtures: a small catalog, a controllable clock and in-memory collaborators."""

from pathlib import Path

import pytest

from aesthetic_progression.core.catalog.base import (
    Catalog,
    ExerciseDefinition,
    RoutineExerciseSlot,
    WorkoutTemplate,
)
from aesthetic_progression.core.models import SetLog, WorkoutSession, format_timestamp
from aesthetic_progression.io.history_store import HistoryStore

T0 = 1_760_000_000.0  # 2025-10-09T08:53:20Z


class FakeClock:
    """Epoch-seconds clock advanced by hand."""

    def __init__(self, now: float = T0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class RecordingNotifier:
    def __init__(self):
        self.messages = []

    def post(self, message) -> None:
        self.messages.append(message)


class MemoryActiveStore:
    """ActiveWorkoutPersistence kept in a list so tests can inspect every save."""

    def __init__(self, state=None):
        self.state = state
        self.saves = []

    def save(self, state) -> None:
        self.saves.append(state)
        self.state = state

    def load(self):
        return self.state


def make_catalog() -> Catalog:
    exercises = {
        "press": ExerciseDefinition("press", "Chest Press", "Chest", 90),
        "fly": ExerciseDefinition("fly", "Pec Fly", "Chest", 60),
        "curl_r": ExerciseDefinition("curl_r", "One-arm Curl", "Biceps", 45),
        "curl_l": ExerciseDefinition("curl_l", "One-arm Curl", "Biceps", 45),
    }
    templates = (
        WorkoutTemplate(
            "t1",
            "Day A",
            (
                RoutineExerciseSlot("a1", "press", 1),
                RoutineExerciseSlot("a2", "fly", 2),
            ),
        ),
        WorkoutTemplate(
            "t2",
            "Day B",
            (
                RoutineExerciseSlot("b1", "press", 1),
                RoutineExerciseSlot("b2_r", "curl_r", 2),
                RoutineExerciseSlot("b2_l", "curl_l", 3),
            ),
        ),
    )
    return Catalog(exercises=exercises, templates=templates)


def make_session(
    session_id: str,
    template_id: str,
    when: float,
    logs: dict[str, list[tuple[float, int]]],
) -> WorkoutSession:
    """Session from {slot_id: [(weight, reps), ...]}."""
    return WorkoutSession(
        id=session_id,
        template_id=template_id,
        date=format_timestamp(when),
        logs={
            slot_id: [
                SetLog(set_number=i, weight_kg=w, repetitions=r)
                for i, (w, r) in enumerate(sets, 1)
            ]
            for slot_id, sets in logs.items()
        },
    )


@pytest.fixture
def catalog() -> Catalog:
    return make_catalog()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def active_store() -> MemoryActiveStore:
    return MemoryActiveStore()


@pytest.fixture
def history_store(tmp_path: Path) -> HistoryStore:
    return HistoryStore(tmp_path / "local_history.jsonl")
